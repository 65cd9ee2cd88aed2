"""Pay Now callback reconciliation: IPN verification and order reconciliation.

Receives Netcash Pay Now notifications (server-to-server IPN and the
shopper's browser return trip), authenticates them against the processor
and the order store, and applies the payment outcome to the order once.
"""
