"""BDD tests for callback reconciliation."""

from pytest_bdd import scenarios

scenarios("features/callback_reconciliation.feature")
