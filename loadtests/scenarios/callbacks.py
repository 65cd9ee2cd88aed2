"""Pay Now callback load test scenarios.

Stateful SequentialTaskSet journeys that seed an order through the dev
endpoint and then play the processor's side of the protocol: the IPN,
its redeliveries and the shopper's browser return trip. Needs the
service running with the in-memory order store.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    accepted_card_notification,
    accepted_eft_notification,
    cancelled_notification,
    declined_notification,
    pending_notification,
    seed_order_data,
    tampered_notification,
)
from loadtests.helpers.response import extract_error_detail, redirect_target
from loadtests.helpers.state import CallbackState


class _CallbackJourney(SequentialTaskSet):
    def on_start(self):
        self.state = CallbackState()

    def seed_order(self):
        payload = seed_order_data()
        with self.client.post(
            "/paynow/orders",
            json=payload,
            catch_response=True,
            name="POST /paynow/orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order = payload
            else:
                resp.failure(f"Seed order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def deliver(self, data: dict, name: str):
        with self.client.post(
            "/paynow/callback",
            data=data,
            allow_redirects=False,
            catch_response=True,
            name=name,
        ) as resp:
            target = redirect_target(resp)
            if target is None:
                resp.failure(f"Callback did not redirect: {resp.status_code}: {extract_error_detail(resp)}")
                return
            self.state.notification = data
            self.state.redirect_target = target
            self.state.deliveries += 1

    def expect_status(self, expected: str):
        with self.client.get(
            f"/paynow/orders/{self.state.order_id}",
            catch_response=True,
            name="GET /paynow/orders/[id]",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order lookup failed: {resp.status_code}: {extract_error_detail(resp)}")
            elif resp.json()["status"] != expected:
                resp.failure(f"Expected order status {expected}, got {resp.json()['status']}")


class AcceptedCardJourney(_CallbackJourney):
    """Seed -> Accepted card IPN -> Redelivery -> Return trip.

    The redelivery must be absorbed without a second state change.
    """

    @task
    def seed(self):
        self.seed_order()

    @task
    def ipn(self):
        self.deliver(accepted_card_notification(self.state.order, self.user.host), "POST /paynow/callback (accepted)")

    @task
    def redeliver(self):
        self.deliver(self.state.notification, "POST /paynow/callback (redelivery)")

    @task
    def verify(self):
        self.expect_status("processing")

    @task
    def return_trip(self):
        self.client.get("/paynow/callback", allow_redirects=False, name="GET /paynow/callback (return)")

    @task
    def done(self):
        self.interrupt()


class OfflinePaymentJourney(_CallbackJourney):
    """Seed -> Pending IPN -> Accepted IPN once the EFT clears."""

    @task
    def seed(self):
        self.seed_order()

    @task
    def pending(self):
        self.deliver(pending_notification(self.state.order, self.user.host), "POST /paynow/callback (pending)")

    @task
    def still_pending(self):
        self.expect_status("pending")

    @task
    def settled(self):
        self.deliver(accepted_eft_notification(self.state.order, self.user.host), "POST /paynow/callback (accepted)")

    @task
    def verify(self):
        self.expect_status("processing")

    @task
    def done(self):
        self.interrupt()


class FailedPaymentJourney(_CallbackJourney):
    """Seed -> Tampered IPN -> Declined or cancelled IPN."""

    @task
    def seed(self):
        self.seed_order()

    @task
    def tampered(self):
        self.deliver(tampered_notification(self.state.order, self.user.host), "POST /paynow/callback (tampered)")

    @task
    def untouched(self):
        self.expect_status("pending")

    @task
    def declined_or_cancelled(self):
        if random.random() < 0.5:
            self.deliver(declined_notification(self.state.order, self.user.host), "POST /paynow/callback (declined)")
        else:
            self.deliver(cancelled_notification(self.state.order, self.user.host), "POST /paynow/callback (cancelled)")

    @task
    def done(self):
        self.interrupt()


class CallbackUser(HttpUser):
    """Simulated processor and shopper traffic against the callback."""

    tasks = {AcceptedCardJourney: 6, OfflinePaymentJourney: 2, FailedPaymentJourney: 2}
    wait_time = between(0.5, 2.0)
