"""Unit tests for credential and payment models."""

from datetime import datetime, timezone

import pytest

from larnik_trust.models import (
    CaptureFailed,
    GatewayError,
    InvalidCredential,
    InvalidRefreshCredential,
    PaymentConfirmation,
    TokenPair,
    TrustError,
    WebhookEvent,
)


class TestPaymentConfirmation:
    def test_from_checkout(self):
        confirmation = PaymentConfirmation.from_checkout(
            {
                "razorpay_order_id": "order_x",
                "razorpay_payment_id": "pay_1",
                "razorpay_signature": "ab" * 32,
            }
        )

        assert confirmation == PaymentConfirmation("order_x", "pay_1", "ab" * 32)

    def test_missing_field(self):
        with pytest.raises(ValueError, match="razorpay_signature"):
            PaymentConfirmation.from_checkout(
                {"razorpay_order_id": "order_x", "razorpay_payment_id": "pay_1"}
            )

    @pytest.mark.parametrize("bad_value", ["", None, 123])
    def test_empty_or_non_string_field(self, bad_value):
        with pytest.raises(ValueError, match="razorpay_payment_id"):
            PaymentConfirmation.from_checkout(
                {
                    "razorpay_order_id": "order_x",
                    "razorpay_payment_id": bad_value,
                    "razorpay_signature": "ab" * 32,
                }
            )


class TestWebhookEvent:
    def test_from_raw_body(self):
        event = WebhookEvent.from_body(
            b'{"entity":"event","account_id":"acc_1","event":"refund.processed",'
            b'"contains":["refund","payment"],'
            b'"payload":{"refund":{"entity":{"id":"rfnd_1"}}},"created_at":1700000000}'
        )

        assert event.event == "refund.processed"
        assert event.contains == ("refund", "payment")
        assert event.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert event.entity("refund") == {"id": "rfnd_1"}
        assert event.entity("payment") is None

    def test_from_mapping(self):
        event = WebhookEvent.from_body({"event": "order.paid", "payload": {}})

        assert event.event == "order.paid"
        assert event.account_id is None
        assert event.created_at is None

    @pytest.mark.parametrize("body", [b"[]", b'{"payload":{}}', b'{"event":""}', b"{", "\xff"])
    def test_invalid_bodies(self, body):
        with pytest.raises(ValueError):
            WebhookEvent.from_body(body)


class TestTokenPair:
    def test_to_dict(self):
        pair = TokenPair(access_token="a.b.c", refresh_token="d.e.f", expires_in=86400)

        assert pair.to_dict() == {
            "access_token": "a.b.c",
            "refresh_token": "d.e.f",
            "expires_in": 86400,
            "token_type": "Bearer",
        }


class TestExceptions:
    def test_default_messages(self):
        assert str(InvalidCredential()) == "Invalid token"
        assert str(InvalidRefreshCredential()) == "Invalid refresh token"
        assert str(CaptureFailed()) == "Failed to capture payment"

    def test_operation_names(self):
        assert CaptureFailed.operation == "capture_payment"

    def test_each_gateway_failure_is_documented_and_names_a_distinct_operation(self):
        failures = GatewayError.__subclasses__() + [
            subclass
            for failure in GatewayError.__subclasses__()
            for subclass in failure.__subclasses__()
        ]

        assert all(failure.__doc__ for failure in failures)
        operations = [failure.operation for failure in failures]
        assert len(operations) == len(set(operations)) == 8
        assert "list_settlements" in operations

    def test_hierarchy(self):
        assert issubclass(InvalidCredential, TrustError)
        assert issubclass(CaptureFailed, TrustError)
        assert not issubclass(InvalidRefreshCredential, InvalidCredential)
