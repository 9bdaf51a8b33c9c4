"""Payment confirmation and webhook event models."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class PaymentConfirmation:
    """
    Client-supplied proof that a checkout payment succeeded.

    None of these values can be trusted until the signature has been
    verified against the Razorpay key secret.

    Attributes:
        order_id: Razorpay order id (order_...)
        payment_id: Razorpay payment id (pay_...)
        signature: Hex-encoded HMAC-SHA256 sent by Razorpay Checkout
    """

    order_id: str
    payment_id: str
    signature: str

    @classmethod
    def from_checkout(cls, data: Mapping[str, Any]) -> "PaymentConfirmation":
        """
        Build a confirmation from the Razorpay Checkout handler response.

        Raises:
            ValueError: If any of the three checkout fields is missing or empty
        """
        try:
            order_id = data["razorpay_order_id"]
            payment_id = data["razorpay_payment_id"]
            signature = data["razorpay_signature"]
        except KeyError as e:
            raise ValueError(f"Missing checkout field: {e.args[0]}") from e

        for name, value in (
            ("razorpay_order_id", order_id),
            ("razorpay_payment_id", payment_id),
            ("razorpay_signature", signature),
        ):
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} must be a non-empty string")

        return cls(order_id=order_id, payment_id=payment_id, signature=signature)


@dataclass(frozen=True)
class WebhookEvent:
    """
    A Razorpay webhook notification.

    Only build one from a body whose signature has already been verified;
    see ``RazorpayGateway.parse_webhook_event``.
    """

    event: str
    payload: dict[str, Any]
    account_id: str | None = None
    created_at: datetime | None = None
    contains: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_body(cls, body: bytes | str | Mapping[str, Any]) -> "WebhookEvent":
        """
        Decode a webhook body.

        Raises:
            ValueError: If the body is not a JSON object with an ``event`` name
        """
        if isinstance(body, Mapping):
            data: Any = dict(body)
        else:
            data = json.loads(body)

        if not isinstance(data, dict):
            raise ValueError("Webhook body must be a JSON object")

        event = data.get("event")
        if not isinstance(event, str) or not event:
            raise ValueError("Webhook body has no event name")

        created_at = None
        if isinstance(data.get("created_at"), int):
            created_at = datetime.fromtimestamp(data["created_at"], tz=timezone.utc)

        return cls(
            event=event,
            payload=data.get("payload") or {},
            account_id=data.get("account_id"),
            created_at=created_at,
            contains=tuple(data.get("contains") or ()),
        )

    def entity(self, name: str) -> dict[str, Any] | None:
        """Return the entity wrapped under ``payload[name]["entity"]``, if any."""
        wrapper = self.payload.get(name)
        if isinstance(wrapper, dict):
            return wrapper.get("entity")
        return None
