"""HMAC-SHA256 signature checks for Razorpay payment confirmations and webhooks.

Razorpay signs two different canonical strings:

- Checkout confirmations: ``order_id + "|" + payment_id``, keyed with the
  API key secret.
- Webhooks: the raw request body exactly as sent, keyed with the webhook
  secret.

Checks return False for a mismatch and for any processing error; they never
raise. Digests are compared with ``hmac.compare_digest``.
"""

import hashlib
import hmac
import json
from collections.abc import Mapping
from typing import Any

from larnik_trust.logging_config import get_logger

logger = get_logger(__name__)


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"Expected str or bytes, got {type(value).__name__}")


def canonical_webhook_body(body: bytes | str | Mapping[str, Any]) -> bytes:
    """
    Return the bytes Razorpay signed for a webhook body.

    Raw ``bytes`` and ``str`` bodies are used unchanged. A decoded mapping is
    re-serialized as compact JSON in insertion order, which reproduces
    ``JSON.stringify`` output but can still diverge from the received bytes
    (escaping, number formatting); pass the raw body whenever possible.
    """
    if isinstance(body, (bytes, str)):
        return _to_bytes(body)
    if isinstance(body, Mapping):
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    raise TypeError(f"Unsupported webhook body type: {type(body).__name__}")


def canonical_confirmation_string(payment_id: str, order_id: str) -> bytes:
    """Return the bytes Razorpay Checkout signs for a payment confirmation."""
    if not isinstance(payment_id, str) or not isinstance(order_id, str):
        raise TypeError("payment_id and order_id must be strings")
    return f"{order_id}|{payment_id}".encode("utf-8")


def compute_signature(message: str | bytes, secret: str | bytes) -> str:
    """Return the hex-encoded HMAC-SHA256 of ``message`` keyed with ``secret``."""
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).hexdigest()


def signatures_match(expected: str, supplied: str | bytes) -> bool:
    """Compare two hex digests in constant time."""
    return hmac.compare_digest(_to_bytes(expected), _to_bytes(supplied))


def verify_webhook_signature(
    body: bytes | str | Mapping[str, Any],
    signature: str,
    secret: str | bytes,
) -> bool:
    """
    Check a webhook ``X-Razorpay-Signature`` header against the body.

    Args:
        body: Raw request body (preferred) or the decoded JSON object
        signature: Value of the X-Razorpay-Signature header
        secret: Webhook secret configured in the Razorpay dashboard

    Returns:
        True only if the signature matches
    """
    try:
        if not secret or not signature:
            logger.warning("webhook_signature_missing_input")
            return False
        if isinstance(body, Mapping):
            logger.info("webhook_signature_reserialized_body")
        expected = compute_signature(canonical_webhook_body(body), secret)
        verified = signatures_match(expected, signature)
    except Exception as e:
        logger.warning(
            "webhook_signature_error",
            error_type=type(e).__name__,
            error=str(e),
        )
        return False

    if not verified:
        logger.warning("webhook_signature_mismatch")
    return verified


def verify_payment_confirmation_signature(
    payment_id: str,
    order_id: str,
    signature: str,
    secret: str | bytes,
) -> bool:
    """
    Check the ``razorpay_signature`` returned by Checkout for a payment.

    Args:
        payment_id: razorpay_payment_id from the checkout response
        order_id: Order id this server created for the payment
        signature: razorpay_signature from the checkout response
        secret: Razorpay API key secret

    Returns:
        True only if the signature matches
    """
    try:
        if not secret or not signature:
            logger.warning("payment_signature_missing_input", payment_id=payment_id)
            return False
        expected = compute_signature(canonical_confirmation_string(payment_id, order_id), secret)
        verified = signatures_match(expected, signature)
    except Exception as e:
        logger.warning(
            "payment_signature_error",
            payment_id=payment_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        return False

    if not verified:
        logger.warning("payment_signature_mismatch", payment_id=payment_id, order_id=order_id)
    return verified
