"""
Payment provider integration.

- base.PaymentGateway: Interface every provider adapter implements
- razorpay_gateway.RazorpayGateway: Razorpay REST adapter
- signatures: Pure HMAC-SHA256 checks for checkout confirmations and webhooks
"""

from larnik_trust.payments.base import PaymentGateway
from larnik_trust.payments.razorpay_gateway import RazorpayGateway
from larnik_trust.payments.signatures import (
    compute_signature,
    verify_payment_confirmation_signature,
    verify_webhook_signature,
)

__all__ = [
    "PaymentGateway",
    "RazorpayGateway",
    "compute_signature",
    "verify_payment_confirmation_signature",
    "verify_webhook_signature",
]
