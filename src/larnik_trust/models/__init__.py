"""Domain models for the Larnik trust boundary."""

from larnik_trust.models.credentials import TokenPair
from larnik_trust.models.exceptions import (
    CaptureFailed,
    CredentialError,
    GatewayError,
    InvalidCredential,
    InvalidRefreshCredential,
    OrderCreationFailed,
    PaymentLinkCreationFailed,
    PaymentLookupFailed,
    RefundFailed,
    RefundLookupFailed,
    SettlementListFailed,
    SettlementLookupFailed,
    TrustError,
)
from larnik_trust.models.payments import PaymentConfirmation, WebhookEvent

__all__ = [
    "TokenPair",
    "PaymentConfirmation",
    "WebhookEvent",
    "TrustError",
    "CredentialError",
    "InvalidCredential",
    "InvalidRefreshCredential",
    "GatewayError",
    "OrderCreationFailed",
    "CaptureFailed",
    "RefundFailed",
    "PaymentLookupFailed",
    "RefundLookupFailed",
    "PaymentLinkCreationFailed",
    "SettlementListFailed",
    "SettlementLookupFailed",
]
