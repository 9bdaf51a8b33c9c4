"""Custom exceptions for the Larnik trust boundary.

Every exception raised to callers carries a fixed, non-sensitive message.
The underlying cause (JWT decode error, Razorpay error body, network failure)
is logged where it happens and is not attached to the raised exception.
"""


class TrustError(Exception):
    """Base exception for token and payment gateway errors."""

    pass


class CredentialError(TrustError):
    """Base exception for session credential errors."""

    pass


class InvalidCredential(CredentialError):
    """
    Raised when an access credential cannot be trusted.

    Covers bad signatures, expiry, malformed tokens and issuer/audience
    mismatch. Callers must treat it as "reject the request"; the specific
    cause is deliberately not exposed.
    """

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class InvalidRefreshCredential(CredentialError):
    """Raised when a refresh credential cannot be trusted."""

    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message)


class GatewayError(TrustError):
    """
    Base exception for payment provider failures.

    Raised for provider-side rejections, network errors, timeouts and
    cancelled calls. A signature mismatch is never a GatewayError; signature
    checks return False instead.
    """

    default_message = "Payment provider request failed"
    operation = "request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class OrderCreationFailed(GatewayError):
    """Raised when Razorpay does not create a payment order."""

    default_message = "Failed to create payment order"
    operation = "create_order"


class CaptureFailed(GatewayError):
    """Raised when a payment capture is declined or cannot be completed."""

    default_message = "Failed to capture payment"
    operation = "capture_payment"


class RefundFailed(GatewayError):
    """Raised when a refund cannot be processed."""

    default_message = "Failed to process refund"
    operation = "process_refund"


class PaymentLookupFailed(GatewayError):
    """Raised when a payment cannot be fetched."""

    default_message = "Failed to fetch payment details"
    operation = "get_payment_details"


class RefundLookupFailed(GatewayError):
    """Raised when a refund cannot be fetched."""

    default_message = "Failed to fetch refund details"
    operation = "get_refund_details"


class PaymentLinkCreationFailed(GatewayError):
    """Raised when Razorpay does not create a hosted payment link."""

    default_message = "Failed to create payment link"
    operation = "create_payment_link"


class SettlementLookupFailed(GatewayError):
    """Raised when a settlement cannot be fetched."""

    default_message = "Failed to fetch settlement details"
    operation = "get_settlement_details"


class SettlementListFailed(SettlementLookupFailed):
    """Raised when the settlement listing cannot be fetched."""

    default_message = "Failed to list settlements"
    operation = "list_settlements"
