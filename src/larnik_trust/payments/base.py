"""Base interface for payment gateway adapters."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from larnik_trust.models import PaymentConfirmation


class PaymentGateway(ABC):
    """
    Abstract base class for payment provider integrations.

    Provider operations are async and raise the operation's GatewayError
    subclass on any failure. Signature checks are synchronous and return
    False instead of raising.
    """

    @abstractmethod
    async def create_order(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create a provider-side order before the client attempts payment.

        Args:
            options: Order parameters (amount in the smallest currency unit,
                currency, receipt, notes)

        Returns:
            The order exactly as returned by the provider

        Raises:
            OrderCreationFailed: On any provider or network error
        """

    @abstractmethod
    async def capture_payment(
        self, payment_id: str, amount: int, currency: str = "INR"
    ) -> dict[str, Any]:
        """Capture an authorized payment. Raises CaptureFailed."""

    @abstractmethod
    async def process_refund(
        self,
        payment_id: str,
        amount: int | None = None,
        *,
        speed: str | None = None,
        notes: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Refund a captured payment, fully when amount is None. Raises RefundFailed."""

    @abstractmethod
    async def get_payment_details(self, payment_id: str) -> dict[str, Any]:
        """Fetch a payment. Raises PaymentLookupFailed."""

    @abstractmethod
    async def get_refund_details(self, refund_id: str) -> dict[str, Any]:
        """Fetch a refund. Raises RefundLookupFailed."""

    @abstractmethod
    async def create_payment_link(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """Create a hosted payment link. Raises PaymentLinkCreationFailed."""

    @abstractmethod
    def verify_webhook_signature(
        self, body: bytes | str | Mapping[str, Any], signature: str
    ) -> bool:
        """Return True only if ``signature`` authenticates the webhook body."""

    @abstractmethod
    def verify_payment_confirmation_signature(
        self, payment_id: str, order_id: str, signature: str
    ) -> bool:
        """Return True only if ``signature`` authenticates the checkout result."""

    def verify_confirmation(self, confirmation: PaymentConfirmation) -> bool:
        """Verify a PaymentConfirmation built from a checkout callback."""
        return self.verify_payment_confirmation_signature(
            confirmation.payment_id,
            confirmation.order_id,
            confirmation.signature,
        )
