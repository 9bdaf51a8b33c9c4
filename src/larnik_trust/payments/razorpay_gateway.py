"""
Razorpay payment gateway integration.

Talks to the Razorpay REST API (v1) over httpx with HTTP basic auth. Every
provider call either returns the provider's JSON object unchanged or raises
the operation's GatewayError subclass with a generic message. Provider error
bodies are logged here and never forwarded to callers.

Reference:
- https://razorpay.com/docs/api/orders/
- https://razorpay.com/docs/api/payments/
- https://razorpay.com/docs/webhooks/validate-test/
"""

import asyncio
import re
from collections.abc import Mapping
from typing import Any, NoReturn

import httpx

from larnik_trust.config import RazorpaySettings
from larnik_trust.logging_config import get_logger
from larnik_trust.models import (
    CaptureFailed,
    GatewayError,
    OrderCreationFailed,
    PaymentLinkCreationFailed,
    PaymentLookupFailed,
    RefundFailed,
    RefundLookupFailed,
    SettlementListFailed,
    SettlementLookupFailed,
    WebhookEvent,
)
from larnik_trust.payments import signatures
from larnik_trust.payments.base import PaymentGateway

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"

# Razorpay entity ids are "<prefix>_<alphanumeric>"; anything else could
# rewrite the request path.
_ENTITY_ID_PATTERN = re.compile(r"[A-Za-z0-9_]{1,64}")


def _is_positive_amount(amount: object) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


class RazorpayGateway(PaymentGateway):
    """
    Razorpay adapter for orders, captures, refunds, links and signature checks.

    The adapter holds no per-call state; one instance (and its connection
    pool) can be shared by all request handlers.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the Razorpay gateway.

        Args:
            key_id: Razorpay API key id (rzp_test_... or rzp_live_...)
            key_secret: Razorpay API key secret, also the checkout signing key
            webhook_secret: Secret configured on the Razorpay webhook
            base_url: Razorpay REST API base URL
            timeout_seconds: Bound on every provider call
            http_client: Preconfigured client (tests); the caller owns it
        """
        self.key_id = key_id
        self._key_secret = key_secret
        self._webhook_secret = webhook_secret
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            auth=(key_id, key_secret),
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/json"},
        )

        logger.info(
            "razorpay_gateway_initialized",
            base_url=self.base_url,
            key_id=key_id,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_settings(
        cls,
        razorpay_settings: RazorpaySettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "RazorpayGateway":
        """Build a gateway from loaded configuration."""
        return cls(
            key_id=razorpay_settings.key_id,
            key_secret=razorpay_settings.key_secret.get_secret_value(),
            webhook_secret=razorpay_settings.webhook_secret.get_secret_value(),
            base_url=razorpay_settings.base_url,
            timeout_seconds=razorpay_settings.timeout_seconds,
            http_client=http_client,
        )

    async def close(self) -> None:
        """Close the HTTP connection pool if this gateway created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "RazorpayGateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Provider operations
    # ------------------------------------------------------------------

    async def create_order(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create a Razorpay order.

        Args:
            options: ``amount`` (paise), ``currency``, ``receipt`` and optional
                ``notes``; forwarded unchanged

        Returns:
            The order object, e.g. ``{"id": "order_...", "amount": 100000, ...}``

        Raises:
            OrderCreationFailed: On any provider or network error
        """
        if not isinstance(options, Mapping) or not _is_positive_amount(options.get("amount")):
            self._reject_arguments(OrderCreationFailed, reason="invalid_amount")

        order = await self._request(
            "POST",
            "/orders",
            OrderCreationFailed,
            json=dict(options),
            log_context={"receipt": options.get("receipt")},
        )
        logger.info(
            "razorpay_order_created",
            order_id=order.get("id"),
            amount=order.get("amount"),
            currency=order.get("currency"),
        )
        return order

    async def capture_payment(
        self, payment_id: str, amount: int, currency: str = "INR"
    ) -> dict[str, Any]:
        """
        Capture an authorized payment.

        Raises:
            CaptureFailed: If Razorpay declines the capture or cannot be reached
        """
        self._check_entity_id(payment_id, CaptureFailed)
        if not _is_positive_amount(amount):
            self._reject_arguments(CaptureFailed, reason="invalid_amount", payment_id=payment_id)

        payment = await self._request(
            "POST",
            f"/payments/{payment_id}/capture",
            CaptureFailed,
            json={"amount": amount, "currency": currency},
            log_context={"payment_id": payment_id, "amount": amount},
        )
        logger.info(
            "razorpay_payment_captured",
            payment_id=payment_id,
            status=payment.get("status"),
            amount=payment.get("amount"),
        )
        return payment

    async def process_refund(
        self,
        payment_id: str,
        amount: int | None = None,
        *,
        speed: str | None = None,
        notes: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Refund a captured payment.

        Args:
            payment_id: Payment to refund
            amount: Amount in paise; None refunds the full captured amount
            speed: "normal" or "optimum"
            notes: Free-form key/value notes stored on the refund

        Raises:
            RefundFailed: On any provider or network error
        """
        self._check_entity_id(payment_id, RefundFailed)
        if amount is not None and not _is_positive_amount(amount):
            self._reject_arguments(RefundFailed, reason="invalid_amount", payment_id=payment_id)

        body: dict[str, Any] = {}
        if amount is not None:
            body["amount"] = amount
        if speed:
            body["speed"] = speed
        if notes:
            body["notes"] = dict(notes)

        refund = await self._request(
            "POST",
            f"/payments/{payment_id}/refund",
            RefundFailed,
            json=body,
            log_context={"payment_id": payment_id, "amount": amount},
        )
        logger.info(
            "razorpay_refund_created",
            payment_id=payment_id,
            refund_id=refund.get("id"),
            status=refund.get("status"),
        )
        return refund

    async def get_payment_details(self, payment_id: str) -> dict[str, Any]:
        self._check_entity_id(payment_id, PaymentLookupFailed)
        return await self._request(
            "GET",
            f"/payments/{payment_id}",
            PaymentLookupFailed,
            log_context={"payment_id": payment_id},
        )

    async def get_refund_details(self, refund_id: str) -> dict[str, Any]:
        self._check_entity_id(refund_id, RefundLookupFailed)
        return await self._request(
            "GET",
            f"/refunds/{refund_id}",
            RefundLookupFailed,
            log_context={"refund_id": refund_id},
        )

    async def create_payment_link(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create a hosted payment link.

        Raises:
            PaymentLinkCreationFailed: On any provider or network error
        """
        if not isinstance(options, Mapping) or not _is_positive_amount(options.get("amount")):
            self._reject_arguments(PaymentLinkCreationFailed, reason="invalid_amount")

        link = await self._request(
            "POST",
            "/payment_links",
            PaymentLinkCreationFailed,
            json=dict(options),
            log_context={"reference_id": options.get("reference_id")},
        )
        logger.info("razorpay_payment_link_created", link_id=link.get("id"))
        return link

    async def get_settlement_details(self, settlement_id: str) -> dict[str, Any]:
        self._check_entity_id(settlement_id, SettlementLookupFailed)
        return await self._request(
            "GET",
            f"/settlements/{settlement_id}",
            SettlementLookupFailed,
            log_context={"settlement_id": settlement_id},
        )

    async def list_settlements(
        self, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """List settlements; ``options`` may carry ``from``, ``to``, ``count``, ``skip``."""
        return await self._request(
            "GET",
            "/settlements",
            SettlementListFailed,
            params=dict(options or {}),
        )

    # ------------------------------------------------------------------
    # Signature verification
    # ------------------------------------------------------------------

    def verify_webhook_signature(
        self, body: bytes | str | Mapping[str, Any], signature: str
    ) -> bool:
        """
        Verify the X-Razorpay-Signature header of a webhook delivery.

        Pass the raw request body; a decoded mapping is accepted but is
        re-serialized before hashing.
        """
        return signatures.verify_webhook_signature(body, signature, self._webhook_secret)

    def verify_payment_confirmation_signature(
        self, payment_id: str, order_id: str, signature: str
    ) -> bool:
        """Verify the razorpay_signature returned by Checkout."""
        return signatures.verify_payment_confirmation_signature(
            payment_id, order_id, signature, self._key_secret
        )

    def verify_payment_signature(
        self,
        payment_id: str,
        signature: str,
        body: bytes | str | Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Dual-mode verification kept for existing payment handlers.

        A ``bytes`` or mapping ``body``, or a ``str`` holding a JSON object, is
        treated as a webhook body. Any other ``str`` is treated as the order id
        of a checkout confirmation. New code should call
        verify_webhook_signature or verify_payment_confirmation_signature.
        """
        if body is None:
            logger.warning("payment_signature_missing_companion", payment_id=payment_id)
            return False
        if isinstance(body, str) and not body.lstrip().startswith("{"):
            return self.verify_payment_confirmation_signature(payment_id, body, signature)
        return self.verify_webhook_signature(body, signature)

    def parse_webhook_event(
        self, body: bytes | str, signature: str
    ) -> WebhookEvent | None:
        """
        Verify and decode a webhook delivery.

        Returns:
            The decoded event, or None if the signature does not verify or
            the body is not a valid event
        """
        if not self.verify_webhook_signature(body, signature):
            return None

        try:
            event = WebhookEvent.from_body(body)
        except ValueError as e:
            logger.warning("webhook_body_invalid", error=str(e))
            return None

        logger.info("webhook_event_verified", webhook_event=event.event, account_id=event.account_id)
        return event

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_entity_id(self, entity_id: str, failure: type[GatewayError]) -> None:
        if not isinstance(entity_id, str) or not _ENTITY_ID_PATTERN.fullmatch(entity_id):
            self._reject_arguments(failure, reason="invalid_id")

    def _reject_arguments(
        self, failure: type[GatewayError], reason: str, **context: Any
    ) -> NoReturn:
        logger.warning(
            "razorpay_request_rejected",
            operation=failure.operation,
            reason=reason,
            **context,
        )
        raise failure()

    async def _request(
        self,
        method: str,
        path: str,
        failure: type[GatewayError],
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        log_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Perform one Razorpay call and map every failure to ``failure``.

        Timeouts, transport errors, cancellation, non-2xx responses and
        undecodable bodies all raise ``failure`` with its generic message.
        """
        context = {"operation": failure.operation, **(log_context or {})}

        try:
            response = await self.http_client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            logger.error("razorpay_timeout", error=str(e), **context)
            raise failure() from e
        except httpx.RequestError as e:
            logger.error(
                "razorpay_request_error",
                error_type=type(e).__name__,
                error=str(e),
                **context,
            )
            raise failure() from e
        except asyncio.CancelledError:
            # httpx has already torn down the in-flight request at this point.
            logger.warning("razorpay_request_cancelled", **context)
            raise failure() from None

        if response.is_error:
            error = self._error_details(response)
            logger.error(
                "razorpay_api_error",
                status_code=response.status_code,
                error_code=error.get("code"),
                error_description=error.get("description"),
                error_reason=error.get("reason"),
                error_field=error.get("field"),
                **context,
            )
            raise failure()

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "razorpay_invalid_response",
                status_code=response.status_code,
                error=str(e),
                **context,
            )
            raise failure() from e

        if not isinstance(data, dict):
            logger.error(
                "razorpay_invalid_response",
                status_code=response.status_code,
                error="response is not a JSON object",
                **context,
            )
            raise failure()

        return data

    @staticmethod
    def _error_details(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            return body["error"]
        return {}
