"""
Stripe boundary: hosted Checkout sessions and webhook signature verification.

The rest of the service only sees plain values (CheckoutSession, dict events)
and the error taxonomy; Stripe SDK types and exceptions stay in this module.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Optional, cast

import stripe
import structlog

from villa_booking.config import (
    CURRENCY,
    HOST_URL,
    STRIPE_SECRET_KEY,
    STRIPE_TIMEOUT_SECONDS,
)
from villa_booking.errors import AuthFailureError, UpstreamError
from villa_booking.metrics import stripe_api_latency

logger = structlog.get_logger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


def build_idempotency_key(parts: dict[str, str]) -> str:
    """
    Derive a Stripe idempotency key from the full booking intent.

    Identical submissions (same property, dates, party, guest and amount) map
    to the same key, so Stripe returns the already-created session instead of
    issuing a second one.

    Args:
        parts: Checkout metadata plus the amount charged

    Returns:
        str: Stable key, e.g. "checkout-3f2a..."
    """
    digest = hashlib.sha256(json.dumps(parts, sort_keys=True).encode("utf-8")).hexdigest()
    return f"checkout-{digest[:48]}"


class StripeCheckoutClient:
    """
    Issues Stripe Checkout sessions for a fixed amount.

    Calls are synchronous, bounded by STRIPE_TIMEOUT_SECONDS and never retried
    here; a failure surfaces as UpstreamError and the guest can resubmit.

    Example:
        >>> client = StripeCheckoutClient()
        >>> session = client.create_session(
        ...     amount_minor=35000,
        ...     name="Booking for Ocean View Villa",
        ...     description="3 nights from June 01, 2024 to June 04, 2024",
        ...     metadata={"property_id": "villa-1", ...},
        ... )
        >>> session.url
        'https://checkout.stripe.com/c/pay/cs_test_...'
    """

    def __init__(
        self,
        api_key: str | None = None,
        currency: str = CURRENCY,
        host_url: str = HOST_URL,
        timeout: int = STRIPE_TIMEOUT_SECONDS,
        client: stripe.StripeClient | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else STRIPE_SECRET_KEY
        self.currency = currency
        self.host_url = host_url
        # Per-instance transport; the SDK's module-level defaults are left alone
        self._client = client if client is not None else stripe.StripeClient(
            self.api_key,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=0,
        )

    def create_session(
        self,
        amount_minor: int,
        name: str,
        description: str,
        metadata: dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> CheckoutSession:
        """
        Create a hosted payment page for a single line item.

        Args:
            amount_minor: Amount to charge in minor units (cents)
            name: Line item name shown on the payment page
            description: Line item description shown on the payment page
            metadata: Booking parameters returned with the completed session
            idempotency_key: Optional Stripe idempotency key

        Returns:
            CheckoutSession: Session ID and redirect URL

        Raises:
            UpstreamError: If Stripe rejects the request or cannot be reached
        """
        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": name, "description": description},
                        "unit_amount": amount_minor,
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": (
                f"{self.host_url}/booking/confirmation?session_id={{CHECKOUT_SESSION_ID}}"
            ),
            "cancel_url": f"{self.host_url}?canceled=true",
            "metadata": metadata,
        }
        options: dict[str, Any] = {}
        if idempotency_key:
            options["idempotency_key"] = idempotency_key

        try:
            with stripe_api_latency.labels(operation="checkout.session.create").time():
                session = self._client.v1.checkout.sessions.create(
                    params=params, options=options
                )
        except stripe.StripeError as e:
            logger.error(
                "checkout_session_failed",
                property_id=metadata.get("property_id"),
                check_in=metadata.get("check_in"),
                check_out=metadata.get("check_out"),
                error=str(e),
            )
            raise UpstreamError("Payment provider request failed") from e

        logger.info(
            "checkout_session_created",
            session_id=session.id,
            property_id=metadata.get("property_id"),
            amount_minor=amount_minor,
        )
        return CheckoutSession(id=cast(str, session.id), url=cast(str, session.url))


def verify_webhook_event(
    payload: bytes, signature_header: str | None, secret: str
) -> dict[str, Any]:
    """
    Verify a Stripe webhook delivery and return the decoded event.

    The signature is checked against the raw request bytes, so the body must
    not be parsed or re-serialized before calling this function.

    Args:
        payload: Raw request body exactly as received
        signature_header: Value of the Stripe-Signature header
        secret: Webhook signing secret (whsec_...)

    Returns:
        dict: Decoded Stripe event

    Raises:
        AuthFailureError: If the secret is not configured, the header is missing
            or unparseable, the signature does not match, or the body is not JSON
    """
    if not secret:
        raise AuthFailureError("Webhook signing secret is not configured")
    if not signature_header:
        raise AuthFailureError("Missing Stripe-Signature header")

    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, signature_header, secret, tolerance=SIGNATURE_TOLERANCE_SECONDS
        )
        event = json.loads(body)
    except stripe.SignatureVerificationError as e:
        raise AuthFailureError(f"Webhook signature verification failed: {e}") from e
    except (UnicodeDecodeError, ValueError) as e:
        raise AuthFailureError(f"Webhook payload could not be parsed: {e}") from e

    if not isinstance(event, dict):
        raise AuthFailureError("Webhook payload is not an event object")
    return cast(dict[str, Any], event)
