"""Stripe payment webhook receiver route."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from villa_booking import config
from villa_booking.dependencies import get_db_engine
from villa_booking.errors import AuthFailureError
from villa_booking.metrics import webhook_events
from villa_booking.payments.stripe_client import verify_webhook_event
from villa_booking.services.confirmation import handle_payment_event

router = APIRouter()
logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "Stripe-Signature"


@router.post("/webhook/payment")
async def receive_payment_webhook(
    request: Request,
    engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Handle incoming Stripe webhook events.

    The signature is checked against the exact raw body before anything else.
    Only checkout.session.completed creates a booking; other event types are
    acknowledged and ignored.

    Responses:
        200 {"received": true}: processed, duplicate, ignored, or a conflict
            that needs a refund (redelivery cannot resolve it)
        400 {"error": ...}: signature missing or invalid
        500 {"error": ...}: processing failed; Stripe will redeliver

    Args:
        request: FastAPI request carrying the raw payload and Stripe-Signature header

    Returns:
        JSONResponse: Acknowledgment response
    """
    payload = await request.body()

    try:
        event: dict[str, Any] = verify_webhook_event(
            payload,
            request.headers.get(SIGNATURE_HEADER),
            config.STRIPE_WEBHOOK_SECRET,
        )
    except AuthFailureError as e:
        webhook_events.labels(event_type="unknown", outcome="rejected").inc()
        logger.warning("webhook_signature_rejected", reason=e.message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"Webhook Error: {e.message}"},
        )

    event_type = str(event.get("type") or "unknown")
    logger.info("webhook_received", event_type=event_type, event_id=event.get("id"))

    try:
        outcome = await run_in_threadpool(handle_payment_event, engine, event)
    except Exception as e:
        webhook_events.labels(event_type=event_type, outcome="failed").inc()
        logger.exception(
            "webhook_processing_failed",
            event_type=event_type,
            event_id=event.get("id"),
            error=str(e),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )

    webhook_events.labels(event_type=event_type, outcome=outcome.value).inc()
    return JSONResponse(content={"received": True})
