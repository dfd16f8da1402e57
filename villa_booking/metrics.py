"""
Prometheus metrics for availability queries, checkout, and booking confirmation.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Example:
    >>> from villa_booking.metrics import stripe_api_latency
    >>> with stripe_api_latency.labels(operation="checkout.session.create").time():
    ...     session = client.v1.checkout.sessions.create(params=...)
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Availability & Pricing Metrics
# =============================================================================

availability_requests = Counter(
    "villa_availability_requests_total",
    "Total availability calendar requests",
    ["status"],
)
"""
Counter for availability calendar requests.

Labels:
    status: success, not_found, invalid or error
"""

price_quotes = Counter(
    "villa_price_quotes_total",
    "Total price quotes computed",
    ["stage"],
)
"""
Counter for price computations.

Labels:
    stage: Where the price was computed (quote, checkout, confirmation)
"""

# =============================================================================
# Checkout Metrics
# =============================================================================

checkout_sessions = Counter(
    "villa_checkout_sessions_total",
    "Total Stripe Checkout session creation attempts",
    ["status"],
)
"""
Counter for checkout session creation.

Labels:
    status: created, conflict, invalid or failed
"""

stripe_api_latency = Histogram(
    "villa_stripe_api_latency_seconds",
    "Stripe API request latency in seconds",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)
"""
Histogram for Stripe API latency.

Labels:
    operation: Stripe API operation (e.g., "checkout.session.create")

Buckets: 0.1s, 0.25s, 0.5s, 1s, 2.5s, 5s, 10s, +Inf
"""

# =============================================================================
# Webhook & Booking Metrics
# =============================================================================

webhook_events = Counter(
    "villa_webhook_events_total",
    "Total payment webhook deliveries by outcome",
    ["event_type", "outcome"],
)
"""
Counter for payment webhook deliveries.

Labels:
    event_type: Stripe event type (or "unknown" when the signature was rejected)
    outcome: rejected, ignored, inserted, duplicate, conflict or failed
"""

bookings_created = Counter(
    "villa_bookings_created_total",
    "Total bookings created from confirmed payments",
)
"""Counter for bookings inserted by the confirmation handler."""

booking_conflicts = Counter(
    "villa_booking_conflicts_total",
    "Total requests rejected because the nights were already taken",
    ["stage"],
)
"""
Counter for double-booking rejections.

Labels:
    stage: checkout (before payment) or confirmation (after payment, refund required)
"""
