"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP villa_checkout_sessions_total Checkout sessions by outcome
        # TYPE villa_checkout_sessions_total counter
        villa_checkout_sessions_total{status="created"} 12.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose the process registry in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
