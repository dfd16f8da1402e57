# villa_booking/main.py

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from villa_booking.config import ALLOWED_ORIGINS
from villa_booking.errors import BookingError
from villa_booking.logging_config import setup_logging
from villa_booking.middleware import RequestIDMiddleware
from villa_booking.routes.availability import router as availability_router
from villa_booking.routes.bookings import router as bookings_router
from villa_booking.routes.health import router as health_router
from villa_booking.routes.metrics import router as metrics_router
from villa_booking.routes.property import router as property_router
from villa_booking.routes.webhook import router as webhook_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Villa Booking API",
    description=(
        "Availability, pricing, checkout and payment confirmation for a single rental property"
    ),
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added last so it wraps CORS and every route, including error responses
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render domain errors as {"error": ...} with their own status code."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Missing or malformed request fields are a 400, not FastAPI's default 422."""
    fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
    logger.info("request_invalid", path=request.url.path, fields=fields)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Missing or invalid booking information", "fields": fields},
    )


# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(property_router, tags=["Property"])
app.include_router(availability_router, tags=["Availability"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(webhook_router, tags=["Webhooks"])


@app.on_event("startup")
def startup_event() -> None:
    """Log startup; the database is first checked by /ready."""
    from villa_booking.config import CURRENCY, PROPERTY_ID

    logger.info("FastAPI application starting up...", property_id=PROPERTY_ID, currency=CURRENCY)
