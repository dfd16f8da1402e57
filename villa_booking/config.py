import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# Upper bound for connecting and for any single statement
DB_TIMEOUT_SECONDS = int(os.getenv("DB_TIMEOUT_SECONDS", "10"))

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
STRIPE_TIMEOUT_SECONDS = int(os.getenv("STRIPE_TIMEOUT_SECONDS", "10"))
CURRENCY = os.getenv("CURRENCY", "usd").lower()

# Single property served by this deployment
PROPERTY_ID = os.getenv("PROPERTY_ID")

HOST_URL = os.getenv("HOST_URL", "http://localhost:3000").rstrip("/")

AVAILABILITY_WINDOW_DAYS = int(os.getenv("AVAILABILITY_WINDOW_DAYS", "90"))
MAX_AVAILABILITY_RANGE_DAYS = int(os.getenv("MAX_AVAILABILITY_RANGE_DAYS", "730"))

# Longest stay that can be quoted or booked
MAX_STAY_NIGHTS = int(os.getenv("MAX_STAY_NIGHTS", "365"))

# Identical checkout submissions inside one window reuse the same Stripe session
CHECKOUT_DEDUP_WINDOW_SECONDS = int(os.getenv("CHECKOUT_DEDUP_WINDOW_SECONDS", "600"))

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "*")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",") if origin.strip()
]
