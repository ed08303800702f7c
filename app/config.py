import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./occasion_cards.db")

# Fulfillment timing
# Minimum print + mail turnaround, in days
DELIVERY_WINDOW_DAYS = int(os.getenv("DELIVERY_WINDOW_DAYS", "15"))
# How far past the lead time a due occasion still gets an order (covers missed daily runs)
ORDER_WINDOW_DAYS = int(os.getenv("ORDER_WINDOW_DAYS", "7"))

# Just Because selection
JUST_BECAUSE_SPACING_DAYS = int(os.getenv("JUST_BECAUSE_SPACING_DAYS", "14"))
JUST_BECAUSE_MAX_ATTEMPTS = int(os.getenv("JUST_BECAUSE_MAX_ATTEMPTS", "64"))

# Unauthenticated intake drafts (Redis staging store)
PENDING_REMINDER_TTL_SECONDS = int(os.getenv("PENDING_REMINDER_TTL_SECONDS", "86400"))

# Machine-to-machine secrets
# Batch trigger (cron) authenticates with: Authorization: Bearer <CRON_SECRET>
CRON_SECRET = os.getenv("CRON_SECRET")
# Fulfillment operators (print/mail desk)
OPERATOR_API_KEY = os.getenv("OPERATOR_API_KEY")

if not CRON_SECRET:
    warnings.warn(
        "CRON_SECRET not set! /cron endpoints will reject every request", RuntimeWarning, stacklevel=2
    )
if not OPERATOR_API_KEY:
    warnings.warn(
        "OPERATOR_API_KEY not set! Fulfillment endpoints will reject every request",
        RuntimeWarning,
        stacklevel=2,
    )

# Google Address Validation (fail-open when missing)
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
ADDRESS_VALIDATION_URL = os.getenv(
    "ADDRESS_VALIDATION_URL", "https://addressvalidation.googleapis.com/v1:validateAddress"
)
ADDRESS_VALIDATION_TIMEOUT = float(os.getenv("ADDRESS_VALIDATION_TIMEOUT", "5.0"))

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
