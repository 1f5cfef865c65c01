import logging
import os

from dotenv import load_dotenv

# Load environment variables for AWS credentials, table names and URLs
load_dotenv()

ENV = os.getenv("ENV", "development").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# AWS
AWS_ACCESS_KEY = os.getenv("AWS_ACCESS_KEY")
AWS_SECRET_KEY = os.getenv("AWS_SECRET_KEY")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

EVENTS_TABLE = os.getenv("EVENTS_TABLE", "Events")
GUESTS_TABLE = os.getenv("GUESTS_TABLE", "InvitedGuests")
RSVPS_TABLE = os.getenv("RSVPS_TABLE", "EventRsvps")

INVITES_BUCKET = os.getenv("INVITES_BUCKET", "invites")

COGNITO_CLIENT_ID = os.getenv("COGNITO_CLIENT_ID")

# Origin of the front end, used to build the public RSVP links
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

# Design backgrounds: a local directory or an http(s) base URL
DESIGNS_BASE = os.getenv("DESIGNS_BASE", "static/designs")
FONTS_DIR = os.getenv("FONTS_DIR", "static/fonts")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]


def is_production() -> bool:
    return ENV == "production"


def configure_logging():
    """Configure the root logger once, using LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
