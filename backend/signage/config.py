# backend/signage/config.py
import logging
import os

import psycopg2

DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")

DB_NAME = os.getenv("DB_NAME", "signage")
DB_USER = os.getenv("DB_USER", "signage_user")
DB_PASSWORD = os.getenv("DB_PASSWORD", "signage_password")

# "postgres" or "memory"
STORE_BACKEND = os.getenv("SIGNAGE_STORE", "memory")

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")

_DEV_SESSION_SECRET = "dev-session-secret-change-me"
SESSION_SECRET = os.getenv("SESSION_SECRET", _DEV_SESSION_SECRET)
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "signage_session")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60)))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")
SESSION_SIGNING_ALG = os.getenv("SESSION_SIGNING_ALG", "HMAC_SHA256")

# Video length is never inspected, every video ad gets this dwell time
VIDEO_FALLBACK_SECONDS = int(os.getenv("VIDEO_FALLBACK_SECONDS", "30"))
DEFAULT_DWELL_SECONDS = int(os.getenv("DEFAULT_DWELL_SECONDS", "10"))
RESOLVE_INTERVAL_SECONDS = int(os.getenv("RESOLVE_INTERVAL_SECONDS", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def get_db_connection():
    conn = psycopg2.connect(
        host=DB_HOST,
        port=DB_PORT,
        dbname=DB_NAME,
        user=DB_USER,
        password=DB_PASSWORD,
    )
    return conn


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if SESSION_SECRET == _DEV_SESSION_SECRET:
        logging.getLogger(__name__).warning(
            "SESSION_SECRET is not set, using the development fallback. Do not run like this in production."
        )
