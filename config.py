"""Configuration for the course-portal page-visit client."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env
_env_file = Path(__file__).parent / ".env"
load_dotenv(_env_file)

# REST API base (includes the /api prefix)
PORTAL_API_URL = os.environ.get("PORTAL_API_URL", "").strip().rstrip("/") or "http://localhost:3001/api"

# Analytics endpoint, relative to PORTAL_API_URL
PAGE_VISIT_ENDPOINT = "/analytics/page-visit"

# Data directory
DATA_DIR = Path(os.environ.get("PORTAL_DATA_DIR", "").strip() or Path(__file__).parent / "data")
_default_store = DATA_DIR / "local_store.db"
_user_store = Path.home() / ".local" / "share" / "course_portal" / "local_store.db"
# Use default if writable; else user-local path
if (_default_store.exists() and os.access(_default_store, os.W_OK)) or (
    not _default_store.exists() and (not DATA_DIR.exists() or os.access(DATA_DIR, os.W_OK))
):
    STORE_PATH = _default_store
else:
    STORE_PATH = _user_store

# HTTP timeout for API calls and visit delivery (seconds)
HTTP_TIMEOUT_SEC = float(os.environ.get("HTTP_TIMEOUT_SEC", "10"))

# Dev collector (collector.py)
COLLECTOR_PORT = int(os.environ.get("COLLECTOR_PORT", "3001"))

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
DEBUG = os.environ.get("DEBUG", "false").lower() in ("1", "true", "yes")
