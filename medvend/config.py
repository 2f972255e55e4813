"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Pages ────────────────────────────────────────────────────────────
LOGIN_PAGE = "login.html"
PATIENT_PAGE = "dashboard.html"
DOCTOR_PAGE = "doctor.html"
HOME_PAGE = "index.html"

PROTECTED_PAGES = {PATIENT_PAGE, DOCTOR_PAGE}

# ── Document store ───────────────────────────────────────────────────
USERS_COLLECTION = "users"
PRESCRIPTIONS_COLLECTION = "prescriptions"
ACCOUNTS_COLLECTION = "accounts"   # only used by the local auth backend

# ── Presentation ─────────────────────────────────────────────────────
PLACEHOLDER = "—"
SAVE_BUTTON_LABEL = "💾 Save Prescription to Cloud"
LOGIN_BUTTON_LABEL = "Sign In"

# ── Auth ─────────────────────────────────────────────────────────────
AUTH_BACKEND = os.getenv("AUTH_BACKEND", "firebase").strip().lower()
FIREBASE_AUTH_URL = "https://identitytoolkit.googleapis.com/v1"

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = int(os.getenv("TOKEN_EXPIRY_HOURS", "24"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "medvend_session")


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
