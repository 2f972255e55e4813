"""
JWT session tokens, the in-memory session registry and route protection.
"""

import uuid
from datetime import datetime, timedelta
from functools import wraps
from typing import Dict, Any, Optional

import jwt
from flask import request, jsonify

from medvend.config import SECRET_KEY, SESSION_COOKIE_NAME, TOKEN_EXPIRY_HOURS
from medvend.models import Identity

# In-memory session store (use Redis in production)
# Structure: {token: {"auth": AuthSession, "form": PrescriptionForm, "created_at": datetime, ...}}
sessions: Dict[str, Dict[str, Any]] = {}


def generate_token(identity: Identity) -> str:
    """Generate a JWT token for a signed-in identity."""
    payload = {
        "uid": identity.uid,
        "email": identity.email,
        "jti": uuid.uuid4().hex,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(hours=TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def extract_token() -> Optional[str]:
    """Find the session token on the current request, if any."""
    if "Authorization" in request.headers:
        parts = request.headers["Authorization"].split(" ")
        if len(parts) == 2 and parts[1]:
            return parts[1]

    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token and request.is_json:
        token = (request.get_json(silent=True) or {}).get("token")
    if not token:
        token = request.args.get("token")
    return token or None


def lookup_session(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the live session for *token*, or None if it is unknown or expired."""
    if not token or not verify_token(token):
        return None
    session_data = sessions.get(token)
    if session_data is not None:
        session_data["last_activity"] = datetime.utcnow()
    return session_data


def token_required(f):
    """Decorator that protects endpoints with JWT authentication."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = extract_token()
        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        if not verify_token(token):
            return jsonify({"error": "Invalid or expired token"}), 401

        session_data = lookup_session(token)
        if session_data is None:
            return jsonify({"error": "Session not found. Please login again."}), 401

        # Attach session data to the request context
        request.session_data = session_data
        request.token = token

        return f(*args, **kwargs)

    return decorated


def cleanup_expired_sessions():
    """Remove sessions that have been inactive beyond TOKEN_EXPIRY_HOURS."""
    now = datetime.utcnow()
    expired = [
        tok for tok, data in sessions.items()
        if (now - data["last_activity"]).total_seconds() > TOKEN_EXPIRY_HOURS * 3600
    ]
    for tok in expired:
        del sessions[tok]
    if expired:
        print(f"[cleanup] Removed {len(expired)} expired sessions")
