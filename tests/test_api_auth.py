"""
Unit tests for session tokens and the session registry.
"""

from datetime import datetime, timedelta

import jwt

from medvend.api import auth as api_auth
from medvend.config import SECRET_KEY
from medvend.models import Identity


def test_generate_and_verify_token():
    token = api_auth.generate_token(Identity("doc-1", "who@example.com"))
    payload = api_auth.verify_token(token)
    assert payload["uid"] == "doc-1"
    assert payload["email"] == "who@example.com"


def test_tokens_are_unique_per_login():
    identity = Identity("doc-1", "who@example.com")
    assert api_auth.generate_token(identity) != api_auth.generate_token(identity)


def test_verify_rejects_garbage_and_expired():
    assert api_auth.verify_token("not-a-token") is None
    expired = jwt.encode(
        {"uid": "x", "exp": datetime.utcnow() - timedelta(minutes=1)}, SECRET_KEY, algorithm="HS256"
    )
    assert api_auth.verify_token(expired) is None


def test_lookup_session_unknown_token():
    token = api_auth.generate_token(Identity("doc-1", "who@example.com"))
    assert api_auth.lookup_session(token) is None
    assert api_auth.lookup_session(None) is None


def test_cleanup_expired_sessions(capsys):
    old = datetime.utcnow() - timedelta(hours=api_auth.TOKEN_EXPIRY_HOURS + 1)
    api_auth.sessions["stale"] = {"last_activity": old}
    api_auth.sessions["fresh"] = {"last_activity": datetime.utcnow()}

    api_auth.cleanup_expired_sessions()

    assert list(api_auth.sessions) == ["fresh"]
    assert "[cleanup] Removed 1 expired sessions" in capsys.readouterr().out
