"""
Shared fakes and fixtures: an in-memory document store and auth provider.
"""

from datetime import datetime, timezone

import pytest

from medvend.api import auth as api_auth
from medvend.client import PortalClient
from medvend.database import SERVER_TIMESTAMP, DocumentSnapshot
from medvend.errors import AuthError, NotFoundError, TransportError
from medvend.models import Identity

FIXED_NOW = datetime(2024, 2, 17, 9, 30, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────

class FakeStore:
    """Dict-backed document store; set ``fail_with`` to make every call raise."""

    def __init__(self):
        self.collections = {}
        self.calls = []
        self.fail_with = None

    def add(self, collection, key, data):
        self.collections.setdefault(collection, {})[key] = dict(data)

    def _check(self, op, *args):
        self.calls.append((op,) + args)
        if self.fail_with is not None:
            raise TransportError(self.fail_with)

    def _resolve(self, data):
        return {k: (FIXED_NOW if v is SERVER_TIMESTAMP else v) for k, v in data.items()}

    def get(self, collection, key):
        self._check("get", collection, key)
        data = self.collections.get(collection, {}).get(key)
        return DocumentSnapshot(key, dict(data) if data is not None else None)

    def query(self, collection, filters, limit=1):
        self._check("query", collection, dict(filters), limit)
        hits = [
            DocumentSnapshot(key, dict(data))
            for key, data in sorted(self.collections.get(collection, {}).items())
            if all(data.get(f) == v for f, v in filters.items())
        ]
        return hits[:limit]

    def set(self, collection, key, data):
        self._check("set", collection, key)
        self.collections.setdefault(collection, {})[key] = self._resolve(data)

    def update(self, collection, key, data):
        self._check("update", collection, key)
        existing = self.collections.get(collection, {}).get(key)
        if existing is None:
            raise NotFoundError(f"No document to update: {collection}/{key}")
        existing.update(self._resolve(data))

    def ping(self):
        return self.fail_with is None


class FakeAuthProvider:
    """Accepts the accounts registered with ``add``; everything else fails."""

    def __init__(self):
        self.accounts = {}
        self.signed_out = []

    def add(self, email, password, uid):
        self.accounts[email] = (password, uid)

    def sign_in(self, email, password):
        if email not in self.accounts:
            raise AuthError.from_code("auth/user-not-found")
        expected, uid = self.accounts[email]
        if password != expected:
            raise AuthError.from_code("auth/wrong-password")
        return Identity(uid=uid, email=email)

    def sign_out(self, identity):
        self.signed_out.append(identity.uid)


# ── Fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def empty_store():
    return FakeStore()


@pytest.fixture
def store():
    s = FakeStore()
    s.add("users", "pat-1", {
        "name": "Ada Patient", "email": "ada@example.com",
        "role": "patient", "medicalCardID": "MC-0001",
    })
    s.add("users", "doc-1", {"name": "Dr. Who", "email": "who@example.com", "role": "doctor"})
    return s


@pytest.fixture
def auth_provider():
    provider = FakeAuthProvider()
    provider.add("ada@example.com", "secret", "pat-1")
    provider.add("who@example.com", "tardis", "doc-1")
    return provider


@pytest.fixture
def client(store, auth_provider):
    return PortalClient(auth=auth_provider, store=store)


@pytest.fixture
def patient():
    return Identity(uid="pat-1", email="ada@example.com")


@pytest.fixture
def doctor():
    return Identity(uid="doc-1", email="who@example.com")


@pytest.fixture(autouse=True)
def clear_sessions():
    api_auth.sessions.clear()
    yield
    api_auth.sessions.clear()
