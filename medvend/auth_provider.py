"""
Auth provider adapters: credential verification and identity issuance.

Both adapters expose ``sign_in(email, password) -> Identity`` and
``sign_out(identity)``, raising AuthError for named sign-in failures and
TransportError for anything else.
"""

import uuid
from typing import Optional

import requests
from werkzeug.security import check_password_hash, generate_password_hash

from medvend.config import ACCOUNTS_COLLECTION, FIREBASE_AUTH_URL
from medvend.errors import AuthError, TransportError
from medvend.models import Identity


# Identity Toolkit REST error strings → provider error codes
FIREBASE_ERROR_CODES = {
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_EMAIL": "auth/invalid-email",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "USER_DISABLED": "auth/user-disabled",
}


class FirebaseAuthProvider:
    """Email/password sign-in against the Firebase Identity Toolkit REST API."""

    def __init__(self, api_key: str, http: Optional[requests.Session] = None, timeout: float = 10.0):
        self.api_key = api_key
        self.http = http or requests.Session()
        self.timeout = timeout

    def sign_in(self, email: str, password: str) -> Identity:
        url = f"{FIREBASE_AUTH_URL}/accounts:signInWithPassword"
        try:
            response = self.http.post(
                url,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code != 200:
            raw = (payload.get("error") or {}).get("message") or response.text
            # e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account ..."
            reason = raw.split(":", 1)[0].strip()
            code = FIREBASE_ERROR_CODES.get(reason)
            if code is None:
                if response.status_code >= 500:
                    raise TransportError(raw)
                code = "auth/" + reason.lower().replace("_", "-")
            raise AuthError.from_code(code, raw)

        return Identity(
            uid=payload["localId"],
            email=payload.get("email") or email,
            id_token=payload.get("idToken"),
        )

    def sign_out(self, identity: Identity) -> None:
        # ID tokens are stateless; dropping them is all signing out means here.
        return None


class LocalAuthProvider:
    """Accounts kept in the document store, keyed by lower-cased email."""

    def __init__(self, store):
        self.store = store

    def create_account(self, email: str, password: str, uid: Optional[str] = None) -> str:
        uid = uid or uuid.uuid4().hex
        self.store.set(ACCOUNTS_COLLECTION, email.strip().lower(), {
            "uid": uid,
            "passwordHash": generate_password_hash(password),
        })
        return uid

    def sign_in(self, email: str, password: str) -> Identity:
        email = email.strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise AuthError.from_code("auth/invalid-email")

        account = self.store.get(ACCOUNTS_COLLECTION, email)
        if not account.exists:
            raise AuthError.from_code("auth/user-not-found")
        if not check_password_hash(account.get("passwordHash", ""), password):
            raise AuthError.from_code("auth/wrong-password")

        print(f"[auth] Local sign-in for {email}")
        return Identity(uid=account.get("uid"), email=email)

    def sign_out(self, identity: Identity) -> None:
        return None
