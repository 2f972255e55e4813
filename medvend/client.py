"""
The injected client: one auth provider plus one document store.
"""

from dataclasses import dataclass
from typing import Any

from medvend.auth_provider import FirebaseAuthProvider, LocalAuthProvider
from medvend.config import AUTH_BACKEND, get_env
from medvend.database import DocumentStore, init_engine


@dataclass
class PortalClient:
    """Everything a component needs to talk to the outside world."""
    auth: Any     # FirebaseAuthProvider, LocalAuthProvider, or a test double
    store: Any    # DocumentStore or a test double


def init_client() -> PortalClient:
    """Build the client from the environment."""
    store = DocumentStore(init_engine())
    store.create_schema()

    if AUTH_BACKEND == "local":
        auth = LocalAuthProvider(store)
    elif AUTH_BACKEND == "firebase":
        auth = FirebaseAuthProvider(get_env("FIREBASE_API_KEY"))
    else:
        raise ValueError(f"Unsupported AUTH_BACKEND '{AUTH_BACKEND}' (expected 'firebase' or 'local').")

    print(f"[init] Using auth backend: {AUTH_BACKEND}")
    return PortalClient(auth=auth, store=store)
