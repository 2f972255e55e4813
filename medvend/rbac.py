"""
Role resolution – looking up a signed-in identity's profile and role.
"""

from typing import Optional

from medvend.config import USERS_COLLECTION
from medvend.errors import LookupFailed, ProfileMissing, TransportError
from medvend.models import Identity, Role, UserProfile


def load_profile(store, uid: str) -> Optional[UserProfile]:
    """Fetch the profile stored under *uid*, or None when there is none."""
    snapshot = store.get(USERS_COLLECTION, uid)
    if not snapshot.exists:
        return None
    return UserProfile.from_document(snapshot.id, snapshot.data)


def resolve_role(client, identity: Identity) -> Role:
    """Return the identity's role.

    Raises ProfileMissing when no profile exists and LookupFailed when the
    lookup itself fails. A profile whose role is absent or unrecognised
    resolves to Role.PATIENT.
    """
    try:
        profile = load_profile(client.store, identity.uid)
    except TransportError as e:
        raise LookupFailed(e.message) from e

    if profile is None:
        raise ProfileMissing(identity.uid)
    return profile.role
