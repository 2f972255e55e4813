"""
Session gate – decides, on every auth-state change, whether the current page
may be shown and where to send the user otherwise.
"""

import sys
from typing import Optional

from medvend.config import (
    DOCTOR_PAGE,
    HOME_PAGE,
    LOGIN_PAGE,
    PATIENT_PAGE,
    PROTECTED_PAGES,
)
from medvend.doctor_view import load_doctor_dashboard
from medvend.errors import LookupFailed, ProfileMissing
from medvend.models import Identity, Role
from medvend.patient_view import load_patient_dashboard
from medvend.presentation import PageView
from medvend.rbac import resolve_role

ROLE_PAGES = {
    Role.PATIENT: PATIENT_PAGE,
    Role.DOCTOR: DOCTOR_PAGE,
}


def page_from_path(path: str) -> str:
    """Return the page name for a request path ("/a/login.html" -> "login.html")."""
    return path.rstrip("/").split("/")[-1] if path.strip("/") else HOME_PAGE


class SessionGate:
    """Auth-state listener for one page load.

    Subscribe it to an AuthSession; each delivery updates ``view`` with a
    redirect, a loaded dashboard, or nothing.
    """

    def __init__(self, client, page: str, view: Optional[PageView] = None):
        self.client = client
        self.page = page
        self.view = view or PageView(page)

    def __call__(self, identity: Optional[Identity]):
        if identity is None:
            if self.page in PROTECTED_PAGES:
                self.view.redirect(LOGIN_PAGE)
            return

        if self.page == LOGIN_PAGE:
            redirect_based_on_role(self.client, identity, self.view)
        elif self.page == PATIENT_PAGE:
            load_patient_dashboard(self.client, identity, self.view)
        elif self.page == DOCTOR_PAGE:
            load_doctor_dashboard(self.client, identity, self.view)


def redirect_based_on_role(client, identity: Identity, view: PageView):
    """Send a signed-in user from the login page to their dashboard."""
    try:
        role = resolve_role(client, identity)
    except ProfileMissing as e:
        view.show_error("errorMsg", e.message, e)
        return
    except LookupFailed as e:
        print(f"[ERROR] Error fetching role: {e.message}", file=sys.stderr)
        view.show_error("errorMsg", "Error loading user profile: " + e.message, e)
        return

    view.redirect(ROLE_PAGES[role])
