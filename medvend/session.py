"""
Per-browser sign-in state and the login/logout handlers that drive it.
"""

import sys
from typing import Callable, List, Optional

from medvend.config import LOGIN_BUTTON_LABEL, LOGIN_PAGE
from medvend.errors import PortalError, ValidationError
from medvend.models import Identity
from medvend.presentation import PageView

Listener = Callable[[Optional[Identity]], None]


class AuthSession:
    """Sign-in state of one browser, observable through ``subscribe``.

    A new subscriber is called once immediately with the current identity
    (or None), then synchronously after every sign-in and sign-out, in
    subscription order.
    """

    def __init__(self, provider, identity: Optional[Identity] = None):
        self.provider = provider
        self._identity = identity
        self._listeners: List[Listener] = []

    @property
    def current_user(self) -> Optional[Identity]:
        return self._identity

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self._identity)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, email: str, password: str) -> Identity:
        identity = self.provider.sign_in(email, password)
        self._identity = identity
        self._notify()
        return identity

    def sign_out(self):
        identity, self._identity = self._identity, None
        try:
            if identity is not None:
                self.provider.sign_out(identity)
        finally:
            self._notify()

    def _notify(self):
        for listener in list(self._listeners):
            listener(self._identity)


def handle_login(session: AuthSession, email: str, password: str, view: PageView) -> Optional[Identity]:
    """Sign in from the login form; on failure show the mapped error message."""
    email = (email or "").strip()
    password = password or ""

    if not email or not password:
        view.show_error(
            "errorMsg",
            "Please enter both email and password.",
            ValidationError("Please enter both email and password.", ["email", "password"]),
        )
        return None

    view.set_button("loginBtn", "Signing in...", disabled=True)
    view.hide("errorMsg")

    try:
        # Subscribers (the session gate) handle the redirect.
        return session.sign_in(email, password)
    except PortalError as e:
        view.set_button("loginBtn", LOGIN_BUTTON_LABEL, disabled=False)
        view.show_error("errorMsg", e.message, e)
        return None


def handle_logout(session: AuthSession, view: PageView):
    try:
        session.sign_out()
    except PortalError as e:
        print(f"[ERROR] Logout error: {e.message}", file=sys.stderr)
        return
    view.redirect(LOGIN_PAGE)
