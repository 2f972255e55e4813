"""
Unit tests for the session gate's page/sign-in decision table.
"""

import pytest

from medvend.gate import SessionGate, page_from_path, redirect_based_on_role
from medvend.models import Identity
from medvend.presentation import PageView
from medvend.session import AuthSession


def run_gate(client, page, identity):
    gate = SessionGate(client, page)
    gate(identity)
    return gate.view


# ── Tests: page detection ────────────────────────────────────────────

@pytest.mark.parametrize("path, page", [
    ("/", "index.html"),
    ("", "index.html"),
    ("/login.html", "login.html"),
    ("/portal/doctor.html", "doctor.html"),
    ("http://localhost:8000/dashboard.html", "dashboard.html"),
])
def test_page_from_path(path, page):
    assert page_from_path(path) == page


# ── Tests: signed out ────────────────────────────────────────────────

@pytest.mark.parametrize("page", ["dashboard.html", "doctor.html"])
def test_signed_out_dashboard_redirects_to_login(client, page):
    view = run_gate(client, page, None)
    assert view.redirect_to == "login.html"
    assert view.to_dict() == {"page": page, "redirect": "login.html"}


@pytest.mark.parametrize("page", ["login.html", "index.html", "about.html"])
def test_signed_out_other_pages_stay(client, page):
    view = run_gate(client, page, None)
    assert view.redirect_to is None
    assert view.texts == {}


# ── Tests: signed in ─────────────────────────────────────────────────

def test_login_page_redirects_doctor(client, doctor):
    assert run_gate(client, "login.html", doctor).redirect_to == "doctor.html"


def test_login_page_redirects_patient(client, patient):
    assert run_gate(client, "login.html", patient).redirect_to == "dashboard.html"


def test_login_page_unknown_role_goes_to_patient_dashboard(client, store):
    store.add("users", "u-9", {"email": "odd@example.com", "role": "pharmacist"})
    view = run_gate(client, "login.html", Identity("u-9", "odd@example.com"))
    assert view.redirect_to == "dashboard.html"


def test_login_page_profile_missing_shows_error_without_redirect(client):
    view = run_gate(client, "login.html", Identity("ghost", "ghost@example.com"))
    assert view.redirect_to is None
    assert view.is_visible("errorMsg")
    assert view.texts["errorMsg"] == "User profile not found in database. Contact admin."
    assert view.status_code == 404


def test_login_page_lookup_failure_shows_message(client, store, patient):
    store.fail_with = "unavailable"
    view = PageView("login.html")
    redirect_based_on_role(client, patient, view)
    assert view.redirect_to is None
    assert view.texts["errorMsg"] == "Error loading user profile: unavailable"
    assert view.status_code == 502


def test_patient_dashboard_loads_for_patient(client, patient):
    view = run_gate(client, "dashboard.html", patient)
    assert view.redirect_to is None
    assert view.texts["patientName"] == "Ada Patient"


def test_doctor_dashboard_loads_for_doctor(client, doctor):
    view = run_gate(client, "doctor.html", doctor)
    assert view.redirect_to is None
    assert view.texts["doctorName"] == "Dr. Who"


def test_other_page_signed_in_no_action(client, store, doctor):
    view = run_gate(client, "index.html", doctor)
    assert view.redirect_to is None
    assert store.calls == []


# ── Tests: driven by the auth subscription ───────────────────────────

def test_gate_redirects_after_sign_in_event(client):
    session = AuthSession(client.auth)
    gate = SessionGate(client, "login.html")
    session.subscribe(gate)
    assert gate.view.redirect_to is None

    session.sign_in("who@example.com", "tardis")
    assert gate.view.redirect_to == "doctor.html"


def test_gate_redirects_after_sign_out_event(client, doctor):
    session = AuthSession(client.auth, identity=doctor)
    gate = SessionGate(client, "doctor.html")
    session.subscribe(gate)
    assert gate.view.redirect_to is None

    session.sign_out()
    assert gate.view.redirect_to == "login.html"
