"""
Unit tests for the patient dashboard loader.
"""

from datetime import datetime, timezone

from medvend.models import Identity
from medvend.patient_view import load_patient_dashboard
from medvend.presentation import PageView


def load(client, identity):
    view = PageView("dashboard.html")
    load_patient_dashboard(client, identity, view)
    return view


def add_prescription(store, **overrides):
    data = {
        "patientUID": "pat-1",
        "doctorUID": "doc-1",
        "medicines": ["Paracetamol", "Amoxicillin"],
        "dosage": "1 tablet twice daily",
        "refillLimit": 2,
        "expiryDate": "2025-01-31",
        "lastUpdated": datetime(2024, 2, 17, 9, 30, tzinfo=timezone.utc),
    }
    data.update(overrides)
    store.add("prescriptions", "pat-1", data)


# ── Tests: happy path ────────────────────────────────────────────────

def test_full_medical_card(client, store, patient):
    add_prescription(store)
    view = load(client, patient)

    assert not view.is_visible("loadingState")
    assert view.is_visible("medicalCard")
    assert not view.is_visible("noPrescrip")
    assert view.texts == {
        "patientName": "Ada Patient",
        "cardName": "Ada Patient",
        "cardID": "MC-0001",
        "cardEmail": "ada@example.com",
        "cardUpdated": "17 February 2024",
        "medicines": "Paracetamol, Amoxicillin",
        "dosage": "1 tablet twice daily",
        "refillLimit": "2 refills",
        "expiryDate": "2025-01-31",
    }


def test_prescription_fetched_by_exact_uid_with_limit_one(client, store, patient):
    add_prescription(store)
    load(client, patient)
    assert ("query", "prescriptions", {"patientUID": "pat-1"}, 1) in store.calls


def test_absent_fields_render_placeholder(client, store):
    store.add("users", "pat-2", {"email": "bare@example.com", "role": "patient"})
    store.add("prescriptions", "pat-2", {"patientUID": "pat-2", "medicines": ["A"]})
    view = load(client, Identity("pat-2", "bare@example.com"))

    assert view.texts["patientName"] == "bare@example.com"
    assert view.texts["cardName"] == "—"
    assert view.texts["cardID"] == "—"
    assert view.texts["cardUpdated"] == "—"
    assert view.texts["dosage"] == "—"
    assert view.texts["refillLimit"] == "—"
    assert view.texts["expiryDate"] == "—"


def test_zero_refills_is_not_absent(client, store, patient):
    add_prescription(store, refillLimit=0)
    assert load(client, patient).texts["refillLimit"] == "0 refills"


def test_legacy_string_medicines_rendered_verbatim(client, store, patient):
    add_prescription(store, medicines="Paracetamol 500mg")
    assert load(client, patient).texts["medicines"] == "Paracetamol 500mg"


def test_card_email_falls_back_to_identity(client, store):
    store.add("users", "pat-3", {"name": "No Mail", "role": "patient"})
    store.add("prescriptions", "pat-3", {"patientUID": "pat-3"})
    view = load(client, Identity("pat-3", "login@example.com"))
    assert view.texts["cardEmail"] == "login@example.com"


# ── Tests: empty and error states ────────────────────────────────────

def test_no_prescription_state(client, patient):
    view = load(client, patient)
    assert view.is_visible("noPrescrip")
    assert not view.is_visible("loadingState")
    assert not view.is_visible("medicalCard")
    assert view.status_code == 200


def test_store_failure_collapses_to_no_prescription(client, store, patient, capsys):
    store.fail_with = "permission denied"
    view = load(client, patient)
    assert view.is_visible("noPrescrip")
    assert not view.is_visible("loadingState")
    assert "permission denied" in capsys.readouterr().err


def test_missing_profile_collapses_to_no_prescription(client):
    view = load(client, Identity("ghost", "ghost@example.com"))
    assert view.is_visible("noPrescrip")
    assert not view.is_visible("loadingState")


# ── Tests: authorization ─────────────────────────────────────────────

def test_doctor_is_redirected_to_doctor_page(client, store, doctor):
    view = load(client, doctor)
    assert view.redirect_to == "doctor.html"
    assert all(call[1] != "prescriptions" for call in store.calls)
