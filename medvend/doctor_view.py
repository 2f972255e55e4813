"""
Doctor dashboard: the doctor's own header and patient search by email.
"""

import sys
from typing import Optional

from medvend.config import LOGIN_PAGE, PATIENT_PAGE, PLACEHOLDER, USERS_COLLECTION
from medvend.errors import NotFoundError, PortalError, ValidationError
from medvend.models import Identity, Role, UserProfile
from medvend.presentation import PageView
from medvend.rbac import load_profile


def load_doctor_dashboard(client, identity: Identity, view: PageView):
    """Show the doctor's name; send anyone else to their own page."""
    try:
        profile = load_profile(client.store, identity.uid)
    except PortalError as e:
        print(f"[ERROR] Error loading doctor dashboard: {e.message}", file=sys.stderr)
        view.show_error("errorMsg", "Error loading doctor profile: " + e.message, e)
        return

    if profile is None:
        view.redirect(LOGIN_PAGE)
        return
    if profile.role is not Role.DOCTOR:
        view.redirect(PATIENT_PAGE)
        return

    view.set_text("doctorName", profile.name or identity.email)


def search_patient(client, raw_email: str, form, view: PageView) -> Optional[UserProfile]:
    """Look up a patient by exact email and select them on *form*.

    The found uid is written to ``form.patient_uid``; that is the value the
    next prescription save uses.
    """
    email = (raw_email or "").strip().lower()

    # a new search always drops the previous selection
    form.patient_uid = ""
    view.set_value("patientUID", "")
    view.hide("searchResult")
    view.hide("notFoundMsg")

    if not email:
        message = "Please enter a patient email address."
        view.show_error("notFoundMsg", message, ValidationError(message, ["searchEmail"]))
        return None

    try:
        matches = client.store.query(
            USERS_COLLECTION, {"email": email, "role": Role.PATIENT.value}, limit=1
        )
    except PortalError as e:
        print(f"[ERROR] Search error: {e.message}", file=sys.stderr)
        view.show_error("notFoundMsg", "Error searching for patient: " + e.message, e)
        return None

    if not matches:
        message = "No patient found with this email."
        view.show_error("notFoundMsg", message, NotFoundError(message))
        return None

    patient = UserProfile.from_document(matches[0].id, matches[0].data)

    view.set_text("foundName", patient.name or PLACEHOLDER)
    view.set_text("foundEmail", patient.email or email)
    view.set_text("foundCardID", patient.medical_card_id or PLACEHOLDER)
    view.set_text("foundUID", patient.uid)

    form.patient_uid = patient.uid
    view.set_value("patientUID", patient.uid)

    view.show("searchResult")
    return patient
