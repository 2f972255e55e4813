"""
Patient dashboard: the caller's own profile and single active prescription.
"""

import sys

from medvend.config import DOCTOR_PAGE, PLACEHOLDER, PRESCRIPTIONS_COLLECTION
from medvend.errors import PortalError
from medvend.models import Identity, Prescription, Role
from medvend.presentation import PageView, format_date, format_medicines, or_placeholder
from medvend.rbac import load_profile


def load_patient_dashboard(client, identity: Identity, view: PageView):
    """Populate the medical card, or the "no prescription" state.

    Any failure (missing profile, store error) ends in the same
    "no prescription" state as an absent record; it is only told apart in
    the server log.
    """
    view.show("loadingState")
    try:
        profile = load_profile(client.store, identity.uid)
        if profile is None:
            print(f"[WARN] User profile not found for {identity.uid}", file=sys.stderr)
            _show_empty(view)
            return

        if profile.role is Role.DOCTOR:
            view.redirect(DOCTOR_PAGE)
            return

        view.set_text("patientName", profile.name or identity.email)

        matches = client.store.query(
            PRESCRIPTIONS_COLLECTION, {"patientUID": identity.uid}, limit=1
        )
        if not matches:
            _show_empty(view)
            return

        prescription = Prescription.from_document(matches[0].id, matches[0].data)
    except PortalError as e:
        print(f"[ERROR] Error loading patient dashboard: {e.message}", file=sys.stderr)
        _show_empty(view)
        return

    view.hide("loadingState")
    view.show("medicalCard")

    view.set_text("cardName", profile.name or PLACEHOLDER)
    view.set_text("cardID", profile.medical_card_id or PLACEHOLDER)
    view.set_text("cardEmail", profile.email or identity.email)
    view.set_text(
        "cardUpdated",
        format_date(prescription.last_updated) if prescription.last_updated else PLACEHOLDER,
    )

    view.set_text("medicines", format_medicines(prescription.medicines))
    view.set_text("dosage", or_placeholder(prescription.dosage))
    view.set_text(
        "refillLimit",
        f"{prescription.refill_limit} refills" if prescription.refill_limit is not None else PLACEHOLDER,
    )
    view.set_text("expiryDate", or_placeholder(prescription.expiry_date))


def _show_empty(view: PageView):
    view.hide("loadingState")
    view.show("noPrescrip")
