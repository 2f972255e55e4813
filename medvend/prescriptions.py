"""
Prescription authoring: the doctor's form state and the save operation.
"""

import re
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from medvend.config import PRESCRIPTIONS_COLLECTION, SAVE_BUTTON_LABEL
from medvend.database import SERVER_TIMESTAMP
from medvend.errors import PortalError, ValidationError
from medvend.models import Prescription
from medvend.presentation import PageView

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# request/form key → human label used in validation messages
REQUIRED_FIELDS = {
    "medicine": "medicines",
    "dosage": "dosage",
    "refill_limit": "refill limit",
    "expiry_date": "expiry date",
}


@dataclass
class PrescriptionForm:
    """Prescription form of one doctor's session.

    ``patient_uid`` is only ever set by a successful patient search and is
    cleared after every successful save.
    """
    patient_uid: str = ""
    medicine: str = ""
    dosage: str = ""
    refill_limit: str = ""
    expiry_date: str = ""
    busy: bool = False

    def fill(self, data: Dict[str, Any]):
        """Copy submitted field values onto the form (the patient is not one of them).

        ``medicine`` may also arrive as a list of names; it is joined back to
        the comma-separated text the form holds.
        """
        medicine = data.get("medicine")
        if isinstance(medicine, (list, tuple)):
            medicine = ", ".join(str(m) for m in medicine if m is not None)
        self.medicine = str(medicine or "")
        self.dosage = str(data.get("dosage") or "")
        self.refill_limit = str(data.get("refillLimit") if data.get("refillLimit") is not None else "")
        self.expiry_date = str(data.get("expiryDate") or "")

    def reset(self):
        self.patient_uid = ""
        self.medicine = ""
        self.dosage = ""
        self.refill_limit = ""
        self.expiry_date = ""

    def as_values(self) -> Dict[str, str]:
        return {
            "patientUID": self.patient_uid,
            "medicineInput": self.medicine,
            "dosageInput": self.dosage,
            "refillInput": self.refill_limit,
            "expiryInput": self.expiry_date,
        }


def parse_medicines(raw: str) -> List[str]:
    """Split free text on commas: "A, , B" -> ["A", "B"]."""
    return [m.strip() for m in raw.split(",") if m.strip()]


def parse_refill_limit(raw: str) -> int:
    """Read the leading integer of *raw* ("3 refills" -> 3)."""
    match = _LEADING_INT.match(raw)
    if not match:
        raise ValidationError("Refill limit must be a whole number.", ["refill_limit"])
    value = int(match.group(1))
    if value < 0:
        raise ValidationError("Refill limit cannot be negative.", ["refill_limit"])
    return value


def validate_form(form: PrescriptionForm):
    """Raise ValidationError unless a patient is selected and every field is filled."""
    if not form.patient_uid.strip():
        raise ValidationError(
            "Please search for a patient first and select them.", ["patient_uid"]
        )

    missing = [name for name in REQUIRED_FIELDS if not getattr(form, name).strip()]
    if missing:
        labels = ", ".join(REQUIRED_FIELDS[name] for name in missing)
        raise ValidationError(f"Please fill in all prescription fields (missing: {labels}).", missing)


def build_prescription(form: PrescriptionForm, doctor_uid: str) -> Prescription:
    medicines = parse_medicines(form.medicine)
    if not medicines:
        raise ValidationError("Please fill in all prescription fields (missing: medicines).", ["medicine"])
    return Prescription(
        patient_uid=form.patient_uid.strip(),
        doctor_uid=doctor_uid,
        medicines=medicines,
        dosage=form.dosage.strip(),
        refill_limit=parse_refill_limit(form.refill_limit),
        expiry_date=form.expiry_date.strip(),
    )


def write_prescription(store, prescription: Prescription) -> bool:
    """Create or overwrite the record keyed by the patient's uid.

    Returns True when an existing record was updated, False when created.
    """
    data = prescription.to_document()
    data["lastUpdated"] = SERVER_TIMESTAMP

    key = prescription.patient_uid
    existing = store.get(PRESCRIPTIONS_COLLECTION, key)
    if existing.exists:
        store.update(PRESCRIPTIONS_COLLECTION, key, data)
        return True
    store.set(PRESCRIPTIONS_COLLECTION, key, data)
    return False


def save_prescription(client, session, form: PrescriptionForm, view: PageView) -> Optional[Prescription]:
    """Validate the form and save it for the selected patient.

    The signed-in doctor is re-read from *session* here rather than trusted
    from page load. On success the form is reset; on failure it keeps its
    values. The save button is re-enabled on every path.
    """
    doctor = session.current_user
    if doctor is None:
        message = "You must be logged in to save a prescription."
        view.show_error("prescripError", message, ValidationError(message))
        return None

    if form.busy:
        message = "A save is already in progress."
        view.show_error("prescripError", message, ValidationError(message))
        return None

    try:
        validate_form(form)
        prescription = build_prescription(form, doctor.uid)
    except ValidationError as e:
        view.show_error("prescripError", e.message, e)
        view.values.update(form.as_values())
        return None

    form.busy = True
    view.set_button("saveBtn", "Saving...", disabled=True)
    view.hide("prescripError")
    view.hide("prescripSuccess")

    try:
        updated = write_prescription(client.store, prescription)
    except PortalError as e:
        print(f"[ERROR] Error saving prescription: {e.message}", file=sys.stderr)
        view.show_error("prescripError", "Error saving prescription: " + e.message, e)
        view.values.update(form.as_values())
        return None
    else:
        verb = "updated" if updated else "created"
        view.show_success("prescripSuccess", f"✅ Prescription {verb} successfully!")
        form.reset()
        view.values.update(form.as_values())
        return prescription
    finally:
        form.busy = False
        view.set_button("saveBtn", SAVE_BUTTON_LABEL, disabled=False)
