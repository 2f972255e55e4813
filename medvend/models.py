"""
Domain types used across the application.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"

    @classmethod
    def from_value(cls, value: Any) -> "Role":
        """Map a stored role field to a Role.

        Only the exact string ``"doctor"`` yields DOCTOR. Anything else,
        including a missing field, is treated as PATIENT.
        """
        if value == cls.DOCTOR.value:
            return cls.DOCTOR
        return cls.PATIENT


@dataclass
class Identity:
    """A signed-in user as reported by the auth provider."""
    uid: str
    email: str
    id_token: Optional[str] = None


@dataclass
class UserProfile:
    uid: str
    email: str
    role: Role
    name: Optional[str] = None
    medical_card_id: Optional[str] = None

    @classmethod
    def from_document(cls, uid: str, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            uid=uid,
            email=data.get("email") or "",
            role=Role.from_value(data.get("role")),
            name=data.get("name") or None,
            medical_card_id=data.get("medicalCardID") or None,
        )


@dataclass
class Prescription:
    """The single active prescription stored under a patient's uid."""
    patient_uid: str
    doctor_uid: Optional[str] = None
    # list of names, or a bare string on older records
    medicines: Union[List[str], str, None] = field(default_factory=list)
    dosage: Optional[str] = None
    refill_limit: Optional[int] = None
    expiry_date: Optional[str] = None
    last_updated: Optional[datetime] = None

    @classmethod
    def from_document(cls, key: str, data: Dict[str, Any]) -> "Prescription":
        return cls(
            patient_uid=data.get("patientUID") or key,
            doctor_uid=data.get("doctorUID"),
            medicines=data.get("medicines"),
            dosage=data.get("dosage"),
            refill_limit=data.get("refillLimit"),
            expiry_date=data.get("expiryDate"),
            last_updated=data.get("lastUpdated"),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "patientUID": self.patient_uid,
            "doctorUID": self.doctor_uid,
            "medicines": self.medicines,
            "dosage": self.dosage,
            "refillLimit": self.refill_limit,
            "expiryDate": self.expiry_date,
            "lastUpdated": self.last_updated,
        }
