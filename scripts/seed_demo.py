#!/usr/bin/env python3
"""
Seed the document store with demo doctors, patients and prescriptions.

The portal never creates user profiles itself; this script creates them for
local development. Accounts are only created when AUTH_BACKEND=local.
"""

import random
from datetime import date, timedelta

from faker import Faker

from medvend.auth_provider import LocalAuthProvider
from medvend.config import AUTH_BACKEND, PRESCRIPTIONS_COLLECTION, USERS_COLLECTION
from medvend.database import SERVER_TIMESTAMP, DocumentStore, init_engine

# --------------------------------------------------------------------
# CONFIG
# --------------------------------------------------------------------
NUM_DOCTORS = 3
NUM_PATIENTS = 10
DEMO_PASSWORD = "medvend-demo"

# share of patients that get a prescription
PRESCRIBED_SHARE = 0.7

MEDICINES = [
    "Paracetamol", "Amoxicillin", "Ibuprofen", "Metformin", "Atorvastatin",
    "Omeprazole", "Amlodipine", "Salbutamol", "Cetirizine", "Lisinopril",
]
DOSAGES = ["1 tablet twice daily", "500mg every 8 hours", "1 capsule at night", "2 puffs as needed"]

# --------------------------------------------------------------------
# SETUP
# --------------------------------------------------------------------
fake = Faker()
random.seed(42)
Faker.seed(42)


# --------------------------------------------------------------------
# HELPERS
# --------------------------------------------------------------------
def make_uid(accounts, email):
    if accounts is None:
        return fake.uuid4().replace("-", "")
    return accounts.create_account(email, DEMO_PASSWORD)


def seed_users(store, accounts, role, n):
    uids = []
    for _ in range(n):
        name = fake.name()
        email = fake.unique.email().lower()
        uid = make_uid(accounts, email)
        profile = {"name": ("Dr. " + name) if role == "doctor" else name, "email": email, "role": role}
        if role == "patient":
            profile["medicalCardID"] = "MC-" + fake.bothify("####-####")
        store.set(USERS_COLLECTION, uid, profile)
        print(f"  {role:8} {email:40} {uid}")
        uids.append(uid)
    return uids


def seed_prescriptions(store, patient_uids, doctor_uids):
    count = 0
    for patient_uid in patient_uids:
        if random.random() > PRESCRIBED_SHARE:
            continue
        expiry = date.today() + timedelta(days=random.randint(30, 365))
        store.set(PRESCRIPTIONS_COLLECTION, patient_uid, {
            "patientUID": patient_uid,
            "doctorUID": random.choice(doctor_uids),
            "medicines": random.sample(MEDICINES, random.randint(1, 3)),
            "dosage": random.choice(DOSAGES),
            "refillLimit": random.randint(0, 5),
            "expiryDate": expiry.isoformat(),
            "lastUpdated": SERVER_TIMESTAMP,
        })
        count += 1
    return count


def main():
    store = DocumentStore(init_engine())
    store.create_schema()
    accounts = LocalAuthProvider(store) if AUTH_BACKEND == "local" else None

    print("Doctors:")
    doctor_uids = seed_users(store, accounts, "doctor", NUM_DOCTORS)
    print("Patients:")
    patient_uids = seed_users(store, accounts, "patient", NUM_PATIENTS)

    count = seed_prescriptions(store, patient_uids, doctor_uids)
    print(f"\nSeeded {len(doctor_uids)} doctors, {len(patient_uids)} patients, {count} prescriptions.")
    if accounts is not None:
        print(f"Every demo account uses the password: {DEMO_PASSWORD}")
    else:
        print("AUTH_BACKEND is not 'local': create matching Firebase accounts for these uids.")


if __name__ == "__main__":
    main()
