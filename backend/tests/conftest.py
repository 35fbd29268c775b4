"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- A TestClient bound to a fresh SQLite database per test
- Doctor and patient accounts registered and logged in through the API
- A fake image storage provider in place of Cloudinary
- A small ledger helper for driving session lifecycles
"""
import os
import tempfile
from dataclasses import dataclass

_DB_DIR = tempfile.mkdtemp(prefix="dialysis-care-tests-")
DB_PATH = os.path.join(_DB_DIR, "test.db")

# Must be set before dialysis_care builds its settings and engine
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["CLOUDINARY_CLOUD_NAME"] = ""

import pytest
from fastapi.testclient import TestClient
from dialysis_care.exceptions import StorageError
from dialysis_care.main import app
from dialysis_care.schemas.image import StoredObject
from dialysis_care.services.storage_service import get_image_storage

PASSWORD = "s3cret-pass"


class FakeStorage:
    """Stands in for Cloudinary; records uploads and can be told to fail."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        if self.fail:
            raise StorageError("Image upload failed")
        self.uploads.append({"filename": filename, "content": content, "content_type": content_type})
        n = len(self.uploads)
        return StoredObject(
            url=f"https://res.cloudinary.test/dialysis_app/proof-{n}.jpg",
            public_id=f"dialysis_app/proof-{n}",
        )


@dataclass
class Account:
    id: int
    email: str
    headers: dict


# ============================================================================
# App & database
# ============================================================================

@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_image_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)


# ============================================================================
# Accounts
# ============================================================================

def register(client, name, email, role, doctor_id=None):
    body = {"name": name, "email": email, "password": PASSWORD, "role": role}
    if doctor_id is not None:
        body["doctorId"] = doctor_id
    response = client.post("/api/auth/register", json=body)
    assert response.status_code == 200, response.text
    return response.json()["userId"]


def login(client, email):
    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def make_account(client, name, email, role, doctor_id=None):
    user_id = register(client, name, email, role, doctor_id)
    return Account(id=user_id, email=email, headers=login(client, email))


@pytest.fixture
def doctor(client):
    return make_account(client, "Dr. Rao", "rao@renalcare.in", "doctor")


@pytest.fixture
def other_doctor(client):
    return make_account(client, "Dr. Mehta", "mehta@renalcare.in", "doctor")


@pytest.fixture
def patient(client, doctor):
    return make_account(client, "Asha Patel", "asha@patientmail.in", "patient", doctor.id)


@pytest.fixture
def other_patient(client, doctor):
    """Second patient of the same doctor."""
    return make_account(client, "Vikram Singh", "vikram@patientmail.in", "patient", doctor.id)


@pytest.fixture
def foreign_patient(client, other_doctor):
    """Patient assigned to a different doctor."""
    return make_account(client, "Leela Nair", "leela@patientmail.in", "patient", other_doctor.id)


# ============================================================================
# Session ledger helper
# ============================================================================

class Ledger:
    def __init__(self, client):
        self.client = client

    def start_material(self, doctor, patient, sessions_count=3, **materials):
        body = {"patientId": patient.id, "sessionsCount": sessions_count, **materials}
        response = self.client.post("/api/upload/start-material-session", json=body, headers=doctor.headers)
        assert response.status_code == 200, response.text
        return response.json()["session"]

    def start_dialysis(self, patient, material_session_id):
        return self.client.post(
            "/api/upload/start-dialysis-session",
            json={"materialSessionId": material_session_id},
            headers=patient.headers,
        )

    def finish(self, patient, session_id, **report):
        return self.client.patch(
            "/api/upload/finish-dialysis-session",
            json={"sessionId": session_id, **report},
            headers=patient.headers,
        )

    def verify(self, doctor, session_id, notes=None):
        body = {"sessionId": session_id}
        if notes is not None:
            body["verificationNotes"] = notes
        return self.client.patch("/api/upload/verify-dialysis-session", json=body, headers=doctor.headers)

    def complete_one(self, patient, material_session_id):
        """Start and finish a dialysis session; returns its id."""
        started = self.start_dialysis(patient, material_session_id)
        assert started.status_code == 200, started.text
        session_id = started.json()["session"]["id"]
        finished = self.finish(patient, session_id, feelingOk=True)
        assert finished.status_code == 200, finished.text
        return session_id


@pytest.fixture
def ledger(client):
    return Ledger(client)
