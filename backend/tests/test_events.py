"""
Tests for adverse events.

Endpoints tested:
- POST  /api/clinical/events
- POST  /api/clinical/events/list
- PATCH /api/clinical/events/resolve
"""
import asyncio
import os
import tempfile

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from dialysis_care.database import Base
from dialysis_care.models.user import User
from dialysis_care.schemas.event import EventCreate
from dialysis_care.services.event_service import event_service


def report(client, account, **fields):
    body = {"eventType": "peritonitis", "eventDate": "2026-03-01T09:30:00", **fields}
    return client.post("/api/clinical/events", json=body, headers=account.headers)


class TestCreateEvent:
    def test_doctor_records_event(self, client, doctor, patient):
        response = report(client, doctor, patientId=patient.id, severity="severe", description="Cloudy bag")
        assert response.status_code == 200
        event = response.json()["event"]
        assert event["patientId"] == patient.id
        assert event["doctorId"] == doctor.id
        assert event["eventType"] == "peritonitis"
        assert event["severity"] == "severe"
        assert event["description"] == "Cloudy bag"
        assert event["resolved"] is False
        assert event["resolvedAt"] is None
        assert event["createdByRole"] == "doctor"

    def test_patient_self_report_is_always_their_own(self, client, doctor, patient, other_patient):
        response = report(client, patient, patientId=other_patient.id, eventType="exit_site_infection")
        assert response.status_code == 200
        event = response.json()["event"]
        assert event["patientId"] == patient.id
        assert event["doctorId"] == doctor.id
        assert event["createdByRole"] == "patient"

    def test_severity_defaults_to_moderate(self, client, doctor, patient):
        event = report(client, patient).json()["event"]
        assert event["severity"] == "moderate"

    def test_doctor_must_name_patient(self, client, doctor):
        response = report(client, doctor)
        assert response.status_code == 400
        assert response.json() == {"message": "patientId is required"}

    def test_doctor_cannot_report_for_foreign_patient(self, client, doctor, foreign_patient):
        response = report(client, doctor, patientId=foreign_patient.id)
        assert response.status_code == 403

    def test_unknown_event_type(self, client, patient):
        response = report(client, patient, eventType="sneezing")
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid eventType"}

    def test_event_date_required(self, client, patient):
        response = client.post(
            "/api/clinical/events", json={"eventType": "peritonitis"}, headers=patient.headers,
        )
        assert response.status_code == 400
        assert response.json() == {"message": "eventDate is required"}

    def test_related_session_must_belong_to_patient(self, client, doctor, patient, other_patient, ledger):
        own = ledger.start_material(doctor, patient)
        theirs = ledger.start_material(doctor, other_patient)

        ok = report(client, patient, relatedSessionId=own["id"])
        assert ok.status_code == 200
        assert ok.json()["event"]["relatedSessionId"] == own["id"]

        rejected = report(client, patient, relatedSessionId=theirs["id"])
        assert rejected.status_code == 404
        assert rejected.json() == {"message": "Related session not found"}


class TestListEvents:
    def test_newest_event_date_first(self, client, doctor, patient):
        report(client, patient, eventDate="2026-01-05T08:00:00", eventType="hospitalization")
        report(client, patient, eventDate="2026-03-05T08:00:00", eventType="peritonitis")
        report(client, patient, eventDate="2026-02-05T08:00:00", eventType="other")

        response = client.post("/api/clinical/events/list", json={"patientId": patient.id}, headers=doctor.headers)
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert [e["eventType"] for e in body["events"]] == ["peritonitis", "other", "hospitalization"]

    def test_patient_lists_only_own_events(self, client, doctor, patient, other_patient):
        report(client, doctor, patientId=patient.id)
        report(client, doctor, patientId=other_patient.id)

        response = client.post("/api/clinical/events/list", json={}, headers=patient.headers)
        events = response.json()["events"]
        assert len(events) == 1
        assert events[0]["patientId"] == patient.id


class TestResolveEvent:
    def test_doctor_resolves(self, client, doctor, patient):
        event_id = report(client, patient).json()["event"]["id"]

        response = client.patch(
            "/api/clinical/events/resolve",
            json={"eventId": event_id, "resolutionNotes": "Antibiotics course completed"},
            headers=doctor.headers,
        )
        assert response.status_code == 200
        event = response.json()["event"]
        assert event["resolved"] is True
        assert event["resolutionNotes"] == "Antibiotics course completed"
        assert event["resolvedAt"] is not None

    def test_resolving_again_is_allowed(self, client, doctor, patient):
        event_id = report(client, patient).json()["event"]["id"]
        for notes in ("first pass", "second pass"):
            response = client.patch(
                "/api/clinical/events/resolve",
                json={"eventId": event_id, "resolutionNotes": notes},
                headers=doctor.headers,
            )
            assert response.status_code == 200
        assert response.json()["event"]["resolutionNotes"] == "second pass"

    def test_patient_cannot_resolve(self, client, patient):
        event_id = report(client, patient).json()["event"]["id"]
        response = client.patch("/api/clinical/events/resolve", json={"eventId": event_id}, headers=patient.headers)
        assert response.status_code == 403

    def test_other_doctor_cannot_resolve(self, client, other_doctor, patient):
        event_id = report(client, patient).json()["event"]["id"]
        response = client.patch(
            "/api/clinical/events/resolve", json={"eventId": event_id}, headers=other_doctor.headers,
        )
        assert response.status_code == 404
        assert response.json() == {"message": "Event not found or unauthorized"}


class TestSystemEvents:
    def test_system_event_is_attributed_to_system(self):
        db_path = os.path.join(tempfile.mkdtemp(prefix="dialysis-care-events-"), "events.db")

        async def scenario():
            engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(engine, expire_on_commit=False)
            try:
                async with session_factory() as db:
                    doctor = User(name="Dr. Rao", email="rao@renalcare.in", password_hash="x", role="doctor")
                    db.add(doctor)
                    await db.flush()
                    patient = User(
                        name="Asha Patel", email="asha@patientmail.in", password_hash="x",
                        role="patient", doctor_id=doctor.id,
                    )
                    db.add(patient)
                    await db.flush()

                    data = EventCreate(event_type="missed_dialysis", event_date="2026-03-01T09:30:00")
                    event = await event_service.create_system_event(patient.id, data, db)
                    return event.created_by_role, event.patient_id, event.doctor_id, patient.id, doctor.id
            finally:
                await engine.dispose()

        role, patient_id, doctor_id, expected_patient, expected_doctor = asyncio.run(scenario())
        assert role == "system"
        assert patient_id == expected_patient
        assert doctor_id == expected_doctor
        os.remove(db_path)
