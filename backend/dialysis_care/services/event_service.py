import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dialysis_care.auth import UserPrincipal
from dialysis_care.exceptions import NotFoundError
from dialysis_care.models.event import Event
from dialysis_care.models.session import Session
from dialysis_care.models.user import User
from dialysis_care.schemas.event import EventCreate, EventResolveRequest
from dialysis_care.services.patient_service import assigned_doctor_id, get_patient, resolve_patient

logger = logging.getLogger(__name__)

SYSTEM = "system"


class EventService:
    async def create(self, principal: UserPrincipal, data: EventCreate, db: AsyncSession) -> Event:
        # For patients resolve_patient ignores data.patient_id: self-reports are always their own
        patient = await resolve_patient(db, principal, data.patient_id)
        return await self.record(patient, data, principal.role, db)

    async def create_system_event(self, patient_id: int, data: EventCreate, db: AsyncSession) -> Event:
        """Record an event raised by the application itself rather than a user."""
        patient = await get_patient(patient_id, db)
        if patient is None:
            raise NotFoundError("Patient not found")
        return await self.record(patient, data, SYSTEM, db)

    async def record(self, patient: User, data: EventCreate, created_by_role: str, db: AsyncSession) -> Event:
        doctor_id = assigned_doctor_id(patient)

        if data.related_session_id is not None:
            related = await db.get(Session, data.related_session_id)
            if related is None or related.patient_id != patient.id:
                raise NotFoundError("Related session not found")

        event = Event(
            patient_id=patient.id,
            doctor_id=doctor_id,
            event_type=data.event_type,
            description=data.description,
            severity=data.severity,
            related_session_id=data.related_session_id,
            event_date=data.event_date,
            resolved=False,
            resolution_notes="",
            created_by_role=created_by_role,
        )
        db.add(event)
        await db.flush()
        await db.refresh(event)
        logger.info("Event %s (%s) recorded for patient %s by %s",
                    event.id, event.event_type, patient.id, created_by_role)
        return event

    async def list_for_patient(
        self, principal: UserPrincipal, patient_id: Optional[int], db: AsyncSession
    ) -> list[Event]:
        patient = await resolve_patient(db, principal, patient_id)
        result = await db.execute(
            select(Event)
            .where(Event.patient_id == patient.id)
            .order_by(Event.event_date.desc(), Event.id.desc())
        )
        return result.scalars().all()

    async def resolve(self, principal: UserPrincipal, data: EventResolveRequest, db: AsyncSession) -> Event:
        event = await db.get(Event, data.event_id)
        if event is None or not principal.owns(event):
            raise NotFoundError("Event not found or unauthorized")

        event.resolved = True
        event.resolution_notes = data.resolution_notes or ""
        event.resolved_at = datetime.now(timezone.utc)
        await db.flush()
        await db.refresh(event)
        logger.info("Event %s resolved by doctor %s", event.id, principal.id)
        return event


event_service = EventService()
