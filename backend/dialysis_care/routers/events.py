from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.database import get_db
from dialysis_care.auth import UserPrincipal, require_doctor, require_member
from dialysis_care.schemas.common import PatientQuery
from dialysis_care.schemas.event import (
    EventCreate,
    EventEnvelope,
    EventListResponse,
    EventResolveRequest,
    EventResponse,
)
from dialysis_care.services.event_service import event_service

router = APIRouter()


@router.post("/events", response_model=EventEnvelope)
async def create_event(
    data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    event = await event_service.create(current_user, data, db)
    return EventEnvelope(event=EventResponse.model_validate(event))


@router.post("/events/list", response_model=EventListResponse)
async def list_events(
    query: PatientQuery = PatientQuery(),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    events = await event_service.list_for_patient(current_user, query.patient_id, db)
    return EventListResponse(
        count=len(events),
        events=[EventResponse.model_validate(e) for e in events],
    )


@router.patch("/events/resolve", response_model=EventEnvelope)
async def resolve_event(
    data: EventResolveRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    event = await event_service.resolve(current_user, data, db)
    return EventEnvelope(event=EventResponse.model_validate(event))
