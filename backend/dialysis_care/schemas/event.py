from datetime import datetime
from typing import Literal, Optional
from dialysis_care.schemas.common import CamelModel

EventType = Literal[
    "peritonitis",
    "exit_site_infection",
    "hospitalization",
    "technique_issue",
    "missed_dialysis",
    "cloudy_effluent",
    "other",
]
Severity = Literal["mild", "moderate", "severe"]


class EventCreate(CamelModel):
    # Ignored for patients: self-reported events are always their own
    patient_id: Optional[int] = None
    event_type: EventType
    description: str = ""
    severity: Severity = "moderate"
    related_session_id: Optional[int] = None
    event_date: datetime


class EventResolveRequest(CamelModel):
    event_id: int
    resolution_notes: str = ""


class EventResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    event_type: str
    description: Optional[str] = ""
    severity: str
    related_session_id: Optional[int] = None
    event_date: datetime
    resolved: bool
    resolution_notes: Optional[str] = ""
    resolved_at: Optional[datetime] = None
    created_by_role: str
    created_at: Optional[datetime] = None


class EventEnvelope(CamelModel):
    success: bool = True
    event: EventResponse


class EventListResponse(CamelModel):
    success: bool = True
    count: int
    events: list[EventResponse]
