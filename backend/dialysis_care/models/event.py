from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from dialysis_care.database import Base


class Event(Base):
    """Adverse event (peritonitis, exit-site infection, hospitalization, ...)."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_type = Column(String(40), nullable=False, index=True)
    description = Column(Text, default="")
    severity = Column(String(10), nullable=False, default="moderate")
    related_session_id = Column(Integer, ForeignKey("sessions.id"))
    event_date = Column(DateTime(timezone=True), nullable=False)
    resolved = Column(Boolean, nullable=False, default=False)
    resolution_notes = Column(Text, default="")
    resolved_at = Column(DateTime(timezone=True))
    created_by_role = Column(String(10), nullable=False)  # "doctor" | "patient" | "system"
    created_at = Column(DateTime(timezone=True), server_default=func.now())
