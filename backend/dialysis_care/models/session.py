from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, Index, text
from sqlalchemy.sql import func
from dialysis_care.database import Base

MATERIAL = "material"
DIALYSIS = "dialysis"

ACTIVE = "active"
ACKNOWLEDGED = "acknowledged"
COMPLETED = "completed"
VERIFIED = "verified"

# Dialysis sessions that consume one unit of a material allotment
CONSUMED_STATUSES = (COMPLETED, VERIFIED)


class Session(Base):
    """A material issuance or a dialysis episode; ``type`` picks the subclass."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ACTIVE)
    notes = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # material
    materials = Column(JSON)
    acknowledged_at = Column(DateTime(timezone=True))

    # dialysis
    material_session_id = Column(Integer, ForeignKey("sessions.id"), index=True)
    parameters = Column(JSON)
    completed_at = Column(DateTime(timezone=True))
    verified_at = Column(DateTime(timezone=True))
    verified_by = Column(Integer, ForeignKey("users.id"))
    verification_notes = Column(Text)

    __mapper_args__ = {"polymorphic_on": type}

    __table_args__ = (
        # At most one running dialysis session per material allotment
        Index(
            "uq_sessions_one_active_dialysis",
            "material_session_id",
            unique=True,
            postgresql_where=text("type = 'dialysis' AND status = 'active'"),
            sqlite_where=text("type = 'dialysis' AND status = 'active'"),
        ),
    )


class MaterialSession(Session):
    __mapper_args__ = {"polymorphic_identity": MATERIAL}

    @property
    def sessions_allowed(self) -> int:
        return int((self.materials or {}).get("sessions_count") or 0)


class DialysisSession(Session):
    __mapper_args__ = {"polymorphic_identity": DIALYSIS}
