from sqlalchemy import Column, Integer, String, Date, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from dialysis_care.database import Base


class FollowUpAssessment(Base):
    __tablename__ = "followup_assessments"
    __table_args__ = (
        UniqueConstraint("patient_id", "visit_date", name="uq_followup_patient_visit"),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    visit_date = Column(Date, nullable=False)

    dialysis_type = Column(String(2))
    pd_performed_by = Column(String(20))
    last_training_date = Column(Date)

    wellbeing = Column(JSON)
    symptoms = Column(JSON)
    examination = Column(JSON)
    current_pd_prescription = Column(JSON, default=list)
    adequacy = Column(JSON)
    events = Column(JSON)
    plan = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
