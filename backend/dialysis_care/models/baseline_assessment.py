from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from dialysis_care.database import Base


class BaselineAssessment(Base):
    __tablename__ = "baseline_assessments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    primary_diagnosis = Column(Text)
    native_kidney_disease = Column(String(100))

    dialysis_type = Column(String(2))
    pd_catheter_insertion_date = Column(Date)
    catheter_technique = Column(String(100))
    pd_start_date = Column(Date)
    training_start_date = Column(Date)
    training_completion_date = Column(Date)
    peri_implant_complications = Column(JSON)

    clinical_exam = Column(JSON)
    pd_prescription = Column(JSON, default=list)
    labs = Column(JSON)
    plan_and_advice = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
