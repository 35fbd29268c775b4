from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from dialysis_care.database import Base


class MedicalProfile(Base):
    __tablename__ = "medical_profiles"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Identification
    age = Column(Integer)
    gender = Column(String(10))
    cr_number = Column(String(50), unique=True)  # NULLs do not collide
    contact_number = Column(String(30))
    address = Column(Text)
    education_level = Column(String(50))
    income_level = Column(String(30))

    # Diagnosis
    primary_diagnosis = Column(Text)
    native_kidney_disease = Column(String(100))
    dialysis_type = Column(String(2))

    allergies = Column(JSON, default=list)
    emergency_contact = Column(JSON)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
