from typing import Optional
from dialysis_care.schemas.common import CamelModel, PatientBrief


class DoctorPatientsRequest(CamelModel):
    doctor_id: int


class DoctorPatientsResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    count: int
    patients: list[PatientBrief]


class PatientDetailsRequest(CamelModel):
    patient_id: int


class PatientDetailsResponse(CamelModel):
    success: bool = True
    patient: PatientBrief
