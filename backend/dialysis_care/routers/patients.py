from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dialysis_care.database import get_db
from dialysis_care.models.user import User
from dialysis_care.auth import PATIENT, UserPrincipal, require_doctor, require_member
from dialysis_care.exceptions import PermissionDeniedError
from dialysis_care.schemas.common import PatientBrief
from dialysis_care.schemas.patient import (
    DoctorPatientsRequest,
    DoctorPatientsResponse,
    PatientDetailsRequest,
    PatientDetailsResponse,
)
from dialysis_care.services.patient_service import resolve_patient

router = APIRouter()


@router.post("/doctor/patients", response_model=DoctorPatientsResponse)
async def list_doctor_patients(
    data: DoctorPatientsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    # A doctor may only list their own patients
    if data.doctor_id != current_user.id:
        raise PermissionDeniedError("Unauthorized access")

    result = await db.execute(
        select(User)
        .where(User.doctor_id == current_user.id, User.role == PATIENT)
        .order_by(User.name, User.id)
    )
    patients = result.scalars().all()
    return DoctorPatientsResponse(
        message=None if patients else "No patients found under this doctor",
        count=len(patients),
        patients=[PatientBrief.model_validate(p) for p in patients],
    )


@router.post("/patient/details", response_model=PatientDetailsResponse)
async def patient_details(
    data: PatientDetailsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    if current_user.is_patient and data.patient_id != current_user.id:
        raise PermissionDeniedError("Forbidden")
    patient = await resolve_patient(db, current_user, data.patient_id)
    return PatientDetailsResponse(patient=PatientBrief.model_validate(patient))
