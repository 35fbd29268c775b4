"""Who is the target patient of a request, and may the caller act on them."""

import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.auth import PATIENT, UserPrincipal
from dialysis_care.exceptions import BadRequestError, NotFoundError, PermissionDeniedError
from dialysis_care.models.user import User

logger = logging.getLogger(__name__)


async def get_patient(patient_id: int, db: AsyncSession) -> Optional[User]:
    user = await db.get(User, patient_id)
    if user is None or user.role != PATIENT:
        return None
    return user


async def resolve_patient(
    db: AsyncSession,
    principal: UserPrincipal,
    patient_id: Optional[int] = None,
) -> User:
    """
    Patients always act on themselves (any supplied id is ignored).
    Doctors must name a patient that is assigned to them.
    """
    if principal.is_patient:
        patient = await get_patient(principal.id, db)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    if patient_id is None:
        raise BadRequestError("patientId is required")
    patient = await get_patient(patient_id, db)
    if patient is None:
        raise NotFoundError("Patient not found")
    if patient.doctor_id != principal.id:
        logger.warning("Doctor %s denied access to patient %s", principal.id, patient_id)
        raise PermissionDeniedError("Forbidden: patient is not assigned to you")
    return patient


def assigned_doctor_id(patient: User) -> int:
    if not patient.doctor_id:
        raise BadRequestError("No assigned doctor found")
    return patient.doctor_id
