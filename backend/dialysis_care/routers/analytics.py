from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.database import get_db
from dialysis_care.auth import UserPrincipal, require_doctor
from dialysis_care.schemas.analytics import PatientSummaryRequest, PatientSummaryResponse
from dialysis_care.services.analytics_service import analytics_service

router = APIRouter()


@router.post("/patient-summary", response_model=PatientSummaryResponse)
async def patient_summary(
    req: PatientSummaryRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    return await analytics_service.patient_summary(current_user, req.patient_id, db)
