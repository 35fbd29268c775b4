from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.database import get_db
from dialysis_care.auth import UserPrincipal, require_doctor, require_member, require_patient
from dialysis_care.schemas.common import PatientQuery
from dialysis_care.schemas.session import (
    FinishDialysisSessionRequest,
    MaterialSessionDetailsRequest,
    MaterialSessionDetailsResponse,
    MaterialSummaryResponse,
    SessionEnvelope,
    SessionIdRequest,
    StartDialysisSessionRequest,
    StartMaterialSessionRequest,
    VerifyDialysisSessionRequest,
    session_response,
)
from dialysis_care.services.session_service import session_service

router = APIRouter()


@router.post("/start-material-session", response_model=SessionEnvelope)
async def start_material_session(
    data: StartMaterialSessionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    session = await session_service.start_material(current_user, data, db)
    return SessionEnvelope(session=session_response(session))


@router.post("/start-dialysis-session", response_model=SessionEnvelope)
async def start_dialysis_session(
    data: StartDialysisSessionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_patient),
):
    session = await session_service.start_dialysis(current_user, data, db)
    return SessionEnvelope(session=session_response(session))


@router.patch("/acknowledge-material-session", response_model=SessionEnvelope)
async def acknowledge_material_session(
    data: SessionIdRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_patient),
):
    session = await session_service.acknowledge_material(current_user, data, db)
    return SessionEnvelope(
        message="Material receipt acknowledged by patient",
        session=session_response(session),
    )


@router.patch("/finish-dialysis-session", response_model=SessionEnvelope)
async def finish_dialysis_session(
    data: FinishDialysisSessionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_patient),
):
    session = await session_service.finish_dialysis(current_user, data, db)
    return SessionEnvelope(
        message="Dialysis session marked as completed",
        session=session_response(session),
    )


@router.patch("/verify-dialysis-session", response_model=SessionEnvelope)
async def verify_dialysis_session(
    data: VerifyDialysisSessionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    session = await session_service.verify_dialysis(current_user, data, db)
    return SessionEnvelope(
        message="Dialysis session verified successfully",
        session=session_response(session),
    )


@router.post("/patient/material-summary", response_model=MaterialSummaryResponse)
async def patient_material_summary(
    query: PatientQuery = PatientQuery(),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    """Material allotments with their dialysis sessions and photos, oldest first."""
    return await session_service.material_summary(current_user, query.patient_id, db)


@router.post("/material/session-details", response_model=MaterialSessionDetailsResponse)
async def material_session_details(
    data: MaterialSessionDetailsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    summary = await session_service.material_session_details(current_user, data, db)
    return MaterialSessionDetailsResponse(material_session=summary)
