from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.database import get_db
from dialysis_care.auth import UserPrincipal, require_doctor, require_member
from dialysis_care.schemas.common import PatientQuery
from dialysis_care.schemas.clinical import (
    BaselineAssessmentEnvelope,
    BaselineAssessmentResponse,
    BaselineAssessmentUpsert,
    FollowUpAssessmentEnvelope,
    FollowUpAssessmentListResponse,
    FollowUpAssessmentResponse,
    FollowUpAssessmentUpsert,
    MedicalProfileEnvelope,
    MedicalProfileResponse,
    MedicalProfileUpsert,
)
from dialysis_care.services.clinical_service import clinical_service

router = APIRouter()


# ============ MEDICAL PROFILE ============
@router.put("/medical-profile", response_model=MedicalProfileEnvelope)
async def save_medical_profile(
    data: MedicalProfileUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    profile = await clinical_service.upsert_profile(current_user, data, db)
    return MedicalProfileEnvelope(profile=MedicalProfileResponse.model_validate(profile))


@router.post("/medical-profile", response_model=MedicalProfileEnvelope)
async def get_medical_profile(
    query: PatientQuery = PatientQuery(),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    profile = await clinical_service.get_profile(current_user, query.patient_id, db)
    return MedicalProfileEnvelope(
        profile=MedicalProfileResponse.model_validate(profile) if profile else None
    )


# ============ BASELINE ASSESSMENT ============
@router.put("/baseline-assessment", response_model=BaselineAssessmentEnvelope)
async def save_baseline_assessment(
    data: BaselineAssessmentUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    assessment = await clinical_service.upsert_baseline(current_user, data, db)
    return BaselineAssessmentEnvelope(assessment=BaselineAssessmentResponse.model_validate(assessment))


@router.post("/baseline-assessment", response_model=BaselineAssessmentEnvelope)
async def get_baseline_assessment(
    query: PatientQuery = PatientQuery(),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    assessment = await clinical_service.get_baseline(current_user, query.patient_id, db)
    return BaselineAssessmentEnvelope(
        assessment=BaselineAssessmentResponse.model_validate(assessment) if assessment else None
    )


# ============ FOLLOW-UP ASSESSMENTS ============
@router.put("/followup-assessment", response_model=FollowUpAssessmentEnvelope)
async def save_followup_assessment(
    data: FollowUpAssessmentUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    assessment = await clinical_service.upsert_followup(current_user, data, db)
    return FollowUpAssessmentEnvelope(assessment=FollowUpAssessmentResponse.model_validate(assessment))


@router.post("/followup-assessments", response_model=FollowUpAssessmentListResponse)
async def list_followup_assessments(
    query: PatientQuery = PatientQuery(),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    assessments = await clinical_service.list_followups(current_user, query.patient_id, db)
    return FollowUpAssessmentListResponse(
        count=len(assessments),
        assessments=[FollowUpAssessmentResponse.model_validate(a) for a in assessments],
    )
