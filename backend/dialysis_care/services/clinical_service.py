import logging
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dialysis_care.auth import UserPrincipal
from dialysis_care.exceptions import BadRequestError
from dialysis_care.models.baseline_assessment import BaselineAssessment
from dialysis_care.models.followup_assessment import FollowUpAssessment
from dialysis_care.models.medical_profile import MedicalProfile
from dialysis_care.schemas.clinical import (
    BaselineAssessmentUpsert,
    FollowUpAssessmentUpsert,
    MedicalProfileUpsert,
)
from dialysis_care.services.patient_service import resolve_patient

logger = logging.getLogger(__name__)


def column_values(data: BaseModel, exclude: set) -> dict:
    """Fields the client actually sent, nested models flattened to JSON-ready dicts."""
    values = {}
    for name in data.model_fields_set - exclude:
        value = getattr(data, name)
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        elif isinstance(value, list):
            value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
        values[name] = value
    return values


class ClinicalService:
    """Doctor-authored records keyed by patient; readable by doctor and patient."""

    async def _upsert(self, model, lookup: dict, values: dict, doctor_id: int, db: AsyncSession):
        record = await db.scalar(select(model).filter_by(**lookup))
        if record is None:
            record = model(**lookup, doctor_id=doctor_id, **values)
            db.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)
        await db.flush()
        await db.refresh(record)
        return record

    # -- medical profile ----------------------------------------------------

    async def upsert_profile(
        self, principal: UserPrincipal, data: MedicalProfileUpsert, db: AsyncSession
    ) -> MedicalProfile:
        patient = await resolve_patient(db, principal, data.patient_id)

        if data.cr_number:
            taken = await db.scalar(
                select(MedicalProfile.id).where(
                    MedicalProfile.cr_number == data.cr_number,
                    MedicalProfile.patient_id != patient.id,
                )
            )
            if taken:
                raise BadRequestError("crNumber already in use")

        try:
            profile = await self._upsert(
                MedicalProfile,
                {"patient_id": patient.id},
                column_values(data, {"patient_id"}),
                principal.id,
                db,
            )
        except IntegrityError as e:
            raise BadRequestError("Medical profile conflicts with an existing record") from e
        logger.info("Medical profile saved for patient %s", patient.id)
        return profile

    async def get_profile(
        self, principal: UserPrincipal, patient_id: Optional[int], db: AsyncSession
    ) -> Optional[MedicalProfile]:
        patient = await resolve_patient(db, principal, patient_id)
        return await db.scalar(select(MedicalProfile).where(MedicalProfile.patient_id == patient.id))

    # -- baseline assessment ------------------------------------------------

    async def upsert_baseline(
        self, principal: UserPrincipal, data: BaselineAssessmentUpsert, db: AsyncSession
    ) -> BaselineAssessment:
        patient = await resolve_patient(db, principal, data.patient_id)
        try:
            assessment = await self._upsert(
                BaselineAssessment,
                {"patient_id": patient.id},
                column_values(data, {"patient_id"}),
                principal.id,
                db,
            )
        except IntegrityError as e:
            raise BadRequestError("Baseline assessment conflicts with an existing record") from e
        logger.info("Baseline assessment saved for patient %s", patient.id)
        return assessment

    async def get_baseline(
        self, principal: UserPrincipal, patient_id: Optional[int], db: AsyncSession
    ) -> Optional[BaselineAssessment]:
        patient = await resolve_patient(db, principal, patient_id)
        return await db.scalar(
            select(BaselineAssessment).where(BaselineAssessment.patient_id == patient.id)
        )

    # -- follow-up assessments ----------------------------------------------

    async def upsert_followup(
        self, principal: UserPrincipal, data: FollowUpAssessmentUpsert, db: AsyncSession
    ) -> FollowUpAssessment:
        patient = await resolve_patient(db, principal, data.patient_id)
        try:
            assessment = await self._upsert(
                FollowUpAssessment,
                {"patient_id": patient.id, "visit_date": data.visit_date},
                column_values(data, {"patient_id", "visit_date"}),
                principal.id,
                db,
            )
        except IntegrityError as e:
            raise BadRequestError("Follow-up assessment conflicts with an existing record") from e
        logger.info("Follow-up assessment for %s saved for patient %s", data.visit_date, patient.id)
        return assessment

    async def list_followups(
        self, principal: UserPrincipal, patient_id: Optional[int], db: AsyncSession
    ) -> list[FollowUpAssessment]:
        patient = await resolve_patient(db, principal, patient_id)
        result = await db.execute(
            select(FollowUpAssessment)
            .where(FollowUpAssessment.patient_id == patient.id)
            .order_by(FollowUpAssessment.visit_date.desc(), FollowUpAssessment.id.desc())
        )
        return result.scalars().all()


clinical_service = ClinicalService()
