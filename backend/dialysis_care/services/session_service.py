import logging
from collections import defaultdict
from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from dialysis_care.auth import DOCTOR, UserPrincipal
from dialysis_care.exceptions import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    StateTransitionError,
)
from dialysis_care.models.image import Image
from dialysis_care.models.session import (
    ACKNOWLEDGED,
    ACTIVE,
    COMPLETED,
    CONSUMED_STATUSES,
    DIALYSIS,
    MATERIAL,
    VERIFIED,
    DialysisSession,
    MaterialSession,
    Session,
)
from dialysis_care.schemas.common import ImageBrief, PatientBrief
from dialysis_care.schemas.session import (
    DialysisSummary,
    FinishDialysisSessionRequest,
    MaterialSessionDetailsRequest,
    MaterialSummary,
    MaterialSummaryResponse,
    Materials,
    SessionIdRequest,
    StartDialysisSessionRequest,
    StartMaterialSessionRequest,
    VerifyDialysisSessionRequest,
)
from dialysis_care.services.patient_service import assigned_doctor_id, resolve_patient

logger = logging.getLogger(__name__)

ACTIVE_SESSION_MESSAGE = "Please complete the current dialysis session before starting a new one"
EXHAUSTED_MESSAGE = "All dialysis sessions for this material pack are exhausted. Please collect new material."


def remaining_sessions(total_allowed: int, consumed: int) -> int:
    """Sessions left on a material allotment; never negative."""
    return max(total_allowed - consumed, 0)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionService:
    # -- material sessions ---------------------------------------------------

    async def start_material(
        self, principal: UserPrincipal, data: StartMaterialSessionRequest, db: AsyncSession
    ) -> MaterialSession:
        patient = await resolve_patient(db, principal, data.patient_id)

        session = MaterialSession(
            doctor_id=principal.id,
            patient_id=patient.id,
            status=ACTIVE,
            notes=data.notes,
            materials=data.materials().model_dump(),
        )
        db.add(session)
        await db.flush()
        await db.refresh(session)
        logger.info(
            "Material session %s issued to patient %s (%s sessions)",
            session.id, patient.id, session.sessions_allowed,
        )
        return session

    async def acknowledge_material(
        self, principal: UserPrincipal, data: SessionIdRequest, db: AsyncSession
    ) -> MaterialSession:
        session = await self._owned_session(principal, data.session_id, MATERIAL, db)
        if session is None:
            raise NotFoundError("Material session not found or unauthorized")
        if session.status != ACTIVE:
            raise StateTransitionError("Material session has already been acknowledged")

        session.status = ACKNOWLEDGED
        session.acknowledged_at = _now()
        await db.flush()
        await db.refresh(session)
        logger.info("Material session %s acknowledged by patient %s", session.id, principal.id)
        return session

    # -- dialysis sessions ---------------------------------------------------

    async def start_dialysis(
        self, principal: UserPrincipal, data: StartDialysisSessionRequest, db: AsyncSession
    ) -> DialysisSession:
        patient = await resolve_patient(db, principal)
        doctor_id = assigned_doctor_id(patient)

        # Row lock on the allotment: the count below and the insert that follows
        # are serialised against other starts for the same material session.
        material = await db.scalar(
            select(MaterialSession)
            .where(
                MaterialSession.id == data.material_session_id,
                MaterialSession.patient_id == patient.id,
                MaterialSession.doctor_id == doctor_id,
            )
            .with_for_update()
        )
        if material is None:
            raise BadRequestError("Invalid materialSessionId")

        active = await db.scalar(
            select(DialysisSession).where(
                DialysisSession.material_session_id == material.id,
                DialysisSession.status == ACTIVE,
            )
        )
        if active is not None:
            raise StateTransitionError(ACTIVE_SESSION_MESSAGE, extra={"activeSessionId": active.id})

        consumed = await self.consumed_count(material.id, db)
        if consumed >= material.sessions_allowed:
            logger.warning("Material session %s exhausted (%s used)", material.id, consumed)
            raise StateTransitionError(EXHAUSTED_MESSAGE)

        session = DialysisSession(
            doctor_id=doctor_id,
            patient_id=patient.id,
            material_session_id=material.id,
            status=ACTIVE,
        )
        db.add(session)
        try:
            await db.flush()
        except IntegrityError as e:
            # Partial unique index: another start for this allotment won the race
            raise StateTransitionError(ACTIVE_SESSION_MESSAGE) from e
        await db.refresh(session)
        logger.info("Dialysis session %s started under material session %s", session.id, material.id)
        return session

    async def finish_dialysis(
        self, principal: UserPrincipal, data: FinishDialysisSessionRequest, db: AsyncSession
    ) -> DialysisSession:
        session = await self._owned_session(principal, data.session_id, DIALYSIS, db)
        if session is None:
            raise NotFoundError("Session not found or unauthorized")
        if session.status != ACTIVE:
            raise StateTransitionError("Only active dialysis sessions can be finished")

        session.status = COMPLETED
        session.completed_at = _now()
        session.parameters = data.parameters().model_dump()
        await db.flush()
        await db.refresh(session)
        logger.info("Dialysis session %s completed", session.id)
        return session

    async def verify_dialysis(
        self, principal: UserPrincipal, data: VerifyDialysisSessionRequest, db: AsyncSession
    ) -> DialysisSession:
        session = await self._owned_session(principal, data.session_id, DIALYSIS, db)
        if session is None:
            raise NotFoundError("Dialysis session not found or unauthorized")
        if session.status != COMPLETED:
            logger.warning("Refused to verify session %s in status %s", session.id, session.status)
            raise StateTransitionError("Only completed dialysis sessions can be verified")

        session.status = VERIFIED
        session.verified_at = _now()
        session.verified_by = principal.id
        session.verification_notes = data.verification_notes or ""
        await db.flush()
        await db.refresh(session)
        logger.info("Dialysis session %s verified by doctor %s", session.id, principal.id)
        return session

    # -- consumption & summaries --------------------------------------------

    async def consumed_count(self, material_session_id: int, db: AsyncSession) -> int:
        return await db.scalar(
            select(func.count(DialysisSession.id)).where(
                DialysisSession.material_session_id == material_session_id,
                DialysisSession.status.in_(CONSUMED_STATUSES),
            )
        ) or 0

    async def material_summary(
        self, principal: UserPrincipal, patient_id, db: AsyncSession
    ) -> MaterialSummaryResponse:
        patient = await resolve_patient(db, principal, patient_id)

        result = await db.execute(
            select(MaterialSession)
            .where(
                MaterialSession.patient_id == patient.id,
                MaterialSession.doctor_id == patient.doctor_id,
            )
            .order_by(MaterialSession.created_at, MaterialSession.id)
        )
        materials = result.scalars().all()
        summaries = await self._summarise(materials, db)

        return MaterialSummaryResponse(
            patient=PatientBrief.model_validate(patient),
            material_sessions=summaries,
        )

    async def material_session_details(
        self, principal: UserPrincipal, data: MaterialSessionDetailsRequest, db: AsyncSession
    ) -> MaterialSummary:
        patient = await resolve_patient(db, principal, data.patient_id)

        material = await db.scalar(
            select(MaterialSession).where(
                MaterialSession.id == data.material_session_id,
                MaterialSession.patient_id == patient.id,
            )
        )
        if material is None:
            raise NotFoundError("Material session not found")
        if not principal.owns(material):
            raise PermissionDeniedError("Unauthorized")

        summaries = await self._summarise([material], db)
        return summaries[0]

    async def _summarise(self, materials: list, db: AsyncSession) -> list[MaterialSummary]:
        material_ids = [m.id for m in materials]
        if not material_ids:
            return []

        result = await db.execute(
            select(DialysisSession)
            .where(DialysisSession.material_session_id.in_(material_ids))
            .order_by(DialysisSession.created_at, DialysisSession.id)
        )
        dialysis_by_material = defaultdict(list)
        for ds in result.scalars().all():
            dialysis_by_material[ds.material_session_id].append(ds)

        session_ids = material_ids + [ds.id for group in dialysis_by_material.values() for ds in group]
        result = await db.execute(
            select(Image)
            .where(Image.session_id.in_(session_ids))
            .order_by(Image.uploaded_at, Image.id)
        )
        # Doctors photograph the issued material; patients photograph each dialysis
        doctor_images = defaultdict(list)
        patient_images = defaultdict(list)
        for img in result.scalars().all():
            target = doctor_images if img.uploaded_by == DOCTOR else patient_images
            target[img.session_id].append(ImageBrief.model_validate(img))

        summaries = []
        for ms in materials:
            dialysis = dialysis_by_material[ms.id]
            completed = sum(1 for ds in dialysis if ds.status in CONSUMED_STATUSES)
            total = ms.sessions_allowed
            summaries.append(MaterialSummary(
                material_session_id=ms.id,
                created_at=ms.created_at,
                status=ms.status,
                acknowledged_at=ms.acknowledged_at,
                materials=Materials.model_validate(ms.materials or {}),
                total_sessions_allowed=total,
                completed_sessions=completed,
                remaining_sessions=remaining_sessions(total, completed),
                material_images=doctor_images[ms.id],
                dialysis_sessions=[
                    DialysisSummary(
                        session_id=ds.id,
                        status=ds.status,
                        completed_at=ds.completed_at,
                        parameters=ds.parameters,
                        images=patient_images[ds.id],
                    )
                    for ds in dialysis
                ],
            ))
        return summaries

    async def _owned_session(
        self, principal: UserPrincipal, session_id: int, session_type: str, db: AsyncSession
    ):
        session = await db.get(Session, session_id)
        if session is None or session.type != session_type or not principal.owns(session):
            return None
        return session


session_service = SessionService()
