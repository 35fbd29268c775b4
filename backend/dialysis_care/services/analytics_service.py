from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from dialysis_care.auth import UserPrincipal
from dialysis_care.models.event import Event
from dialysis_care.models.session import CONSUMED_STATUSES, DialysisSession
from dialysis_care.schemas.analytics import PatientSummaryResponse
from dialysis_care.services.patient_service import resolve_patient


class AnalyticsService:
    async def patient_summary(
        self, principal: UserPrincipal, patient_id: int, db: AsyncSession
    ) -> PatientSummaryResponse:
        patient = await resolve_patient(db, principal, patient_id)

        total_sessions = await db.scalar(
            select(func.count(DialysisSession.id)).where(
                DialysisSession.patient_id == patient.id,
                DialysisSession.status.in_(CONSUMED_STATUSES),
            )
        ) or 0
        total_events = await db.scalar(
            select(func.count(Event.id)).where(Event.patient_id == patient.id)
        ) or 0
        peritonitis = await db.scalar(
            select(func.count(Event.id)).where(
                Event.patient_id == patient.id,
                Event.event_type == "peritonitis",
            )
        ) or 0
        unresolved = await db.scalar(
            select(func.count(Event.id)).where(
                Event.patient_id == patient.id,
                Event.resolved.is_(False),
            )
        ) or 0

        return PatientSummaryResponse(
            patient_id=patient.id,
            total_dialysis_sessions=total_sessions,
            total_events=total_events,
            peritonitis_episodes=peritonitis,
            unresolved_events=unresolved,
        )


analytics_service = AnalyticsService()
