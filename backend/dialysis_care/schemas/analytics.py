from dialysis_care.schemas.common import CamelModel


class PatientSummaryRequest(CamelModel):
    patient_id: int


class PatientSummaryResponse(CamelModel):
    success: bool = True
    patient_id: int
    total_dialysis_sessions: int
    total_events: int
    peritonitis_episodes: int
    unresolved_events: int
