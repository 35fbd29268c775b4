from pydantic import Field, field_validator
from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from dialysis_care.schemas.common import CamelModel, ImageBrief, PatientBrief

DIALYSIS_MACHINES = ("portable", "standard", "none")


class Materials(CamelModel):
    sessions_count: int = Field(0, ge=0)
    dialysis_machine: Literal["portable", "standard", "none"] = "none"
    dialyzer: bool = False
    blood_tubing_sets: bool = False
    dialysis_needles: bool = False
    dialysate_concentrates: bool = False
    heparin: bool = False
    saline_solution: bool = False

    @field_validator("dialysis_machine", mode="before")
    @classmethod
    def unknown_machine_is_none(cls, value):
        return value if value in DIALYSIS_MACHINES else "none"


class StartMaterialSessionRequest(Materials):
    patient_id: int
    notes: str = ""

    def materials(self) -> Materials:
        return Materials.model_validate(self.model_dump(include=set(Materials.model_fields)))


class StartDialysisSessionRequest(CamelModel):
    material_session_id: int


class SessionIdRequest(CamelModel):
    session_id: int


class VoluntaryReport(CamelModel):
    feeling_ok: Optional[bool] = None
    fever: Optional[bool] = None
    comment: str = ""


class DialysisReadings(CamelModel):
    fill_volume: Optional[float] = None
    drain_volume: Optional[float] = None
    fill_time: Optional[str] = None
    drain_time: Optional[str] = None
    blood_pressure: Optional[str] = None
    weight_pre: Optional[float] = None
    weight_post: Optional[float] = None
    number_of_exchanges: Optional[int] = None
    duration_minutes: Optional[int] = None


class DialysisParameters(CamelModel):
    voluntary: VoluntaryReport = VoluntaryReport()
    dialysis: DialysisReadings = DialysisReadings()


class FinishDialysisSessionRequest(VoluntaryReport, DialysisReadings):
    session_id: int

    def parameters(self) -> DialysisParameters:
        return DialysisParameters(
            voluntary=VoluntaryReport.model_validate(self.model_dump(include=set(VoluntaryReport.model_fields))),
            dialysis=DialysisReadings.model_validate(self.model_dump(include=set(DialysisReadings.model_fields))),
        )


class VerifyDialysisSessionRequest(CamelModel):
    session_id: int
    verification_notes: str = ""


class MaterialSessionDetailsRequest(CamelModel):
    material_session_id: int
    patient_id: Optional[int] = None


class MaterialSessionResponse(CamelModel):
    id: int
    type: Literal["material"]
    doctor_id: int
    patient_id: int
    status: str
    notes: Optional[str] = ""
    materials: Materials
    acknowledged_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DialysisSessionResponse(CamelModel):
    id: int
    type: Literal["dialysis"]
    doctor_id: int
    patient_id: int
    material_session_id: int
    status: str
    notes: Optional[str] = ""
    parameters: Optional[DialysisParameters] = None
    completed_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[int] = None
    verification_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


SessionResponse = Annotated[
    Union[MaterialSessionResponse, DialysisSessionResponse],
    Field(discriminator="type"),
]


def session_response(session) -> Union[MaterialSessionResponse, DialysisSessionResponse]:
    if session.type == "material":
        return MaterialSessionResponse.model_validate(session)
    return DialysisSessionResponse.model_validate(session)


class SessionEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    session: SessionResponse


class DialysisSummary(CamelModel):
    session_id: int
    status: str
    completed_at: Optional[datetime] = None
    parameters: Optional[DialysisParameters] = None
    images: list[ImageBrief] = []


class MaterialSummary(CamelModel):
    material_session_id: int
    created_at: Optional[datetime] = None
    status: str
    acknowledged_at: Optional[datetime] = None
    materials: Materials
    total_sessions_allowed: int
    completed_sessions: int
    remaining_sessions: int
    material_images: list[ImageBrief] = []
    dialysis_sessions: list[DialysisSummary] = []


class MaterialSummaryResponse(CamelModel):
    success: bool = True
    patient: PatientBrief
    material_sessions: list[MaterialSummary]


class MaterialSessionDetailsResponse(CamelModel):
    success: bool = True
    material_session: MaterialSummary
