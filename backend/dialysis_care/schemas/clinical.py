from pydantic import Field
from datetime import date, datetime
from typing import Literal, Optional
from dialysis_care.schemas.common import CamelModel

Gender = Literal["Male", "Female", "Other"]
DialysisType = Literal["HD", "PD"]
EducationLevel = Literal[
    "No formal education",
    "Primary",
    "Middle",
    "Secondary",
    "Higher secondary",
    "Graduate",
    "Post-graduate / Professional",
]
IncomeLevel = Literal["Upper", "Upper middle", "Lower middle", "Upper lower", "Lower"]
NativeKidneyDisease = Literal[
    "Diabetic kidney disease",
    "Hypertensive nephrosclerosis",
    "Chronic glomerulonephritis",
    "IgA nephropathy",
    "FSGS",
    "Membranous nephropathy",
    "Other GN",
    "CKD of unknown etiology",
    "Reflux nephropathy",
    "Obstructive uropathy",
    "Polycystic kidney disease",
    "Tubulointerstitial disease",
    "Congenital / hereditary",
    "Others",
]


# -- shared pieces -----------------------------------------------------------

class Dwell(CamelModel):
    dwell_timing: Optional[str] = None
    solution_strength: Optional[str] = None
    fill_volume: Optional[float] = None
    dwell_duration_hours: Optional[float] = None
    number_of_exchanges: Optional[int] = None
    icodextrin_used: Optional[bool] = None


class PresentWithDetails(CamelModel):
    present: Optional[bool] = None
    details: Optional[str] = None


# -- medical profile ---------------------------------------------------------

class EmergencyContact(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relation: Optional[str] = None


class MedicalProfileFields(CamelModel):
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[Gender] = None
    cr_number: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    education_level: Optional[EducationLevel] = None
    income_level: Optional[IncomeLevel] = None
    primary_diagnosis: Optional[str] = None
    native_kidney_disease: Optional[NativeKidneyDisease] = None
    dialysis_type: Optional[DialysisType] = None
    allergies: list[str] = []
    emergency_contact: Optional[EmergencyContact] = None


class MedicalProfileUpsert(MedicalProfileFields):
    patient_id: int


class MedicalProfileResponse(MedicalProfileFields):
    id: int
    patient_id: int
    doctor_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MedicalProfileEnvelope(CamelModel):
    success: bool = True
    profile: Optional[MedicalProfileResponse] = None


# -- baseline assessment -----------------------------------------------------

class ClinicalExam(CamelModel):
    pulse: Optional[float] = None
    bp_systolic: Optional[float] = None
    bp_diastolic: Optional[float] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    pallor: Optional[bool] = None
    icterus: Optional[bool] = None
    cyanosis: Optional[bool] = None
    clubbing: Optional[bool] = None
    edema: Optional[bool] = None


class LabEntry(CamelModel):
    value: Optional[float] = None
    taken_on: Optional[date] = Field(None, alias="date")


class Labs(CamelModel):
    hemoglobin: Optional[LabEntry] = None
    urea: Optional[LabEntry] = None
    creatinine: Optional[LabEntry] = None
    sodium: Optional[LabEntry] = None
    potassium: Optional[LabEntry] = None
    albumin: Optional[LabEntry] = None
    ktv: Optional[LabEntry] = None


class PlanAndAdvice(CamelModel):
    advised_prescription: Optional[str] = None
    medications: Optional[str] = None
    follow_up_instructions: Optional[str] = None


class BaselineAssessmentFields(CamelModel):
    primary_diagnosis: Optional[str] = None
    native_kidney_disease: Optional[str] = None
    dialysis_type: Optional[DialysisType] = None
    pd_catheter_insertion_date: Optional[date] = None
    catheter_technique: Optional[str] = None
    pd_start_date: Optional[date] = None
    training_start_date: Optional[date] = None
    training_completion_date: Optional[date] = None
    peri_implant_complications: Optional[PresentWithDetails] = None
    clinical_exam: Optional[ClinicalExam] = None
    pd_prescription: list[Dwell] = []
    labs: Optional[Labs] = None
    plan_and_advice: Optional[PlanAndAdvice] = None


class BaselineAssessmentUpsert(BaselineAssessmentFields):
    patient_id: int


class BaselineAssessmentResponse(BaselineAssessmentFields):
    id: int
    patient_id: int
    doctor_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BaselineAssessmentEnvelope(CamelModel):
    success: bool = True
    assessment: Optional[BaselineAssessmentResponse] = None


# -- follow-up assessment ----------------------------------------------------

class Wellbeing(CamelModel):
    overall: Optional[int] = Field(None, ge=1, le=5)
    appetite: Optional[str] = None
    sleep_quality: Optional[int] = Field(None, ge=0, le=10)
    fatigue_level: Optional[int] = Field(None, ge=0, le=10)
    weight_trend: Optional[str] = None


class Symptoms(CamelModel):
    nausea: Optional[bool] = None
    pruritus: Optional[bool] = None
    breathlessness: Optional[bool] = None
    restless_legs: Optional[bool] = None
    poor_concentration: Optional[bool] = None
    drain_pain: Optional[bool] = None
    slow_drain: Optional[bool] = None
    cloudy_effluent: Optional[bool] = None
    recent_hospitalization: Optional[PresentWithDetails] = None


class Examination(CamelModel):
    bp_systolic: Optional[float] = None
    bp_diastolic: Optional[float] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    edema: Optional[bool] = None
    crepitations: Optional[bool] = None


class Adequacy(CamelModel):
    bp_controlled: Optional[bool] = None
    urine_output_24h: Optional[float] = None
    bmi: Optional[float] = None
    muscle_loss: Optional[bool] = None
    albumin: Optional[float] = None
    phosphate: Optional[float] = None
    potassium: Optional[float] = None
    bicarbonate: Optional[float] = None
    weekly_ktv: Optional[float] = None
    residual_cr_cl: Optional[float] = None
    underdialysis_symptoms: Optional[str] = None


class FollowUpEvents(CamelModel):
    peritonitis_episodes: Optional[int] = Field(None, ge=0)
    exit_site_infection: Optional[bool] = None
    technique_issues: Optional[bool] = None
    hospitalizations: Optional[bool] = None
    details: Optional[str] = None


class FollowUpPlan(CamelModel):
    prescription_change_needed: Optional[bool] = None
    revised_prescription: Optional[str] = None
    medications: Optional[str] = None
    follow_up_advice: Optional[str] = None
    next_review_date: Optional[date] = None


class FollowUpAssessmentFields(CamelModel):
    dialysis_type: Optional[DialysisType] = None
    pd_performed_by: Optional[Literal["Self", "Caregiver", "Nurse"]] = None
    last_training_date: Optional[date] = None
    wellbeing: Optional[Wellbeing] = None
    symptoms: Optional[Symptoms] = None
    examination: Optional[Examination] = None
    current_pd_prescription: list[Dwell] = []
    adequacy: Optional[Adequacy] = None
    events: Optional[FollowUpEvents] = None
    plan: Optional[FollowUpPlan] = None


class FollowUpAssessmentUpsert(FollowUpAssessmentFields):
    patient_id: int
    visit_date: date = Field(default_factory=date.today)


class FollowUpAssessmentResponse(FollowUpAssessmentFields):
    id: int
    patient_id: int
    doctor_id: int
    visit_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FollowUpAssessmentEnvelope(CamelModel):
    success: bool = True
    assessment: FollowUpAssessmentResponse


class FollowUpAssessmentListResponse(CamelModel):
    success: bool = True
    count: int
    assessments: list[FollowUpAssessmentResponse]
