from dialysis_care.models.user import User
from dialysis_care.models.session import Session, MaterialSession, DialysisSession
from dialysis_care.models.image import Image
from dialysis_care.models.medical_profile import MedicalProfile
from dialysis_care.models.baseline_assessment import BaselineAssessment
from dialysis_care.models.followup_assessment import FollowUpAssessment
from dialysis_care.models.event import Event

__all__ = ["User", "Session", "MaterialSession", "DialysisSession", "Image", "MedicalProfile",
           "BaselineAssessment", "FollowUpAssessment", "Event"]
