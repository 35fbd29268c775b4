from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; either is accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PatientQuery(CamelModel):
    # Doctors must name the patient; patients always get their own records
    patient_id: Optional[int] = None


class PatientBrief(CamelModel):
    id: int
    name: str
    email: str


class ImageBrief(CamelModel):
    id: int
    image_url: str
    public_id: str
    uploaded_at: Optional[datetime] = None
