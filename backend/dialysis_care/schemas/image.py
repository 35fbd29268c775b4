from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from dialysis_care.schemas.common import CamelModel


class StoredObject(BaseModel):
    """What the storage provider returns for one uploaded file."""
    url: str
    public_id: str


class ImageResponse(CamelModel):
    id: int
    session_id: int
    uploaded_by: str
    uploader_id: int
    image_url: str
    public_id: str
    type: Optional[str] = "general"
    uploaded_at: Optional[datetime] = None


class ImageEnvelope(CamelModel):
    success: bool = True
    image: ImageResponse


class ImageListResponse(CamelModel):
    success: bool = True
    images: list[ImageResponse]
