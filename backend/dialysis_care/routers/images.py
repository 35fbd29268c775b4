from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from dialysis_care.database import get_db
from dialysis_care.auth import UserPrincipal, require_member
from dialysis_care.schemas.image import ImageEnvelope, ImageListResponse, ImageResponse
from dialysis_care.services.image_service import image_service
from dialysis_care.services.storage_service import CloudinaryStorage, get_image_storage

router = APIRouter()


@router.post("/upload", response_model=ImageEnvelope)
async def upload_image(
    session_id: Optional[int] = Form(None, alias="sessionId"),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_image_storage),
    current_user: UserPrincipal = Depends(require_member),
):
    record = await image_service.upload(current_user, session_id, image, storage, db)
    return ImageEnvelope(image=ImageResponse.model_validate(record))


@router.get("/session/{session_id}/images", response_model=ImageListResponse)
async def list_session_images(
    session_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_member),
):
    images = await image_service.list_for_session(current_user, session_id, db)
    return ImageListResponse(images=[ImageResponse.model_validate(i) for i in images])
