import logging
from typing import Optional
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dialysis_care.auth import UserPrincipal
from dialysis_care.exceptions import BadRequestError, NotFoundError, PermissionDeniedError
from dialysis_care.models.image import Image
from dialysis_care.models.session import Session

logger = logging.getLogger(__name__)


class ImageService:
    async def upload(
        self,
        principal: UserPrincipal,
        session_id: Optional[int],
        file: Optional[UploadFile],
        storage,
        db: AsyncSession,
    ) -> Image:
        if session_id is None:
            raise BadRequestError("sessionId is required")
        session = await self._accessible_session(principal, session_id, db)

        if file is None:
            raise BadRequestError("Image file is required")
        if not (file.content_type or "").startswith("image/"):
            raise BadRequestError("Uploaded file must be an image")
        content = await file.read()
        if not content:
            raise BadRequestError("Image file is empty")

        # Nothing is written locally unless the provider accepted the file
        stored = await storage.upload(content, file.filename or "upload", file.content_type)

        image = Image(
            session_id=session.id,
            uploaded_by=principal.role,
            uploader_id=principal.id,
            image_url=stored.url,
            public_id=stored.public_id,
        )
        db.add(image)
        await db.flush()
        await db.refresh(image)
        logger.info("Image %s attached to session %s by %s %s",
                    image.id, session.id, principal.role, principal.id)
        return image

    async def list_for_session(self, principal: UserPrincipal, session_id: int, db: AsyncSession) -> list[Image]:
        session = await self._accessible_session(principal, session_id, db)
        result = await db.execute(
            select(Image).where(Image.session_id == session.id).order_by(Image.uploaded_at, Image.id)
        )
        return result.scalars().all()

    async def _accessible_session(self, principal: UserPrincipal, session_id: int, db: AsyncSession) -> Session:
        session = await db.get(Session, session_id)
        if session is None:
            raise NotFoundError("Session not found")
        if not principal.owns(session):
            logger.warning("%s %s denied access to session %s", principal.role, principal.id, session_id)
            raise PermissionDeniedError(f"Forbidden: {principal.role} not owner of session")
        return session


image_service = ImageService()
