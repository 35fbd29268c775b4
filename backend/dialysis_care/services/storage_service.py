"""
Image storage backed by Cloudinary's signed upload REST endpoint.

The client is built from settings per request through ``get_image_storage``
so tests can swap in a fake via ``app.dependency_overrides``.
"""

import logging
import time
from typing import Optional
import httpx
from cloudinary.utils import api_sign_request
from fastapi import Depends
from dialysis_care.config import Settings, get_settings
from dialysis_care.exceptions import StorageError
from dialysis_care.schemas.image import StoredObject

logger = logging.getLogger(__name__)


class CloudinaryStorage:
    """Client for the Cloudinary image upload API."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "dialysis_app",
        api_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryStorage":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            api_url=settings.cloudinary_api_url,
            timeout=settings.storage_timeout_seconds,
        )

    def sign(self, params: dict) -> str:
        """Cloudinary request signature for ``params`` (SHA-1 with the API secret)."""
        return api_sign_request(params, self.api_secret)

    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        if not self.cloud_name or not self.api_key:
            raise StorageError("Image storage is not configured")

        params = {
            "folder": self.folder,
            "timestamp": int(time.time()),
            "unique_filename": "false",
            "use_filename": "true",
        }
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}

        start = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.api_url}/{self.cloud_name}/image/upload",
                    data=data,
                    files={"file": (filename, content, content_type)},
                )
                response.raise_for_status()
                body = response.json()
                stored = StoredObject(url=body["secure_url"], public_id=body["public_id"])
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.exception("Cloudinary upload of %s failed", filename)
            raise StorageError("Image upload failed") from e

        elapsed = int((time.time() - start) * 1000)
        logger.info("Uploaded %s to Cloudinary as %s in %sms", filename, stored.public_id, elapsed)
        return stored


def get_image_storage(settings: Settings = Depends(get_settings)) -> CloudinaryStorage:
    return CloudinaryStorage.from_settings(settings)
