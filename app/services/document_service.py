import asyncio
import logging
import os
import uuid
from typing import Iterable, Optional, Tuple

from fastapi import HTTPException, UploadFile

from app.core.config import settings
from app.core.supabase_client import get_supabase_client
from app.schemas.document_schema import ALLOWED_IMAGE_TYPES
from app.utils.image_processor import normalize_image, sniff_content_type

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class DocumentService:
    """Writes loan document images to the Supabase storage bucket."""

    def __init__(self, client=None, bucket: Optional[str] = None, normalize: Optional[bool] = None):
        self._client = client
        self.bucket = bucket or settings.SUPABASE_BUCKET
        self.normalize = settings.NORMALIZE_UPLOADS if normalize is None else normalize

    @property
    def supabase(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    # Checks size and type of one uploaded part and returns its bytes
    async def validate_file(self, slot: str, file: UploadFile) -> Tuple[bytes, str]:
        await file.seek(0)
        contents = await file.read()
        size = len(contents)

        if size == 0:
            raise HTTPException(status_code=400, detail=f"Empty file uploaded for {slot}")
        if size > settings.MAX_UPLOAD_SIZE:
            logger.warning(f"Rejected {slot}: {size} bytes exceeds {settings.MAX_UPLOAD_SIZE}")
            raise HTTPException(status_code=413, detail=f"File too large for {slot}")

        content_type = sniff_content_type(contents, file.content_type, file.filename)
        if content_type not in ALLOWED_IMAGE_TYPES:
            logger.warning(f"Resolved invalid file type for {slot} ({file.filename}): {content_type}")
            raise HTTPException(status_code=400, detail=f"Invalid file type for {slot}: {content_type}")

        if content_type == "image/jpg":
            content_type = "image/jpeg"
        return contents, content_type

    def build_object_key(self, loan_id: str, slot: str, content_type: str) -> str:
        ext = EXTENSIONS.get(content_type, "")
        return f"loans/{loan_id}/{slot}-{uuid.uuid4().hex}{ext}"

    # Re-encodes the image when normalisation is enabled; otherwise passes bytes through
    async def prepare(self, contents: bytes, content_type: str) -> Tuple[bytes, str]:
        if not self.normalize or content_type not in ("image/jpeg", "image/png", "image/webp"):
            return contents, content_type
        return await asyncio.to_thread(normalize_image, contents, content_type)

    # Upserts one object and returns its key
    async def put_object(self, key: str, data: bytes, content_type: str) -> str:
        try:
            res = self.supabase.storage.from_(self.bucket).upload(
                key,
                data,
                {"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error(f"Supabase upload error for {key}: {e}")
            raise HTTPException(status_code=500, detail=f"Storage upload failed: {e}")

        if isinstance(res, dict) and res.get("error"):
            logger.error(f"Supabase upload for {key} returned error: {res['error']}")
            raise HTTPException(status_code=500, detail="Storage upload failed")

        logger.info(f"Stored {key} ({len(data)} bytes, {content_type})")
        return key

    async def delete_object(self, key: str) -> None:
        self.supabase.storage.from_(self.bucket).remove([key])
        logger.info(f"Deleted {key} from storage")

    # Best-effort removal of objects written by a request that failed later
    async def cleanup_objects(self, keys: Iterable[str]) -> None:
        keys = [k for k in keys if k]
        if not keys:
            return

        logger.info(f"Cleaning up {len(keys)} uploaded objects")
        for key in keys:
            try:
                await self.delete_object(key)
            except Exception as e:
                logger.error(f"Error cleaning up object {key}: {e}")


def get_document_service() -> DocumentService:
    return DocumentService()
