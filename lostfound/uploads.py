"""
Image uploads (report photos, profile pictures).
Files land under settings.upload_dir/<folder>/<owner_id>/ and are served from /uploads.
"""

import os, uuid, logging
from pathlib import Path

from fastapi import UploadFile

from lostfound.config import settings

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


def _public_url(relative: str) -> str:
    base = settings.media_base_url.strip().rstrip("/")
    return f"{base}{UPLOAD_URL_PREFIX}/{relative}"


async def save_image(file: UploadFile, folder: str, owner_id: str) -> str:
    """Store an uploaded image and return its public URL."""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise ValueError("errors.invalid_file")

    content = await file.read()
    if not content:
        raise ValueError("errors.invalid_file")
    if len(content) > settings.max_upload_bytes:
        raise ValueError("errors.file_too_large")

    extension = Path(file.filename or "photo.jpg").suffix.lower() or ".jpg"
    relative = f"{folder}/{owner_id}/{uuid.uuid4().hex}{extension}"
    target = Path(settings.upload_dir) / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)

    logger.info("Stored upload %s (%d bytes)", relative, len(content))
    return _public_url(relative)


def delete_upload(url: str) -> bool:
    """Remove a previously stored upload; unknown URLs are ignored."""
    marker = f"{UPLOAD_URL_PREFIX}/"
    if marker not in url:
        return False
    relative = url.split(marker, 1)[1]
    root = Path(settings.upload_dir).resolve()
    target = (root / relative).resolve()
    if root not in target.parents or not target.exists():
        return False
    os.remove(target)
    return True
