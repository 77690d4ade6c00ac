"""
Image Upload Utility - Store photos attached to issue reports.

Supported formats:
- JPEG (.jpg, .jpeg)
- PNG (.png)
- WebP (.webp)
- GIF (.gif)
- HEIC (.heic) from phone cameras

Max file size: settings.max_image_size_mb (5MB by default)

Files are written to settings.upload_dir under a random name and served
by the app at /uploads/<name>.
"""

import os
import uuid
from typing import Optional

from fastapi import UploadFile, HTTPException

from campuslink.core.config import get_settings

settings = get_settings()

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.heic'}
UPLOAD_URL_PREFIX = "/uploads"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def max_image_bytes() -> int:
    return settings.max_image_size_mb * 1024 * 1024


async def save_issue_image(file: Optional[UploadFile]) -> Optional[str]:
    """
    Validate and store an uploaded image.

    Args:
        file: FastAPI UploadFile, or None when no image was attached

    Returns:
        Public URL of the stored image, or None

    Raises:
        HTTPException on validation errors
    """
    if file is None or not file.filename:
        return None

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported image type '{ext}'. Allowed: JPG, PNG, WEBP, GIF, HEIC"
        )

    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Attachment must be an image")

    # One byte past the limit is enough to tell the upload is too large
    content = await file.read(max_image_bytes() + 1)

    if len(content) > max_image_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"Image must be less than {settings.max_image_size_mb}MB"
        )

    if not content:
        raise HTTPException(status_code=400, detail="Image file is empty")

    os.makedirs(settings.upload_dir, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{ext}"
    with open(os.path.join(settings.upload_dir, stored_name), "wb") as out:
        out.write(content)

    return f"{UPLOAD_URL_PREFIX}/{stored_name}"
