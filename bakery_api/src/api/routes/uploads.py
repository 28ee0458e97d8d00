from __future__ import annotations

import logging
from pathlib import Path
from uuid import uuid4

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from src.core.deps import get_current_active_user
from src.core.settings import get_app_settings
from src.schemas.system import UploadResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}
CHUNK_SIZE = 64 * 1024


# PUBLIC_INTERFACE
@router.post(
    "/images",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image",
    description="Store a JPEG, PNG, WebP or GIF image and return the URL it is served from.",
    dependencies=[Depends(get_current_active_user)],
)
async def upload_image(file: UploadFile = File(...)) -> UploadResult:
    """
    Save an uploaded image under a random name in the upload directory.

    Returns:
        UploadResult with the public '/uploads/<name>' URL.
    """
    settings = get_app_settings()
    content_type = (file.content_type or "").lower()
    suffix = ALLOWED_IMAGE_TYPES.get(content_type)
    if suffix is None:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only JPEG, PNG, WebP and GIF images are accepted",
        )

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid4().hex}{suffix}"
    target = upload_dir / filename

    size = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.UPLOAD_MAX_BYTES:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"File exceeds {settings.UPLOAD_MAX_BYTES} bytes",
                    )
                out.write(chunk)
    except HTTPException:
        target.unlink(missing_ok=True)
        raise
    finally:
        await file.close()

    logger.info("Stored upload %s (%d bytes, %s)", filename, size, content_type)
    return UploadResult(url=f"/uploads/{filename}", filename=filename, content_type=content_type, size=size)
