"""
Upload API Routes for the Minka Platform
Multipart uploads of campaign images and videos to the object store
"""

import logging
from typing import Dict, Any, Optional
from fastapi import APIRouter, HTTPException, Depends, Request, status, File, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from auth_middleware import get_current_organizer
from config import get_settings
from models import Profile
from storage_service import StorageService, StorageError, get_storage_service

logger = logging.getLogger(__name__)

settings = get_settings()

# Rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

upload_router = APIRouter()


@upload_router.post("/upload", response_model=Dict[str, Any])
@limiter.limit(settings.upload_rate_limit)
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    organizer: Profile = Depends(get_current_organizer),
    storage: StorageService = Depends(get_storage_service)
):
    """Store one file and return its public URL"""
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded"
        )

    try:
        content = await file.read()

        error = storage.validate(file.content_type, len(content))
        if error:
            logger.warning(f"Upload rejected for organizer {organizer.id}: {error}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error
            )

        stored = storage.save(file.filename, content, file.content_type, organizer.id)

        return {
            "success": True,
            "url": stored.url,
            "type": stored.media_type
        }

    except HTTPException:
        raise
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {e}"
        )
    except Exception as e:
        logger.error(f"Upload error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload file"
        )
