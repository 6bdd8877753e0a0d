"""
Object Storage Service for the Minka Platform
Stores uploaded campaign media in a bucket directory and returns public URLs
"""

import logging
import os
import time
import uuid
from dataclasses import dataclass
from typing import List, Optional

from config import ConfigManager

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "campaign-images"
VIDEO_FOLDER = "campaign-videos"


class StorageError(Exception):
    """Raised when an object cannot be written to the bucket"""
    pass


@dataclass
class StoredObject:
    """Result of a successful upload"""
    path: str
    url: str
    media_type: str
    size: int


class StorageService:
    """
    Filesystem-backed bucket for campaign images and videos
    """

    def __init__(self, directory: str, public_base_url: str, max_size: int, allowed_types: List[str]):
        self.directory = directory
        self.public_base_url = public_base_url.rstrip("/")
        self.max_size = max_size
        self.allowed_types = allowed_types

        logger.info(f"StorageService initialized (bucket: {self.directory})")

    def ensure_bucket(self):
        """Create the bucket folders if they do not exist"""
        for folder in (IMAGE_FOLDER, VIDEO_FOLDER):
            os.makedirs(os.path.join(self.directory, folder), exist_ok=True)

    def validate(self, content_type: Optional[str], size: int) -> Optional[str]:
        """Return an error message if the upload is not acceptable"""
        if content_type not in self.allowed_types:
            return "File type not supported. Please upload JPEG, PNG or MP4 files only."
        if size > self.max_size:
            return f"File size exceeds {self.max_size // (1024 * 1024)}MB limit"
        return None

    def save(self, filename: str, content: bytes, content_type: str, owner_id: str) -> StoredObject:
        """Write the object and return its public URL"""
        is_video = content_type.startswith("video")
        folder = VIDEO_FOLDER if is_video else IMAGE_FOLDER

        extension = os.path.splitext(filename or "")[1].lstrip(".").lower() or ("mp4" if is_video else "jpg")
        object_name = f"{owner_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{extension}"
        relative_path = f"{folder}/{object_name}"

        try:
            self.ensure_bucket()
            with open(os.path.join(self.directory, folder, object_name), "wb") as handle:
                handle.write(content)
        except OSError as e:
            logger.error(f"Storage write failed for {relative_path}: {e}")
            raise StorageError(str(e))

        logger.info(f"Stored {relative_path} ({len(content)} bytes)")
        return StoredObject(
            path=relative_path,
            url=f"{self.public_base_url}/{relative_path}",
            media_type="video" if is_video else "image",
            size=len(content),
        )


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Dependency returning the configured storage service"""
    global _storage_service
    if _storage_service is None:
        storage_config = ConfigManager().get_storage_config()
        _storage_service = StorageService(
            directory=storage_config["directory"],
            public_base_url=storage_config["public_base_url"],
            max_size=storage_config["max_size"],
            allowed_types=storage_config["allowed_types"],
        )
    return _storage_service
