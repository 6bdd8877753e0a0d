"""
Media Upload Coordinator for the campaign wizard.

Validates local image files, uploads them through the campaign client and
keeps the form's media list consistent (dense order, a single primary).
Files whose upload failed are kept for one last attempt before the draft
is saved.
"""

import base64
import binascii
import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from typing import List, Optional

from campaign_client import CampaignClient, CollaboratorError
from campaign_form import CampaignFormState
from config import get_settings
from media import MediaType, append_media, remove_media, replace_media, set_primary_media
from results import ErrorCode, Result
from wizard_context import WizardContext

logger = logging.getLogger(__name__)

UNSUPPORTED_TYPE_MESSAGE = "Solo se permiten archivos de imagen (JPEG, PNG)."
UPLOAD_FAILED_MESSAGE = "No se pudo subir la imagen. Inténtalo de nuevo."
MEDIA_NOT_FOUND_MESSAGE = "La imagen seleccionada no existe"
EDITED_FILENAME = "edited-image.jpg"

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<base64>;base64)?,(?P<data>.*)$", re.DOTALL)


@dataclass
class LocalFile:
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str, content_type: Optional[str] = None) -> "LocalFile":
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        with open(path, "rb") as handle:
            content = handle.read()
        return cls(filename=os.path.basename(path), content=content, content_type=content_type)


def validate_file(file: LocalFile, max_size: Optional[int] = None,
                  allowed_types: Optional[List[str]] = None) -> Result:
    """Check size and type before anything is sent"""
    settings = get_settings()
    max_size = max_size or settings.max_media_file_size
    allowed_types = allowed_types or settings.allowed_media_types

    if file.size > max_size:
        limit = max_size // (1024 * 1024)
        return Result.failure(
            ErrorCode.FILE_TOO_LARGE,
            f"El archivo es demasiado grande. El tamaño máximo es {limit}MB.",
            ["media"],
        )
    if file.content_type not in allowed_types:
        return Result.failure(ErrorCode.UNSUPPORTED_FILE_TYPE, UNSUPPORTED_TYPE_MESSAGE, ["media"])
    return Result.success(file)


def decode_data_url(data_url: str, filename: str = EDITED_FILENAME) -> LocalFile:
    """
    Turn an edited image (a data: URL) back into a file.

    Malformed input is logged and replaced by an empty JPEG placeholder so the
    wizard keeps going.
    """
    match = _DATA_URL.match(data_url or "")
    try:
        if not match:
            raise ValueError("not a data URL")
        mime = match.group("mime") or "image/jpeg"
        if match.group("base64"):
            content = base64.b64decode(match.group("data"), validate=True)
        else:
            content = match.group("data").encode("utf-8")
    except (ValueError, binascii.Error) as e:
        logger.error(f"Could not decode edited image, using an empty placeholder: {e}")
        return LocalFile(filename=filename, content=b"", content_type="image/jpeg")

    return LocalFile(filename=filename, content=content, content_type=mime)


class MediaUploadCoordinator:
    """Uploads campaign photos and maintains the form's media list"""

    def __init__(self, form: CampaignFormState, client: CampaignClient, context: WizardContext):
        self.form = form
        self.client = client
        self.context = context
        self.pending: List[LocalFile] = []
        self.is_uploading = False

        self._editing = False
        self._edit_index: Optional[int] = None
        self._edit_file: Optional[LocalFile] = None

    def add_file(self, file: LocalFile) -> Result:
        """Validate and upload a file, then append it to the media list"""
        if self.is_uploading:
            return Result.failure(ErrorCode.BUSY, "Ya hay una subida en curso")

        validation = validate_file(file)
        if not validation.ok:
            self.context.notifier.error("Error", validation.error.message)
            return validation

        uploaded = self._upload(file)
        if not uploaded.ok:
            if file not in self.pending:
                self.pending.append(file)
            self.context.notifier.error("Error al subir imagen", uploaded.error.message)
            return uploaded

        self.form.set("media", append_media(self.form.media, uploaded.value, MediaType.IMAGE))
        return Result.success(self.form.media[-1])

    def ensure_uploaded(self) -> Result:
        """Last attempt at queued files; succeeds once at least one image is stored"""
        for file in list(self.pending):
            uploaded = self._upload(file)
            if uploaded.ok:
                self.pending.remove(file)
                self.form.set("media", append_media(self.form.media, uploaded.value, MediaType.IMAGE))

        if not self.form.media:
            return Result.failure(ErrorCode.NO_MEDIA, "Debes subir al menos una imagen", ["media"])
        return Result.success(list(self.form.media))

    # Crop/adjust sub-flow

    def start_edit(self, index: Optional[int] = None, file: Optional[LocalFile] = None) -> Result:
        """Edit an existing item (index) or a newly selected file before upload"""
        if index is not None and not 0 <= index < len(self.form.media):
            return Result.failure(ErrorCode.VALIDATION_FAILED, MEDIA_NOT_FOUND_MESSAGE, ["media"])
        if file is not None:
            validation = validate_file(file)
            if not validation.ok:
                self.context.notifier.error("Error", validation.error.message)
                return validation

        self._editing = True
        self._edit_index = index
        self._edit_file = file
        return Result.success(index)

    def apply_edit(self, data_url: str) -> Result:
        """Upload the edited image; it replaces the edited item or is appended"""
        if not self._editing:
            return Result.failure(ErrorCode.VALIDATION_FAILED, "No hay ninguna imagen en edición")
        if self.is_uploading:
            return Result.failure(ErrorCode.BUSY, "Ya hay una subida en curso")

        filename = self._edit_file.filename if self._edit_file else EDITED_FILENAME
        edited = decode_data_url(data_url, filename)

        validation = validate_file(edited)
        if not validation.ok:
            self.context.notifier.error("Error", validation.error.message)
            return validation

        uploaded = self._upload(edited)
        if not uploaded.ok:
            self.context.notifier.error("Error al subir imagen", uploaded.error.message)
            return uploaded

        index = self._edit_index
        if index is not None and index < len(self.form.media):
            self.form.set("media", replace_media(self.form.media, index, uploaded.value))
        else:
            self.form.set("media", append_media(self.form.media, uploaded.value, MediaType.IMAGE))
            index = len(self.form.media) - 1

        self.cancel_edit()
        return Result.success(self.form.media[index])

    def cancel_edit(self):
        self._editing = False
        self._edit_index = None
        self._edit_file = None

    @property
    def is_editing(self) -> bool:
        return self._editing

    # List operations

    def remove(self, index: int) -> Result:
        try:
            self.form.set("media", remove_media(self.form.media, index))
        except IndexError:
            return Result.failure(ErrorCode.VALIDATION_FAILED, MEDIA_NOT_FOUND_MESSAGE, ["media"])
        return Result.success(list(self.form.media))

    def set_primary(self, index: int) -> Result:
        try:
            self.form.set("media", set_primary_media(self.form.media, index))
        except IndexError:
            return Result.failure(ErrorCode.VALIDATION_FAILED, MEDIA_NOT_FOUND_MESSAGE, ["media"])
        return Result.success(list(self.form.media))

    def _upload(self, file: LocalFile) -> Result:
        self.is_uploading = True
        try:
            uploaded = self.client.upload_file(file.filename, file.content, file.content_type)
        except CollaboratorError as e:
            logger.error(f"Upload of {file.filename} failed: {e.message}")
            return Result.failure(ErrorCode.UPLOAD_FAILED, e.message or UPLOAD_FAILED_MESSAGE, ["media"])
        finally:
            self.is_uploading = False

        logger.info(f"Uploaded {file.filename} ({file.size} bytes) to {uploaded['url']}")
        return Result.success(uploaded["url"])
