"""
Editing of an existing campaign from the organizer dashboard.

Field edits are kept locally until save(); image changes (add, set primary,
delete) go to the service immediately and the returned media list replaces
the local one.
"""

import copy
import logging
from typing import Any, Dict, Optional

from campaign_client import CampaignClient, CollaboratorError
from campaign_form import MAX_GOAL_AMOUNT, is_valid_youtube_url, parse_goal_amount
from media_upload import LocalFile, validate_file
from regions import is_province_in_department
from results import ErrorCode, Result
from wizard_context import DASHBOARD_CAMPAIGNS_PATH, WizardContext

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "goal_amount": "goalAmount",
    "location": "location",
    "province": "province",
    "end_date": "endDate",
    "story": "story",
    "beneficiaries_description": "beneficiariesDescription",
}


class CampaignEditor:

    def __init__(self, client: CampaignClient, campaign_id: str, context: Optional[WizardContext] = None):
        self.client = client
        self.campaign_id = campaign_id
        self.context = context or WizardContext()
        self.campaign: Dict[str, Any] = {}
        self.original: Dict[str, Any] = {}
        self.is_modified = False
        self.is_saving = False

    def load(self) -> Result:
        try:
            campaign = self.client.get_campaign(self.campaign_id)
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudo cargar la campaña.")
            return Result.failure(ErrorCode.LOOKUP_FAILED, e.message)

        self.campaign = campaign
        self.original = copy.deepcopy(campaign)
        self.is_modified = False
        return Result.success(campaign)

    @property
    def is_draft(self) -> bool:
        return self.campaign.get("status") == "draft"

    @property
    def can_delete(self) -> bool:
        return self.campaign.get("status") in ("draft", "active")

    # Local edits

    def set(self, name: str, value) -> Result:
        if name not in EDITABLE_FIELDS:
            return Result.failure(ErrorCode.VALIDATION_FAILED, f"Campo no editable: {name}", [name])

        if name == "goal_amount":
            value = min(parse_goal_amount(value) or 0, MAX_GOAL_AMOUNT)

        self.campaign[name] = value
        if name == "location":
            province = self.campaign.get("province")
            if province and not is_province_in_department(province, value):
                self.campaign["province"] = None

        self.is_modified = True
        return Result.success(value)

    def add_youtube_link(self, url: str) -> Result:
        url = (url or "").strip()
        if not is_valid_youtube_url(url):
            self.context.notifier.notify("Enlace inválido", "Por favor ingresa un enlace válido de YouTube.")
            return Result.failure(ErrorCode.VALIDATION_FAILED, "Enlace de YouTube no válido", ["youtube_urls"])

        self.campaign["youtube_urls"] = list(self.campaign.get("youtube_urls") or []) + [url]
        self.is_modified = True
        return Result.success(self.campaign["youtube_urls"])

    def remove_youtube_link(self, index: int) -> Result:
        links = list(self.campaign.get("youtube_urls") or [])
        if not 0 <= index < len(links):
            return Result.failure(ErrorCode.VALIDATION_FAILED, "Enlace no encontrado", ["youtube_urls"])
        del links[index]
        self.campaign["youtube_urls"] = links
        self.is_modified = True
        return Result.success(links)

    def cancel(self):
        """Drop local edits"""
        self.campaign = copy.deepcopy(self.original)
        self.is_modified = False

    def save(self) -> Result:
        if self.is_saving:
            return Result.failure(ErrorCode.BUSY, "Ya se están guardando los cambios")

        fields = {wire: self.campaign.get(name) for name, wire in EDITABLE_FIELDS.items()}
        links = list(self.campaign.get("youtube_urls") or [])
        fields["youtubeUrls"] = links
        fields["youtubeUrl"] = links[0] if links else ""
        if not fields["goalAmount"]:
            fields.pop("goalAmount")
        if hasattr(fields["endDate"], "isoformat"):
            fields["endDate"] = fields["endDate"].isoformat()

        self.is_saving = True
        try:
            campaign = self.client.update_campaign(self.campaign_id, fields)
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudieron guardar los cambios. Intenta nuevamente.")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message)
        finally:
            self.is_saving = False

        if campaign:
            self.campaign = campaign
        self.original = copy.deepcopy(self.campaign)
        self.is_modified = False
        self.context.notifier.notify("Cambios guardados", "Los cambios han sido guardados exitosamente.")
        return Result.success(self.campaign)

    # Images

    def add_image(self, file: LocalFile, is_primary: bool = False) -> Result:
        validation = validate_file(file)
        if not validation.ok:
            self.context.notifier.error("Error", validation.error.message)
            return validation

        try:
            uploaded = self.client.upload_file(file.filename, file.content, file.content_type)
            media = self.client.add_media(self.campaign_id, uploaded["url"], "image", is_primary)
        except CollaboratorError as e:
            self.context.notifier.error("Error de carga", "Error al subir la imagen. Intenta nuevamente.")
            return Result.failure(ErrorCode.UPLOAD_FAILED, e.message, ["media"])

        return self._media_changed(media, "Imagen subida", "La imagen se ha subido correctamente.")

    def set_primary_image(self, media_id: str) -> Result:
        try:
            media = self.client.set_primary_media(self.campaign_id, media_id)
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudo actualizar la imagen principal.")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message, ["media"])
        return self._media_changed(media, "Imagen principal", "La imagen principal ha sido actualizada.")

    def delete_image(self, media_id: str) -> Result:
        if len(self.campaign.get("media") or []) <= 1:
            return Result.failure(ErrorCode.NO_MEDIA, "La campaña debe tener al menos una imagen", ["media"])
        try:
            media = self.client.delete_media(self.campaign_id, media_id)
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudo eliminar la imagen.")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message, ["media"])
        return self._media_changed(media, "Imagen eliminada", "La imagen ha sido eliminada.")

    def _media_changed(self, media, title: str, description: str) -> Result:
        self.campaign["media"] = media
        self.original["media"] = copy.deepcopy(media)
        self.context.notifier.notify(title, description)
        return Result.success(media)

    # Lifecycle

    def publish(self) -> Result:
        """Activate a draft from the dashboard, without verification"""
        if not self.is_draft:
            return Result.failure(ErrorCode.INVALID_STEP, "Solo se pueden publicar borradores")
        try:
            campaign = self.client.update_campaign(
                self.campaign_id, {"campaignStatus": "active", "verificationRequested": False}
            )
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudo publicar la campaña.")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message)

        self.campaign["status"] = campaign.get("status", "active")
        self.original["status"] = self.campaign["status"]
        self.context.notifier.notify("Campaña publicada", "Tu campaña ahora está activa.")
        return Result.success(self.campaign_id)

    def delete(self) -> Result:
        if not self.can_delete:
            return Result.failure(ErrorCode.INVALID_STEP, "Esta campaña no se puede eliminar")
        try:
            self.client.delete_campaign(self.campaign_id)
        except CollaboratorError as e:
            self.context.notifier.error("Error", "No se pudo eliminar la campaña.")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message)

        logger.info(f"Campaign {self.campaign_id} deleted from the dashboard")
        self.context.notifier.notify("Campaña eliminada", "El borrador fue eliminado correctamente.")
        self.context.navigate(DASHBOARD_CAMPAIGNS_PATH)
        return Result.success(self.campaign_id)
