"""
Draft persistence for the campaign wizard.

Serializes the form into the draft payload the campaign service expects,
remembers the campaign id it hands back, and sends partial updates for the
later wizard steps.
"""

import logging
from typing import Any, Dict, Optional

from campaign_client import CampaignClient, CollaboratorError
from campaign_form import CampaignFormState
from results import ErrorCode, Result

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Faltan campos requeridos en el formulario"
NO_MEDIA_MESSAGE = "Debes subir al menos una imagen"
MISSING_ID_MESSAGE = "No se encontró ID de campaña para actualizar"
DRAFT_FAILED_MESSAGE = "No se pudo guardar el borrador de la campaña"
UPDATE_FAILED_MESSAGE = "No se pudo actualizar la campaña"


def build_draft_payload(form: CampaignFormState, campaign_id: Optional[str] = None) -> Dict[str, Any]:
    """The full draft body; the legacy youtubeUrl is derived from the link list"""
    links = list(form.youtube_links)
    payload = {
        "title": form.title,
        "description": form.description,
        "story": form.story,
        "beneficiariesDescription": form.beneficiaries_description or form.story,
        "category": form.category,
        "goalAmount": form.goal_amount_value,
        "location": form.location,
        "province": form.province,
        "endDate": form.end_date.isoformat() if form.end_date else None,
        "youtubeUrls": links,
        "youtubeUrl": links[0] if links else "",
        "media": [item.to_payload() for item in form.media],
    }
    if campaign_id:
        payload["campaignId"] = campaign_id
    return payload


class DraftPersistenceBridge:
    """Saves the wizard form as a draft and applies partial updates"""

    def __init__(self, client: CampaignClient):
        self.client = client
        self.campaign_id: Optional[str] = None
        self.is_submitting = False

    def save_draft(self, form: CampaignFormState) -> Result:
        """Create the draft, or update it in place once an id is known"""
        missing = [name for name in ("title", "description", "category") if not getattr(form, name).strip()]
        if missing:
            return Result.failure(ErrorCode.MISSING_REQUIRED_FIELD, MISSING_FIELDS_MESSAGE, missing)
        if not form.media:
            return Result.failure(ErrorCode.NO_MEDIA, NO_MEDIA_MESSAGE, ["media"])

        known_id = self.campaign_id or form.campaign_id
        payload = build_draft_payload(form, known_id)

        self.is_submitting = True
        try:
            campaign_id = self.client.save_draft(payload)
        except CollaboratorError as e:
            logger.error(f"Draft save failed (campaign {known_id or 'new'}): {e.message}")
            return Result.failure(ErrorCode.DRAFT_SAVE_FAILED, e.message or DRAFT_FAILED_MESSAGE)
        finally:
            self.is_submitting = False

        self.campaign_id = campaign_id
        form.campaign_id = campaign_id
        logger.info(f"Draft saved as campaign {campaign_id}")
        return Result.success(campaign_id)

    def update_campaign(self, fields: Dict[str, Any], campaign_id: Optional[str] = None) -> Result:
        """PATCH a subset of camelCase campaign fields"""
        target = campaign_id or self.campaign_id
        if not target:
            return Result.failure(ErrorCode.MISSING_CAMPAIGN_ID, MISSING_ID_MESSAGE, ["campaign_id"])

        self.is_submitting = True
        try:
            campaign = self.client.update_campaign(target, fields)
        except CollaboratorError as e:
            logger.error(f"Update of campaign {target} failed: {e.message}")
            return Result.failure(ErrorCode.UPDATE_FAILED, e.message or UPDATE_FAILED_MESSAGE)
        finally:
            self.is_submitting = False

        logger.info(f"Campaign {target} updated: {sorted(fields)}")
        return Result.success(campaign)
