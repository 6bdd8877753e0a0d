"""
Terminal transitions of the campaign wizard: publish the draft directly, or
publish it and hand off to the verification intake.
"""

import logging
from typing import Any, Dict

from campaign_form import CampaignFormState
from draft_bridge import DraftPersistenceBridge
from results import ErrorCode, Result
from wizard_context import DASHBOARD_CAMPAIGNS_PATH, VERIFICATION_INTAKE_PATH, WizardContext

logger = logging.getLogger(__name__)

ACTIVE = "active"


class PublishTransition:
    """Moves a saved draft to active; both actions can be retried after a failure"""

    def __init__(self, form: CampaignFormState, bridge: DraftPersistenceBridge, context: WizardContext):
        self.form = form
        self.bridge = bridge
        self.context = context

    def publish(self) -> Result:
        """Activate without verification and return to the organizer's campaigns"""
        result = self._activate({"campaignStatus": ACTIVE, "verificationRequested": False})
        if not result.ok:
            return result

        self.form.verification_requested = False
        self.context.notifier.notify("¡Campaña publicada!", "Tu campaña ya está visible para los donantes.")
        self.context.navigate(DASHBOARD_CAMPAIGNS_PATH)
        return result

    def request_verification(self) -> Result:
        """Activate, then send the organizer to the verification intake"""
        result = self._activate({"campaignStatus": ACTIVE})
        if not result.ok:
            return result

        campaign_id = result.value
        self.context.verification_campaign_id = campaign_id
        self.context.navigate(f"{VERIFICATION_INTAKE_PATH}?id={campaign_id}")
        return result

    def _activate(self, fields: Dict[str, Any]) -> Result:
        if self.bridge.is_submitting:
            return Result.failure(ErrorCode.BUSY, "Espera a que termine la solicitud en curso")

        campaign_id = self.form.campaign_id or self.bridge.campaign_id
        result = self.bridge.update_campaign(fields, campaign_id)
        if not result.ok:
            self.context.notifier.error("Error", result.error.message)
            return result

        self.form.status = ACTIVE
        logger.info(f"Campaign {campaign_id} is now active")
        return Result.success(campaign_id)
