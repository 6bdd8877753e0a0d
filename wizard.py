"""
Campaign creation wizard: step and sub-step state machine.

Step 1 composes the campaign over seven sub-steps, step 2 selects who
receives the funds and step 3 publishes. Moving forward validates the
current position first; leaving sub-step 7 saves the draft and leaving
step 2 saves the recipient. Moving back never validates or saves.
"""

import logging
from typing import Any, Dict, List, Optional

from campaign_client import CampaignClient, CollaboratorError
from campaign_form import COMPOSE_SUBSTEPS, CampaignFormState, FieldError
from draft_bridge import DraftPersistenceBridge
from media_upload import MediaUploadCoordinator
from models import RecipientType
from publish import PublishTransition
from results import ErrorCode, Result
from wizard_context import WizardContext

logger = logging.getLogger(__name__)

COMPOSE_STEP, RECIPIENT_STEP, REVIEW_STEP = 1, 2, 3

INCOMPLETE_TITLE = "Campos incompletos"
INCOMPLETE_DESCRIPTION = "Por favor completa todos los campos requeridos antes de continuar."
BUSY_MESSAGE = "Espera a que termine la operación en curso"


class CampaignWizard:

    def __init__(self, client: CampaignClient, context: Optional[WizardContext] = None,
                 form: Optional[CampaignFormState] = None):
        self.client = client
        self.context = context or WizardContext()
        self.form = form or CampaignFormState()
        self.bridge = DraftPersistenceBridge(client)
        self.uploads = MediaUploadCoordinator(self.form, client, self.context)
        self.transition = PublishTransition(self.form, self.bridge, self.context)

        self.step = COMPOSE_STEP
        self.substep = 1
        self.direction: Optional[str] = None
        self.legal_entities: List[Dict[str, Any]] = []

    @property
    def position(self):
        return self.step, self.substep

    @property
    def is_busy(self) -> bool:
        return self.bridge.is_submitting or self.uploads.is_uploading

    # Navigation

    def next(self) -> Result:
        if self.is_busy:
            return Result.failure(ErrorCode.BUSY, BUSY_MESSAGE)

        if self.step == COMPOSE_STEP:
            violations = self.form.validate_step(self.substep)
            if violations:
                return self._refuse(violations)
            if self.substep < COMPOSE_SUBSTEPS:
                self.substep += 1
                self.direction = "next"
                return Result.success(self.position)
            return self._finish_compose()

        if self.step == RECIPIENT_STEP:
            return self.submit_recipient()

        return Result.failure(ErrorCode.INVALID_STEP, "La campaña está lista para publicarse")

    def prev(self) -> Result:
        """Go back one position; at step 1, sub-step 1 this does nothing"""
        if self.step == COMPOSE_STEP:
            if self.substep > 1:
                self.substep -= 1
                self.direction = "prev"
        else:
            self._enter_step(self.step - 1)
            self.direction = "prev"
        return Result.success(self.position)

    def _enter_step(self, step: int):
        self.step = step
        if step == COMPOSE_STEP:
            self.substep = 1
        logger.info(f"Wizard at step {self.step}, sub-step {self.substep}")

    def _refuse(self, violations: List[FieldError], code: ErrorCode = ErrorCode.VALIDATION_FAILED) -> Result:
        self.context.notifier.error(INCOMPLETE_TITLE, INCOMPLETE_DESCRIPTION)
        return Result.failure(code, violations[0].message, [v.field for v in violations])

    def _finish_compose(self) -> Result:
        """Sub-step 7 to step 2: make sure media is stored, validate everything, save the draft"""
        if not self.form.media:
            uploaded = self.uploads.ensure_uploaded()
            if not uploaded.ok:
                self.form.errors["media"] = uploaded.error.message
                self.context.notifier.error("Error", uploaded.error.message)
                return uploaded

        violations = self.form.validate_compose()
        if violations:
            return self._refuse(violations)

        saved = self.bridge.save_draft(self.form)
        if not saved.ok:
            self.context.notifier.error("Error", saved.error.message)
            return saved

        self.context.notifier.notify("Borrador guardado", "Tu campaña se ha guardado como borrador.")
        self._enter_step(RECIPIENT_STEP)
        self.direction = "next"
        return saved

    # Recipient

    def load_legal_entities(self, search: Optional[str] = None) -> Result:
        """Load the selectable legal entities; a failed lookup leaves the list empty"""
        try:
            self.legal_entities = self.client.fetch_legal_entities(search)
        except CollaboratorError as e:
            self.legal_entities = []
            self.context.notifier.error("Error", "No se pudieron cargar las organizaciones.")
            return Result.failure(ErrorCode.LOOKUP_FAILED, e.message)
        return Result.success(self.legal_entities)

    def select_recipient(self, recipient_type: str, beneficiary_name: str = "",
                         beneficiary_relationship: str = "", beneficiary_reason: str = "",
                         legal_entity_id: Optional[str] = None) -> Result:
        """Fill in the recipient sub-form and submit it"""
        if self.step != RECIPIENT_STEP:
            return Result.failure(ErrorCode.INVALID_STEP, "El destinatario se elige en el paso 2")
        if self.is_busy:
            return Result.failure(ErrorCode.BUSY, BUSY_MESSAGE)

        self.form.update(
            recipient_type=recipient_type,
            beneficiary_name=beneficiary_name,
            beneficiary_relationship=beneficiary_relationship,
            beneficiary_reason=beneficiary_reason,
            legal_entity_id=legal_entity_id,
        )
        return self.submit_recipient()

    def submit_recipient(self) -> Result:
        if self.step != RECIPIENT_STEP:
            return Result.failure(ErrorCode.INVALID_STEP, "El destinatario se elige en el paso 2")
        if self.is_busy:
            return Result.failure(ErrorCode.BUSY, BUSY_MESSAGE)

        violations = self.form.validate_recipient([entity["id"] for entity in self.legal_entities])
        if violations:
            code = ErrorCode.VALIDATION_FAILED
            if self.form.legal_entity_id and any(v.field == "legal_entity_id" for v in violations):
                code = ErrorCode.LEGAL_ENTITY_NOT_FOUND
            self.context.notifier.error("Error", violations[0].message)
            return Result.failure(code, violations[0].message, [v.field for v in violations])

        updated = self.bridge.update_campaign(self._recipient_fields(), self.form.campaign_id)
        if not updated.ok:
            self.context.notifier.error("Error", updated.error.message)
            return updated

        self._enter_step(REVIEW_STEP)
        self.direction = "next"
        return updated

    def _recipient_fields(self) -> Dict[str, Any]:
        form = self.form
        is_third_party = form.recipient_type == RecipientType.OTRA_PERSONA.value
        is_legal_entity = form.recipient_type == RecipientType.PERSONA_JURIDICA.value
        return {
            "recipientType": form.recipient_type,
            "beneficiariesDescription": form.beneficiaries_description or form.story,
            "beneficiaryName": form.beneficiary_name if is_third_party else None,
            "beneficiaryRelationship": form.beneficiary_relationship if is_third_party else None,
            "beneficiaryReason": form.beneficiary_reason if is_third_party else None,
            "legalEntityId": form.legal_entity_id if is_legal_entity else None,
        }

    # Terminal actions

    def publish(self) -> Result:
        return self._terminal(self.transition.publish)

    def request_verification(self) -> Result:
        return self._terminal(self.transition.request_verification)

    def _terminal(self, action) -> Result:
        if self.step != REVIEW_STEP:
            return Result.failure(ErrorCode.INVALID_STEP, "La campaña se publica desde el paso 3")
        if self.is_busy:
            return Result.failure(ErrorCode.BUSY, BUSY_MESSAGE)

        violations = self.form.validate_all([entity["id"] for entity in self.legal_entities])
        if violations:
            return self._refuse(violations)
        return action()
