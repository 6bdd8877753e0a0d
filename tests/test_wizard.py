"""
Wizard step controller and publish transitions, with a mocked service client.
"""

from datetime import date, timedelta

import pytest

from campaign_client import CollaboratorError
from media import MediaItem
from media_upload import LocalFile
from results import ErrorCode
from wizard import CampaignWizard

from conftest import JPEG_BYTES


@pytest.fixture
def wizard(mock_client, context, filled_form):
    return CampaignWizard(mock_client, context, filled_form)


def _advance_to(wizard, step, substep=1):
    while wizard.step < step or (step == 1 and wizard.substep < substep):
        result = wizard.next()
        assert result.ok, result.error


class TestComposeSubsteps:
    """Inner sub-steps of step 1"""

    def test_invalid_substep_does_not_advance(self, mock_client, context):
        wizard = CampaignWizard(mock_client, context)

        result = wizard.next()

        assert not result.ok
        assert wizard.position == (1, 1)
        assert "title" in result.error.fields
        assert wizard.form.errors["title"] == "El título debe tener al menos 3 caracteres"
        assert context.notifier.last.title == "Campos incompletos"

    def test_valid_substeps_advance_one_at_a_time(self, wizard):
        for expected in range(2, 8):
            assert wizard.next().ok
            assert wizard.position == (1, expected)
        wizard.client.save_draft.assert_not_called()

    def test_prev_at_first_substep_is_noop(self, wizard):
        assert wizard.prev().ok
        assert wizard.position == (1, 1)

    def test_prev_never_validates_or_saves(self, wizard):
        _advance_to(wizard, 1, 4)
        wizard.form.set("title", "")
        wizard.prev()
        assert wizard.position == (1, 3)
        assert wizard.form.errors == {}
        wizard.client.save_draft.assert_not_called()


class TestComposeBoundary:
    """Sub-step 7 to step 2"""

    def test_saves_draft_and_moves_to_recipient_step(self, wizard, context):
        _advance_to(wizard, 1, 7)

        result = wizard.next()

        assert result.ok
        assert result.value == "camp-001"
        assert wizard.position[0] == 2
        assert wizard.form.campaign_id == "camp-001"
        assert context.notifier.last.title == "Borrador guardado"

    def test_save_failure_stays_on_substep_seven(self, wizard, mock_client, context):
        mock_client.save_draft.side_effect = CollaboratorError("Failed to save campaign draft", 500)
        _advance_to(wizard, 1, 7)

        result = wizard.next()

        assert result.error.code == ErrorCode.DRAFT_SAVE_FAILED
        assert wizard.position == (1, 7)
        assert wizard.form.campaign_id is None
        assert context.notifier.last.description == "Failed to save campaign draft"

    def test_retry_after_failure_succeeds(self, wizard, mock_client):
        mock_client.save_draft.side_effect = [CollaboratorError("timeout"), "camp-001"]
        _advance_to(wizard, 1, 7)

        assert not wizard.next().ok
        assert wizard.next().ok
        assert wizard.step == 2

    def test_no_media_blocks_boundary(self, mock_client, context, filled_form):
        wizard = CampaignWizard(mock_client, context, filled_form)
        wizard.substep = 7
        filled_form.media = []

        result = wizard.next()

        assert result.error.code == ErrorCode.NO_MEDIA
        assert wizard.position == (1, 7)
        assert filled_form.errors["media"] == "Debes subir al menos una imagen"
        mock_client.save_draft.assert_not_called()

    def test_queued_upload_is_retried_before_saving(self, mock_client, context, filled_form):
        wizard = CampaignWizard(mock_client, context, filled_form)
        wizard.substep = 7
        filled_form.media = []
        wizard.uploads.pending.append(LocalFile("foto.jpg", JPEG_BYTES, "image/jpeg"))

        result = wizard.next()

        assert result.ok
        assert wizard.step == 2
        assert len(filled_form.media) == 1
        payload = mock_client.save_draft.call_args[0][0]
        assert payload["media"][0]["mediaUrl"] == "https://cdn.minka.bo/campaign-images/foto.jpg"

    def test_earlier_substep_violation_blocks_boundary(self, wizard, mock_client):
        _advance_to(wizard, 1, 7)
        wizard.form.title = ""

        result = wizard.next()

        assert result.error.code == ErrorCode.VALIDATION_FAILED
        assert result.error.fields == ["title"]
        assert wizard.position == (1, 7)
        mock_client.save_draft.assert_not_called()

    def test_busy_refuses_next(self, wizard, mock_client):
        _advance_to(wizard, 1, 7)
        wizard.bridge.is_submitting = True

        assert wizard.next().error.code == ErrorCode.BUSY
        mock_client.save_draft.assert_not_called()

    def test_back_to_step_one_resets_substep(self, wizard):
        _advance_to(wizard, 2)
        wizard.prev()
        assert wizard.position == (1, 1)

    def test_resaving_reuses_campaign_id(self, wizard, mock_client):
        _advance_to(wizard, 2)
        wizard.prev()
        _advance_to(wizard, 2)

        assert mock_client.save_draft.call_count == 2
        assert mock_client.save_draft.call_args[0][0]["campaignId"] == "camp-001"


class TestRecipientStep:
    """Step 2"""

    def test_third_party_without_reason_is_blocked(self, wizard, mock_client):
        _advance_to(wizard, 2)

        result = wizard.select_recipient("otra_persona", beneficiary_name="Rosa Choque",
                                         beneficiary_relationship="Madre")

        assert not result.ok
        assert "beneficiary_reason" in result.error.fields
        assert wizard.step == 2
        mock_client.update_campaign.assert_not_called()

    def test_third_party_recipient_is_saved(self, wizard, mock_client):
        _advance_to(wizard, 2)

        result = wizard.select_recipient(
            "otra_persona", beneficiary_name="Rosa Choque", beneficiary_relationship="Madre",
            beneficiary_reason="Necesita una operación de cadera",
        )

        assert result.ok
        assert wizard.step == 3
        campaign_id, fields = mock_client.update_campaign.call_args[0]
        assert campaign_id == "camp-001"
        assert fields["recipientType"] == "otra_persona"
        assert fields["beneficiaryReason"] == "Necesita una operación de cadera"
        assert fields["beneficiariesDescription"] == wizard.form.story
        assert fields["legalEntityId"] is None

    def test_legal_entity_must_be_loaded(self, wizard, mock_client):
        mock_client.fetch_legal_entities.return_value = [{"id": "le-1", "name": "Fundación Pro Bolivia"}]
        _advance_to(wizard, 2)
        wizard.load_legal_entities()

        unknown = wizard.select_recipient("persona_juridica", legal_entity_id="le-2")
        known = wizard.select_recipient("persona_juridica", legal_entity_id="le-1")

        assert unknown.error.code == ErrorCode.LEGAL_ENTITY_NOT_FOUND
        assert known.ok
        assert mock_client.update_campaign.call_args[0][1]["legalEntityId"] == "le-1"

    def test_failed_lookup_blocks_legal_entity(self, wizard, mock_client, context):
        mock_client.fetch_legal_entities.side_effect = CollaboratorError("Failed to retrieve legal entities", 500)
        _advance_to(wizard, 2)

        assert wizard.load_legal_entities().error.code == ErrorCode.LOOKUP_FAILED
        assert wizard.legal_entities == []
        assert not wizard.select_recipient("persona_juridica", legal_entity_id="le-1").ok

    def test_update_failure_stays_on_step_two(self, wizard, mock_client):
        mock_client.update_campaign.side_effect = CollaboratorError("Campaign not found", 404)
        _advance_to(wizard, 2)

        result = wizard.select_recipient("tu_mismo")

        assert result.error.code == ErrorCode.UPDATE_FAILED
        assert wizard.step == 2

    def test_select_recipient_outside_step_two(self, wizard):
        assert wizard.select_recipient("tu_mismo").error.code == ErrorCode.INVALID_STEP


class TestPublish:
    """Step 3 terminal actions"""

    @pytest.fixture
    def review_wizard(self, wizard):
        _advance_to(wizard, 2)
        assert wizard.select_recipient("tu_mismo").ok
        wizard.client.update_campaign.reset_mock()
        return wizard

    def test_publish_activates_without_verification(self, review_wizard, mock_client, context):
        result = review_wizard.publish()

        assert result.ok
        mock_client.update_campaign.assert_called_once_with(
            "camp-001", {"campaignStatus": "active", "verificationRequested": False}
        )
        assert review_wizard.form.status == "active"
        assert context.location == "/dashboard/campaigns"

    def test_request_verification_hands_off(self, review_wizard, mock_client, context):
        result = review_wizard.request_verification()

        assert result.ok
        mock_client.update_campaign.assert_called_once_with("camp-001", {"campaignStatus": "active"})
        assert context.verification_campaign_id == "camp-001"
        assert context.location == "/campaign-verification?id=camp-001"

    def test_failed_verification_request_does_not_hand_off(self, review_wizard, mock_client, context):
        mock_client.update_campaign.side_effect = CollaboratorError("Failed to update campaign", 500)

        result = review_wizard.request_verification()

        assert result.error.code == ErrorCode.UPDATE_FAILED
        assert review_wizard.form.status == "draft"
        assert context.verification_campaign_id is None
        assert context.location is None

    def test_publish_is_retryable(self, review_wizard, mock_client, context):
        mock_client.update_campaign.side_effect = [CollaboratorError("timeout"), {"status": "active"}]

        assert not review_wizard.publish().ok
        assert review_wizard.form.status == "draft"
        assert review_wizard.publish().ok
        assert review_wizard.form.status == "active"

    def test_form_invalidated_on_review_does_not_publish(self, review_wizard, mock_client, context):
        review_wizard.form.set("title", "")
        review_wizard.form.set("story", "")

        result = review_wizard.publish()

        assert result.error.code == ErrorCode.VALIDATION_FAILED
        assert result.error.fields == ["title", "story"]
        assert review_wizard.form.status == "draft"
        assert context.notifier.last.title == "Campos incompletos"
        assert context.location is None
        mock_client.update_campaign.assert_not_called()

    def test_invalid_form_blocks_verification_request(self, review_wizard, mock_client, context):
        review_wizard.form.set("media", [])

        assert review_wizard.request_verification().error.code == ErrorCode.VALIDATION_FAILED
        assert context.verification_campaign_id is None
        mock_client.update_campaign.assert_not_called()

    def test_publish_before_step_three(self, wizard):
        assert wizard.publish().error.code == ErrorCode.INVALID_STEP

    def test_publish_while_busy(self, review_wizard, mock_client):
        review_wizard.uploads.is_uploading = True
        assert review_wizard.publish().error.code == ErrorCode.BUSY
        mock_client.update_campaign.assert_not_called()


class TestEndToEndWithMock:
    """Compose scenario from an empty form"""

    def test_compose_from_scratch(self, mock_client, context):
        wizard = CampaignWizard(mock_client, context)
        form = wizard.form
        form.update(title="Escuela Rural", description="Construcción de aulas")
        assert wizard.next().ok
        form.set("category", "educacion")
        assert wizard.next().ok
        form.set("goal_amount", "80000")
        assert wizard.next().ok
        form.set("media", [MediaItem("https://cdn.minka.bo/escuela.jpg")])
        assert wizard.next().ok
        assert wizard.next().ok  # la_paz by default
        form.set("end_date", date.today() + timedelta(days=30))
        assert wizard.next().ok
        form.set("story", "Queremos aulas dignas para nuestros niños.")

        result = wizard.next()

        assert result.ok
        assert wizard.step == 2
        assert mock_client.save_draft.call_args[0][0]["goalAmount"] == 80000
