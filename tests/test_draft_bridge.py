"""
Draft persistence: preconditions, payload shape and campaign id reuse.
"""

from campaign_client import CollaboratorError
from campaign_form import CampaignFormState
from draft_bridge import DraftPersistenceBridge, build_draft_payload
from results import ErrorCode


class TestSaveDraftPreconditions:
    """Local preconditions short-circuit before any request"""

    def test_missing_required_fields(self, mock_client):
        bridge = DraftPersistenceBridge(mock_client)
        result = bridge.save_draft(CampaignFormState(title="Escuela Rural"))

        assert not result.ok
        assert result.error.code == ErrorCode.MISSING_REQUIRED_FIELD
        assert result.error.message == "Faltan campos requeridos en el formulario"
        assert result.error.fields == ["description", "category"]
        mock_client.save_draft.assert_not_called()

    def test_no_media(self, mock_client, filled_form):
        filled_form.set("media", [])
        result = DraftPersistenceBridge(mock_client).save_draft(filled_form)

        assert result.error.code == ErrorCode.NO_MEDIA
        assert result.error.message == "Debes subir al menos una imagen"
        mock_client.save_draft.assert_not_called()


class TestSaveDraft:
    """Successful and failed saves"""

    def test_first_save_returns_and_stores_campaign_id(self, mock_client, filled_form):
        bridge = DraftPersistenceBridge(mock_client)
        result = bridge.save_draft(filled_form)

        assert result.ok
        assert result.value == "camp-001"
        assert bridge.campaign_id == "camp-001"
        assert filled_form.campaign_id == "camp-001"
        assert "campaignId" not in mock_client.save_draft.call_args[0][0]

    def test_second_save_reuses_campaign_id(self, mock_client, filled_form):
        """A known id is sent so the service updates instead of creating"""
        bridge = DraftPersistenceBridge(mock_client)
        bridge.save_draft(filled_form)
        bridge.save_draft(filled_form)

        second_payload = mock_client.save_draft.call_args_list[1][0][0]
        assert second_payload["campaignId"] == "camp-001"
        assert bridge.campaign_id == "camp-001"

    def test_failure_keeps_form_untouched(self, mock_client, filled_form):
        mock_client.save_draft.side_effect = CollaboratorError("Campaign not found", 404)
        bridge = DraftPersistenceBridge(mock_client)
        result = bridge.save_draft(filled_form)

        assert result.error.code == ErrorCode.DRAFT_SAVE_FAILED
        assert result.error.message == "Campaign not found"
        assert filled_form.campaign_id is None
        assert bridge.campaign_id is None
        assert not bridge.is_submitting

    def test_failure_without_message_uses_generic_text(self, mock_client, filled_form):
        mock_client.save_draft.side_effect = CollaboratorError("")
        result = DraftPersistenceBridge(mock_client).save_draft(filled_form)
        assert result.error.message == "No se pudo guardar el borrador de la campaña"


class TestDraftPayload:
    """Serialized draft body"""

    def test_goal_amount_is_a_bare_number(self, filled_form):
        filled_form.set("goal_amount", "80.000")
        assert build_draft_payload(filled_form)["goalAmount"] == 80000

    def test_beneficiaries_description_falls_back_to_story(self, filled_form):
        payload = build_draft_payload(filled_form)
        assert payload["beneficiariesDescription"] == filled_form.story

        filled_form.set("beneficiaries_description", "Niños de la comunidad")
        assert build_draft_payload(filled_form)["beneficiariesDescription"] == "Niños de la comunidad"

    def test_legacy_youtube_url_mirrors_first_link(self, filled_form):
        assert build_draft_payload(filled_form)["youtubeUrl"] == ""

        filled_form.set("youtube_links", ["https://youtu.be/uno", "https://youtu.be/dos"])
        payload = build_draft_payload(filled_form)
        assert payload["youtubeUrls"] == ["https://youtu.be/uno", "https://youtu.be/dos"]
        assert payload["youtubeUrl"] == "https://youtu.be/uno"

    def test_media_and_dates_are_serialized(self, filled_form):
        payload = build_draft_payload(filled_form, "camp-9")
        assert payload["media"] == [{
            "mediaUrl": "https://cdn.minka.bo/campaign-images/escuela.jpg",
            "type": "image",
            "isPrimary": True,
            "orderIndex": 0,
        }]
        assert payload["endDate"] == filled_form.end_date.isoformat()
        assert payload["campaignId"] == "camp-9"


class TestUpdateCampaign:
    """Partial updates"""

    def test_missing_campaign_id(self, mock_client):
        result = DraftPersistenceBridge(mock_client).update_campaign({"recipientType": "tu_mismo"})

        assert result.error.code == ErrorCode.MISSING_CAMPAIGN_ID
        assert result.error.message == "No se encontró ID de campaña para actualizar"
        mock_client.update_campaign.assert_not_called()

    def test_uses_saved_campaign_id(self, mock_client, filled_form):
        bridge = DraftPersistenceBridge(mock_client)
        bridge.save_draft(filled_form)
        result = bridge.update_campaign({"recipientType": "tu_mismo"})

        assert result.ok
        mock_client.update_campaign.assert_called_once_with("camp-001", {"recipientType": "tu_mismo"})

    def test_failure_is_update_failed(self, mock_client):
        mock_client.update_campaign.side_effect = CollaboratorError("Goal amount cannot exceed 150000", 400)
        result = DraftPersistenceBridge(mock_client).update_campaign({"goalAmount": 200000}, "camp-001")

        assert result.error.code == ErrorCode.UPDATE_FAILED
        assert result.error.message == "Goal amount cannot exceed 150000"
