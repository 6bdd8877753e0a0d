"""
Dashboard editing of an existing campaign, against the real service.
"""

import pytest

from campaign_client import CollaboratorError
from campaign_editor import CampaignEditor
from conftest import JPEG_BYTES
from draft_bridge import DraftPersistenceBridge
from media_upload import LocalFile
from results import ErrorCode


@pytest.fixture
def campaign_id(service_client, filled_form):
    result = DraftPersistenceBridge(service_client).save_draft(filled_form)
    assert result.ok
    return result.value


@pytest.fixture
def editor(service_client, campaign_id, context):
    editor = CampaignEditor(service_client, campaign_id, context)
    assert editor.load().ok
    return editor


class TestLoadAndEdit:

    def test_load(self, editor):
        assert editor.campaign["title"] == "Escuela Rural"
        assert editor.is_draft
        assert editor.can_delete
        assert not editor.is_modified

    def test_load_missing_campaign(self, service_client, context):
        editor = CampaignEditor(service_client, "no-existe", context)
        assert editor.load().error.code == ErrorCode.LOOKUP_FAILED

    def test_save_sends_local_edits(self, editor, service_client, campaign_id, context):
        editor.set("title", "Escuela Rural Achacachi")
        editor.set("goal_amount", "95.000")
        assert editor.is_modified

        assert editor.save().ok

        campaign = service_client.get_campaign(campaign_id)
        assert campaign["title"] == "Escuela Rural Achacachi"
        assert campaign["goal_amount"] == 95000
        assert not editor.is_modified
        assert context.notifier.last.title == "Cambios guardados"

    def test_goal_is_clamped(self, editor):
        editor.set("goal_amount", "200.000")
        assert editor.campaign["goal_amount"] == 150000

    def test_location_change_clears_province(self, editor, service_client, campaign_id):
        editor.set("location", "santa_cruz")
        assert editor.campaign["province"] is None

        assert editor.save().ok
        assert service_client.get_campaign(campaign_id)["province"] is None

    def test_uneditable_field(self, editor):
        assert editor.set("status", "active").error.code == ErrorCode.VALIDATION_FAILED

    def test_youtube_links(self, editor, service_client, campaign_id, context):
        assert not editor.add_youtube_link("https://vimeo.com/1").ok
        assert context.notifier.last.title == "Enlace inválido"

        editor.add_youtube_link("https://youtu.be/uno")
        editor.add_youtube_link("https://youtu.be/dos")
        editor.remove_youtube_link(0)
        editor.save()

        campaign = service_client.get_campaign(campaign_id)
        assert campaign["youtube_urls"] == ["https://youtu.be/dos"]
        assert campaign["youtube_url"] == "https://youtu.be/dos"

    def test_cancel_restores_original(self, editor):
        editor.set("title", "Otro título")
        editor.cancel()
        assert editor.campaign["title"] == "Escuela Rural"
        assert not editor.is_modified

    def test_save_failure(self, editor, mock_client, context):
        editor.client = mock_client
        mock_client.update_campaign.side_effect = CollaboratorError("Failed to update campaign", 500)

        result = editor.save()

        assert result.error.code == ErrorCode.UPDATE_FAILED
        assert not editor.is_saving
        assert context.notifier.last.title == "Error"


class TestImages:

    def test_add_set_primary_and_delete(self, editor):
        result = editor.add_image(LocalFile("aula.jpg", JPEG_BYTES, "image/jpeg"))
        assert result.ok
        media = editor.campaign["media"]
        assert len(media) == 2
        assert [m["is_primary"] for m in media] == [True, False]

        assert editor.set_primary_image(media[1]["id"]).ok
        assert [m["is_primary"] for m in editor.campaign["media"]] == [False, True]

        assert editor.delete_image(editor.campaign["media"][1]["id"]).ok
        remaining = editor.campaign["media"]
        assert len(remaining) == 1
        assert remaining[0]["is_primary"] is True

    def test_last_image_cannot_be_deleted(self, editor, service_client, campaign_id):
        media_id = editor.campaign["media"][0]["id"]
        assert editor.delete_image(media_id).error.code == ErrorCode.NO_MEDIA
        assert len(service_client.get_campaign(campaign_id)["media"]) == 1

    def test_invalid_file_is_not_uploaded(self, editor):
        result = editor.add_image(LocalFile("clip.gif", b"GIF89a", "image/gif"))
        assert result.error.code == ErrorCode.UNSUPPORTED_FILE_TYPE
        assert len(editor.campaign["media"]) == 1


class TestLifecycle:

    def test_publish_draft(self, editor, service_client, campaign_id):
        assert editor.publish().ok
        campaign = service_client.get_campaign(campaign_id)
        assert campaign["status"] == "active"
        assert campaign["verification_requested"] is False
        assert not editor.publish().ok

    def test_delete(self, editor, service_client, campaign_id, context):
        assert editor.delete().ok
        assert context.location == "/dashboard/campaigns"
        with pytest.raises(CollaboratorError) as error:
            service_client.get_campaign(campaign_id)
        assert error.value.status_code == 404
