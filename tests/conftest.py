"""
Shared fixtures: an in-memory campaign service, an authenticated organizer
and lifecycle clients wired either to the real service or to a mock.
"""

import os
import tempfile

# Settings are read once, so the environment is prepared before any app import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="minka-uploads-")
os.environ["PUBLIC_MEDIA_BASE_URL"] = "http://testserver/media"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "minka-test-secret-key-with-enough-length"

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app import app
from auth_middleware import create_organizer_token
from campaign_client import CampaignClient
from campaign_form import CampaignFormState
from database import SessionLocal, db_manager
from media import MediaItem
from models import LegalEntity, Profile, Region
from wizard_context import WizardContext

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 256
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 256


@pytest.fixture
def db_session():
    """Fresh tables for every test"""
    db_manager.init_database()
    session = SessionLocal()
    yield session
    session.close()
    db_manager.drop_database()


@pytest.fixture
def organizer(db_session):
    profile = Profile(email="ana.quispe@minka.bo", name="Ana Quispe", location="La Paz")
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def other_organizer(db_session):
    profile = Profile(email="carlos.mamani@minka.bo", name="Carlos Mamani")
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def auth_headers(organizer):
    return {"Authorization": f"Bearer {create_organizer_token(organizer)}"}


@pytest.fixture
def other_auth_headers(other_organizer):
    return {"Authorization": f"Bearer {create_organizer_token(other_organizer)}"}


@pytest.fixture
def legal_entities(db_session):
    entities = [
        LegalEntity(name="Fundación Pro Bolivia", tax_id="1020304050", entity_type="Fundación",
                    department=Region.LA_PAZ, city="La Paz"),
        LegalEntity(name="Asociación Amigos del Amboró", tax_id="2030405060", entity_type="Asociación",
                    department=Region.SANTA_CRUZ, city="Santa Cruz de la Sierra"),
        LegalEntity(name="ONG Inactiva", tax_id="9999999999", is_active=False),
    ]
    db_session.add_all(entities)
    db_session.commit()
    for entity in entities:
        db_session.refresh(entity)
    return entities


@pytest.fixture
def test_client(db_session):
    """FastAPI TestClient against the in-memory service"""
    return TestClient(app)


@pytest.fixture
def service_client(test_client, organizer):
    """Lifecycle client talking to the real service through the TestClient"""
    return CampaignClient(
        base_url="http://testserver",
        access_token=create_organizer_token(organizer),
        session=test_client,
    )


@pytest.fixture
def mock_client():
    """Lifecycle client double; every call is recorded"""
    client = MagicMock(spec=CampaignClient)
    client.upload_file.return_value = {"url": "https://cdn.minka.bo/campaign-images/foto.jpg", "type": "image"}
    client.save_draft.return_value = "camp-001"
    client.update_campaign.return_value = {"id": "camp-001", "status": "draft"}
    client.fetch_legal_entities.return_value = []
    return client


@pytest.fixture
def context():
    return WizardContext()


@pytest.fixture
def filled_form():
    """A form that passes every compose sub-step"""
    form = CampaignFormState()
    form.update(
        title="Escuela Rural",
        description="Construcción de aulas",
        category="educacion",
        goal_amount="80000",
        location="la_paz",
        province="omasuyos",
        end_date=date.today() + timedelta(days=45),
        story="Queremos construir dos aulas nuevas para la escuela de la comunidad.",
        media=[MediaItem(media_url="https://cdn.minka.bo/campaign-images/escuela.jpg")],
    )
    return form
