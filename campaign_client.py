"""
Campaign Service Client for the Minka Platform
HTTP client used by the campaign wizard to reach the campaign service
"""

import logging
import requests
from typing import Dict, Any, List, Optional

from config import get_settings

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "No se pudo completar la solicitud. Inténtalo de nuevo."
CONNECTION_ERROR_MESSAGE = "No se pudo conectar con el servidor. Revisa tu conexión e inténtalo de nuevo."


class CollaboratorError(Exception):
    """Raised when the campaign service rejects a request or cannot be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CampaignClient:
    """
    Client for the campaign service REST endpoints

    session may be a requests.Session or any object with the same
    post/patch/get/delete signature (a FastAPI TestClient in tests).
    """

    def __init__(self, base_url: Optional[str] = None, access_token: Optional[str] = None,
                 session=None, timeout: Optional[int] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.api_timeout
        self.session = session or requests.Session()

        self.headers = {}
        if access_token:
            self.headers['Authorization'] = f"Bearer {access_token}"

        logger.info(f"CampaignClient initialized (base_url: {self.base_url})")

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = getattr(self.session, method)(
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"{method.upper()} {path} failed: {e}")
            raise CollaboratorError(CONNECTION_ERROR_MESSAGE)

        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= response.status_code < 300:
            message = _error_message(body)
            logger.error(f"{method.upper()} {path} returned {response.status_code}: {message}")
            raise CollaboratorError(message or GENERIC_ERROR_MESSAGE, response.status_code)

        return body

    # Campaigns

    def save_draft(self, payload: Dict[str, Any]) -> str:
        """Create or update a draft and return its campaign id"""
        body = self._request("post", "/api/campaign/draft", json=payload)
        campaign_id = (body or {}).get("campaignId")
        if not campaign_id:
            raise CollaboratorError("La respuesta del servidor no incluye el ID de la campaña")
        return campaign_id

    def update_campaign(self, campaign_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        body = self._request("patch", f"/api/campaign/{campaign_id}", json=fields)
        return (body or {}).get("campaign") or {}

    def get_campaign(self, campaign_id: str) -> Dict[str, Any]:
        return self._request("get", f"/api/campaign/{campaign_id}")

    def delete_campaign(self, campaign_id: str):
        self._request("delete", f"/api/campaign/{campaign_id}")

    # Media

    def upload_file(self, filename: str, content: bytes, content_type: str) -> Dict[str, Any]:
        """Upload a file to the object store; returns {url, type}"""
        body = self._request("post", "/api/upload", files={"file": (filename, content, content_type)})
        if not body or not body.get("success") or not body.get("url"):
            raise CollaboratorError(_error_message(body) or "Error al subir el archivo")
        return {"url": body["url"], "type": body.get("type", "image")}

    def add_media(self, campaign_id: str, media_url: str, media_type: str = "image",
                  is_primary: bool = False) -> List[Dict[str, Any]]:
        body = self._request("post", f"/api/campaign/{campaign_id}/media", json={
            "mediaUrl": media_url,
            "type": media_type,
            "isPrimary": is_primary,
        })
        return body.get("media", [])

    def set_primary_media(self, campaign_id: str, media_id: str) -> List[Dict[str, Any]]:
        body = self._request("patch", f"/api/campaign/{campaign_id}/media", json={
            "action": "set_primary",
            "mediaId": media_id,
        })
        return body.get("media", [])

    def delete_media(self, campaign_id: str, media_id: str) -> List[Dict[str, Any]]:
        body = self._request("delete", f"/api/campaign/{campaign_id}/media/{media_id}")
        return body.get("media", [])

    # Lookups

    def fetch_legal_entities(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else None
        body = self._request("get", "/api/legal-entities", params=params)
        return body if isinstance(body, list) else []


def _error_message(body: Any) -> Optional[str]:
    """Pull the service-provided message out of an error body"""
    if not isinstance(body, dict):
        return None
    for key in ("error", "detail", "message"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None
