import logging
from urllib.parse import quote

import requests

import upstream
from config import RENDER_API_URL
from models import DeployResult

logger = logging.getLogger(__name__)


class RenderClient:
    """Triggers deploys on Render. One call, no retries."""

    def __init__(self, api_key, api_url=RENDER_API_URL, timeout=20.0,
                 default_service_id=None, session=None):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.default_service_id = default_service_id
        self.session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    @classmethod
    def from_settings(cls, settings, session=None, service_id=None):
        settings.require_render(service_id)
        return cls(settings.render_api_key, settings.render_api_url,
                   settings.http_timeout, settings.render_service_id, session)

    def trigger_deploy(self, service_id=None):
        service_id = service_id or self.default_service_id
        url = f"{self.api_url}/services/{quote(service_id, safe='')}/deploys"
        data = upstream.call_json(self.session, "trigger_deploy", "POST", url,
                                  self._headers, self.timeout, json={})
        deploy_id = data.get("id") if isinstance(data, dict) else None
        logger.info("deploy %s triggered for %s", deploy_id, service_id)
        return DeployResult(deploy_id, service_id, data if isinstance(data, dict) else {})
