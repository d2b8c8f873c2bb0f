"""Tool handlers shared by the HTTP routes and the MCP server."""
import logging
import time
from datetime import datetime, timezone

from commit_builder import CommitBuilder
from conflict_retry import retry_on_conflict
from errors import BridgeError, ValidationError
from github_api import GitHubClient
from models import CommitRequest, Repository
from render_api import RenderClient

logger = logging.getLogger(__name__)


class BridgeTools:
    """Builds clients from settings on demand and runs one tool call each.

    Sessions can be injected so tests can stand in for GitHub and Render.
    """

    def __init__(self, settings, github_session=None, render_session=None, clock=time.monotonic):
        self.settings = settings
        self.github_session = github_session
        self.render_session = render_session
        self._clock = clock
        self._started = clock()

    def health_check(self):
        return {
            "status": "ok",
            "uptimeSeconds": round(self._clock() - self._started, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def commit_builder(self):
        client = GitHubClient.from_settings(self.settings, self.github_session)
        return CommitBuilder(client, timeout=self.settings.commit_timeout)

    def git_commit_and_push(self, payload):
        """Commit the files in ``payload`` and return ``{ok, commitSha, branch}``."""
        s = self.settings
        s.require_github()
        request = CommitRequest.from_payload(
            payload, Repository(s.github_owner, s.github_repo), s.default_branch)
        builder = self.commit_builder()
        result = retry_on_conflict(lambda: builder.build_and_push(request),
                                   s.conflict_retries)
        return result.to_dict()

    def render_deploy(self, payload=None):
        payload = payload or {}
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")
        service_id = payload.get("serviceId")
        if service_id is not None and not isinstance(service_id, str):
            raise ValidationError("serviceId must be a string")
        client = RenderClient.from_settings(self.settings, self.render_session, service_id)
        return client.trigger_deploy(service_id).to_dict()


def as_result(func, *args):
    """Call a tool and turn any failure into ``{ok: false, ...}``."""
    try:
        return func(*args)
    except BridgeError as e:
        logger.info("tool %s failed: %s", func.__name__, e.message)
        return e.to_dict()
    except Exception:
        logger.exception("tool %s crashed", func.__name__)
        return {"ok": False, "error": "internal error"}
