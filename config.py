import os
from dataclasses import dataclass

from errors import ConfigurationError

GITHUB_API_URL = "https://api.github.com"
RENDER_API_URL = "https://api.render.com/v1"


@dataclass(frozen=True)
class Settings:
    github_owner: str = None
    github_repo: str = None
    github_pat: str = None
    default_branch: str = "main"
    github_api_url: str = GITHUB_API_URL
    render_api_key: str = None
    render_service_id: str = None
    render_api_url: str = RENDER_API_URL
    http_timeout: float = 20.0
    commit_timeout: float = 60.0
    conflict_retries: int = 0
    port: int = 10000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        """Read settings once at startup. Blank values count as unset."""
        env = os.environ if environ is None else environ

        def get(name, default=None):
            value = env.get(name)
            if value is None or not value.strip():
                return default
            return value.strip()

        try:
            return cls(
                github_owner=get("GITHUB_OWNER"),
                github_repo=get("GITHUB_REPO"),
                github_pat=get("GITHUB_PAT"),
                default_branch=get("DEFAULT_BRANCH", "main"),
                github_api_url=get("GITHUB_API_URL", GITHUB_API_URL).rstrip("/"),
                render_api_key=get("RENDER_API_KEY"),
                render_service_id=get("RENDER_SERVICE_ID"),
                render_api_url=get("RENDER_API_URL", RENDER_API_URL).rstrip("/"),
                http_timeout=float(get("HTTP_TIMEOUT", 20)),
                commit_timeout=float(get("COMMIT_TIMEOUT", 60)),
                conflict_retries=int(get("COMMIT_CONFLICT_RETRIES", 0)),
                port=int(get("PORT", 10000)),
                log_level=get("LOG_LEVEL", "INFO").upper(),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid numeric setting: {e}") from e

    def require_github(self):
        missing = [
            name
            for name, value in (
                ("GITHUB_OWNER", self.github_owner),
                ("GITHUB_REPO", self.github_repo),
                ("GITHUB_PAT", self.github_pat),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"{'/'.join(missing)} not set")

    def require_render(self, service_id=None):
        if not self.render_api_key:
            raise ConfigurationError("RENDER_API_KEY not set")
        if not (service_id or self.render_service_id):
            raise ConfigurationError("RENDER_SERVICE_ID not set")
