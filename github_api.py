import logging
from urllib.parse import quote

import requests

import upstream
from config import GITHUB_API_URL
from errors import BranchNotFoundError, ConcurrentUpdateError

logger = logging.getLogger(__name__)

FILE_MODE = "100644"


class GitHubClient:
    """Git data API calls against one GitHub installation.

    Each method is a single remote call. Failures come back classified;
    nothing here retries.
    """

    def __init__(self, token, api_url=GITHUB_API_URL, timeout=20.0, session=None):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @classmethod
    def from_settings(cls, settings, session=None):
        settings.require_github()
        return cls(settings.github_pat, settings.github_api_url,
                   settings.http_timeout, session)

    def _url(self, repository, path):
        return f"{self.api_url}/repos/{repository.owner}/{repository.name}/git/{path}"

    def _call(self, step, method, url, deadline, json=None):
        return upstream.call(self.session, step, method, url, self._headers,
                             self.timeout, deadline, json)

    def _call_ok(self, step, method, url, deadline, json=None):
        return upstream.call_ok(self.session, step, method, url, self._headers,
                                self.timeout, deadline, json)

    def get_branch_head(self, repository, branch, deadline=None):
        # singular "ref" matches exactly; "refs" would prefix-match
        url = self._url(repository, f"ref/heads/{quote(branch)}")
        resp = self._call("resolve_head", "GET", url, deadline)
        if resp.status == 404 or (resp.status == 409 and "empty" in resp.message.lower()):
            raise BranchNotFoundError(branch)
        if resp.status != 200:
            upstream.raise_upstream("resolve_head", resp)
        return upstream.pluck("resolve_head", resp, "object", "sha")

    def get_commit_tree(self, repository, commit_sha, deadline=None):
        resp = self._call_ok("resolve_base_tree", "GET",
                             self._url(repository, f"commits/{commit_sha}"), deadline)
        return upstream.pluck("resolve_base_tree", resp, "tree", "sha")

    def create_blob(self, repository, content_b64, deadline=None):
        resp = self._call_ok("create_tree", "POST", self._url(repository, "blobs"),
                             deadline, json={"content": content_b64, "encoding": "base64"})
        return upstream.pluck("create_tree", resp, "sha")

    def create_tree(self, repository, base_tree, entries, deadline=None):
        """``entries`` are dicts with ``path`` and either ``content`` or ``sha``."""
        tree = [dict(entry, mode=FILE_MODE, type="blob") for entry in entries]
        resp = self._call_ok("create_tree", "POST", self._url(repository, "trees"),
                             deadline, json={"base_tree": base_tree, "tree": tree})
        return upstream.pluck("create_tree", resp, "sha")

    def create_commit(self, repository, tree_sha, parents, message, deadline=None):
        resp = self._call_ok("create_commit", "POST", self._url(repository, "commits"),
                             deadline, json={"message": message, "tree": tree_sha,
                                             "parents": list(parents)})
        return upstream.pluck("create_commit", resp, "sha")

    def update_branch(self, repository, branch, base_sha, new_sha, deadline=None):
        """Move ``branch`` to ``new_sha`` as a fast-forward, never forced.

        GitHub only checks that the move is a fast-forward; it takes no
        expected old SHA. ``base_sha`` is the head ``new_sha`` was built on and
        is reported in ConcurrentUpdateError. A ref reset to an ancestor of
        ``base_sha`` in the meantime is not detected.
        """
        url = self._url(repository, f"refs/heads/{quote(branch)}")
        resp = self._call("update_ref", "PATCH", url, deadline,
                          json={"sha": new_sha, "force": False})
        if resp.status == 200:
            return
        message = resp.message.lower()
        if resp.status == 422 and "fast forward" in message.replace("-", " "):
            logger.info("fast-forward of %s to %s rejected", branch, new_sha[:7])
            raise ConcurrentUpdateError(branch, base_sha, new_sha)
        if resp.status == 404 or (resp.status == 422 and "does not exist" in message):
            raise BranchNotFoundError(branch)
        upstream.raise_upstream("update_ref", resp)
