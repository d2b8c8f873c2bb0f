"""Error classes for the bridge.

Every failure the bridge can report is one of these, so callers can tell a
bad request from a lost race from an unhappy upstream without parsing text.
"""


class BridgeError(Exception):
    """Base class for classified bridge failures."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"ok": False, "error": self.message, "errorType": type(self).__name__}


class ConfigurationError(BridgeError):
    """Required settings (owner, repo, tokens) are missing."""


class ValidationError(BridgeError):
    """The request is malformed. Raised before any remote call."""


class BranchNotFoundError(BridgeError):
    def __init__(self, branch):
        super().__init__(f"branch '{branch}' not found")
        self.branch = branch


class ConcurrentUpdateError(BridgeError):
    """The branch moved after we read it; the new commit was not published."""

    def __init__(self, branch, base_sha, commit_sha=None):
        super().__init__(
            f"branch '{branch}' moved since {base_sha[:7]}; commit was not applied"
        )
        self.branch = branch
        self.base_sha = base_sha
        self.commit_sha = commit_sha


class UpstreamError(BridgeError):
    """A host API call failed. ``status`` is None for transport failures."""

    def __init__(self, step, status, detail):
        label = status if status is not None else "no response"
        super().__init__(f"{step} failed ({label}): {detail}")
        self.step = step
        self.status = status
        self.detail = detail

    def to_dict(self):
        data = super().to_dict()
        data.update(step=self.step, status=self.status)
        return data


class DeadlineExceededError(BridgeError, TimeoutError):
    """The overall deadline ran out.

    If ``step`` is ``update_ref`` the outcome is unknown: the ref may or may
    not have moved.
    """

    def __init__(self, step):
        super().__init__(f"deadline exceeded during {step}")
        self.step = step

    def to_dict(self):
        data = super().to_dict()
        data["step"] = self.step
        return data
