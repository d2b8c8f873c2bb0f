from dataclasses import dataclass, field
from typing import List, Optional

from errors import ValidationError

UTF8 = "utf8"
BASE64 = "base64"
ENCODINGS = {"utf8": UTF8, "utf-8": UTF8, "base64": BASE64}


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str

    def __str__(self):
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class FileChange:
    path: str
    content: str
    encoding: str = UTF8


@dataclass(frozen=True)
class CommitRequest:
    repository: Repository
    branch: str
    message: str
    files: List[FileChange] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload, repository, default_branch):
        """Unpack the JSON body of a commit tool call.

        Only shapes are checked here; path rules live in validation.py.
        """
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")

        branch = payload.get("branch") or default_branch
        if not isinstance(branch, str):
            raise ValidationError("branch must be a string")

        message = payload.get("commitMessage", payload.get("message"))
        if message is not None and not isinstance(message, str):
            raise ValidationError("commitMessage must be a string")

        files = payload.get("files")
        if not isinstance(files, list):
            raise ValidationError("files[] required")

        changes = []
        for i, item in enumerate(files):
            if not isinstance(item, dict):
                raise ValidationError(f"files[{i}] must be an object")
            path = item.get("path")
            content = item.get("content")
            encoding = item.get("encoding") or UTF8
            if not isinstance(path, str):
                raise ValidationError(f"files[{i}].path must be a string")
            if not isinstance(content, str):
                raise ValidationError(f"files[{i}].content must be a string")
            if not isinstance(encoding, str) or encoding.lower() not in ENCODINGS:
                raise ValidationError(
                    f"files[{i}].encoding must be one of utf8, base64"
                )
            changes.append(FileChange(path, content, ENCODINGS[encoding.lower()]))

        return cls(repository, branch, message or "", changes)


@dataclass(frozen=True)
class CommitResult:
    commit_sha: str
    branch: str
    base_sha: Optional[str] = None
    tree_sha: Optional[str] = None

    def to_dict(self):
        return {"ok": True, "commitSha": self.commit_sha, "branch": self.branch}


@dataclass(frozen=True)
class DeployResult:
    deploy_id: Optional[str]
    service_id: str
    payload: dict = field(default_factory=dict)

    def to_dict(self):
        return {"ok": True, "deployId": self.deploy_id, "deploy": self.payload}
