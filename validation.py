"""Checks a CommitRequest before anything is sent to GitHub."""
import base64
import binascii
import posixpath

from errors import ValidationError
from models import BASE64, CommitRequest, FileChange


def normalize_path(path):
    """Return the canonical repository-relative form of ``path``.

    ``./a.txt``, ``a//b`` and ``a/./b`` collapse; ``..`` segments, absolute
    paths and directory-only paths are rejected.
    """
    if not path or not path.strip():
        raise ValidationError("file path must not be empty")
    if "\x00" in path:
        raise ValidationError(f"file path contains a NUL byte: {path!r}")
    if path.startswith("/"):
        raise ValidationError(f"file path must be relative: {path}")
    if path.endswith("/"):
        raise ValidationError(f"file path names a directory: {path}")

    segments = path.split("/")
    if ".." in segments:
        raise ValidationError(f"file path must not contain '..': {path}")

    normalized = posixpath.normpath(path)
    if normalized in (".", ""):
        raise ValidationError(f"file path must name a file: {path}")
    if ".git" in normalized.split("/"):
        raise ValidationError(f"file path must not touch .git: {path}")
    return normalized


def parent_dirs(path):
    """``a/b/c.txt`` -> ``["a", "a/b"]``."""
    segments = path.split("/")[:-1]
    return ["/".join(segments[:i]) for i in range(1, len(segments) + 1)]


def decode_base64(content, path):
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"invalid base64 content for {path}: {e}") from e


def validate_request(request: CommitRequest) -> CommitRequest:
    """Return a copy of ``request`` with normalised paths, or raise ValidationError."""
    if not request.message or not request.message.strip():
        raise ValidationError("commitMessage required")
    if not request.branch or not request.branch.strip():
        raise ValidationError("branch must not be empty")
    if not request.files:
        raise ValidationError("files[] required")

    seen = {}
    dirs = set()
    files = []
    for change in request.files:
        path = normalize_path(change.path)
        if path in seen:
            raise ValidationError(
                f"duplicate file path: {change.path!r} and {seen[path]!r} both name {path}"
            )
        if path in dirs:
            raise ValidationError(f"file path is also used as a directory: {path}")
        parents = parent_dirs(path)
        for parent in parents:
            if parent in seen:
                raise ValidationError(
                    f"{path} would put a file under {parent}, which is itself a file"
                )
        dirs.update(parents)
        seen[path] = change.path
        if change.encoding == BASE64:
            decode_base64(change.content, change.path)
        files.append(FileChange(path, change.content, change.encoding))

    return CommitRequest(request.repository, request.branch.strip(), request.message, files)
