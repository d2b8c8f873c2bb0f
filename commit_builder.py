"""Multi-file commits through the GitHub git data API.

A commit is built as read head -> read base tree -> create tree -> create
commit -> fast-forward the ref. Only the last step is visible to anyone
else; if it is rejected the tree and commit stay behind as unreferenced
objects, which is harmless.
"""
import logging

from github_api import GitHubClient
from models import BASE64, CommitRequest, CommitResult
from upstream import Deadline
from validation import validate_request

logger = logging.getLogger(__name__)


class CommitBuilder:
    def __init__(self, client: GitHubClient, timeout=None):
        self.client = client
        self.timeout = timeout

    def build_and_push(self, request: CommitRequest, timeout=None) -> CommitResult:
        """Commit ``request.files`` on top of the branch head and publish it.

        Raises ValidationError before any remote call for bad input,
        BranchNotFoundError, ConcurrentUpdateError when the branch moved,
        UpstreamError for other host failures and DeadlineExceededError.
        """
        request = validate_request(request)
        deadline = Deadline(timeout if timeout is not None else self.timeout)
        repo, branch = request.repository, request.branch

        base_sha = self.client.get_branch_head(repo, branch, deadline)
        logger.debug("%s@%s: head %s", repo, branch, base_sha[:7])

        base_tree = self.client.get_commit_tree(repo, base_sha, deadline)

        entries = [self._tree_entry(repo, change, deadline) for change in request.files]
        tree_sha = self.client.create_tree(repo, base_tree, entries, deadline)

        commit_sha = self.client.create_commit(repo, tree_sha, [base_sha],
                                               request.message, deadline)
        logger.debug("%s: created commit %s (tree %s)", repo, commit_sha[:7], tree_sha[:7])

        try:
            self.client.update_branch(repo, branch, base_sha, commit_sha, deadline)
        except Exception:
            logger.warning("%s@%s: commit %s not published", repo, branch, commit_sha[:7])
            raise

        logger.info("%s@%s: %s -> %s (%d files)", repo, branch, base_sha[:7],
                    commit_sha[:7], len(request.files))
        return CommitResult(commit_sha, branch, base_sha, tree_sha)

    def _tree_entry(self, repo, change, deadline):
        # text goes inline so GitHub stores it byte for byte; binary needs a blob first
        if change.encoding == BASE64:
            sha = self.client.create_blob(repo, change.content, deadline)
            return {"path": change.path, "sha": sha}
        return {"path": change.path, "content": change.content}
