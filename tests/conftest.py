import pytest

from commit_builder import CommitBuilder
from config import Settings
from github_api import GitHubClient
from models import CommitRequest, FileChange, Repository
from tests.fake_github import API_URL, FakeGitHub

REPO = Repository("acme", "widgets")


@pytest.fixture
def github(tmp_path):
    fake = FakeGitHub(tmp_path / "origin", REPO.owner, REPO.name)
    fake.seed_branch("main", {"a.txt": b"1", "docs/readme.md": b"# widgets\n"})
    return fake


@pytest.fixture
def client(github):
    return GitHubClient("test-token", API_URL, timeout=5, session=github)


@pytest.fixture
def builder(client):
    return CommitBuilder(client)


@pytest.fixture
def settings():
    return Settings(
        github_owner=REPO.owner,
        github_repo=REPO.name,
        github_pat="test-token",
        github_api_url=API_URL,
        render_api_key="rnd_key",
        render_service_id="srv-123",
        render_api_url="https://api.render.test/v1",
        http_timeout=5,
        commit_timeout=30,
    )


def make_request(files, branch="main", message="m"):
    changes = [f if isinstance(f, FileChange) else FileChange(*f) for f in files]
    return CommitRequest(REPO, branch, message, changes)
