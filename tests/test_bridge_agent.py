"""Tests for the HTTP routes of the bridge."""

import base64
from dataclasses import replace
from unittest.mock import Mock, patch

import pytest

from bridge_agent import create_app, status_for
from errors import (BranchNotFoundError, ConcurrentUpdateError, ConfigurationError,
                    DeadlineExceededError, UpstreamError, ValidationError)
from tests.fake_github import FakeResponse
from tools import BridgeTools


@pytest.fixture
def render_session():
    session = Mock()
    session.request.return_value = FakeResponse(201, {"id": "dep-1"})
    return session


@pytest.fixture
def app_client(settings, github, render_session):
    tools = BridgeTools(settings, github_session=github, render_session=render_session)
    app = create_app(settings, tools)
    app.testing = True
    return app.test_client()


def commit_body(**overrides):
    body = {"commitMessage": "update a", "files": [{"path": "a.txt", "content": "2"}]}
    body.update(overrides)
    return body


def test_index(app_client):
    response = app_client.get("/")
    assert response.status_code == 200
    assert b"MCP Bridge" in response.data


def test_health(app_client):
    assert app_client.get("/health").get_json() == {"ok": True}


def test_commit(app_client, github):
    response = app_client.post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 200
    data = response.get_json()
    assert data["ok"] is True
    assert data["branch"] == "main"
    assert data["commitSha"] == github.refs["main"]
    assert github.read_file(data["commitSha"], "a.txt") == b"2"


def test_commit_binary_file(app_client, github):
    payload = bytes(range(256))
    files = [{"path": "bin/all.bytes", "content": base64.b64encode(payload).decode(),
              "encoding": "base64"}]

    response = app_client.post("/mcp/git_commit_and_push", json=commit_body(files=files))

    assert response.status_code == 200
    assert github.read_file(response.get_json()["commitSha"], "bin/all.bytes") == payload


@pytest.mark.parametrize("body", [
    commit_body(files=[]),
    commit_body(commitMessage=""),
    commit_body(files=[{"path": "../x", "content": "1"}]),
    commit_body(files=[{"path": "a.txt", "content": "1"}, {"path": "./a.txt", "content": "2"}]),
])
def test_invalid_commit_is_400(app_client, github, body):
    response = app_client.post("/mcp/git_commit_and_push", json=body)

    assert response.status_code == 400
    data = response.get_json()
    assert data["ok"] is False
    assert data["errorType"] == "ValidationError"
    assert github.calls == []


def test_non_json_body_is_400(app_client):
    response = app_client.post("/mcp/git_commit_and_push", data="files=a.txt",
                               content_type="application/x-www-form-urlencoded")
    assert response.status_code == 400


def test_unknown_branch_is_404(app_client):
    response = app_client.post("/mcp/git_commit_and_push", json=commit_body(branch="ghost"))

    assert response.status_code == 404
    assert response.get_json()["errorType"] == "BranchNotFoundError"


def test_conflict_is_409(app_client, github):
    github.before("update_ref", lambda: github.seed_branch(
        "main", {"z.txt": b"z"}, parent=github.refs["main"]))

    response = app_client.post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 409
    assert response.get_json()["errorType"] == "ConcurrentUpdateError"


def test_conflict_retried_when_configured(settings, github):
    settings = replace(settings, conflict_retries=1)
    app = create_app(settings, BridgeTools(settings, github_session=github))
    github.before("update_ref", lambda: github.seed_branch(
        "main", {"z.txt": b"z"}, parent=github.refs["main"]))

    response = app.test_client().post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 200
    assert github.read_file(github.refs["main"], "z.txt") == b"z"


def test_upstream_failure_is_502(app_client, github):
    github.fail("create_commit", 500, "Internal Server Error")

    response = app_client.post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 502
    data = response.get_json()
    assert data["step"] == "create_commit"
    assert data["status"] == 500


def test_unexpected_success_body_is_502(app_client, github):
    github.fail("get_commit", 200, body="oops")

    response = app_client.post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 502
    data = response.get_json()
    assert data["step"] == "resolve_base_tree"
    assert data["errorType"] == "UpstreamError"


def test_missing_github_settings_is_400(settings, github):
    settings = replace(settings, github_repo=None)
    app = create_app(settings, BridgeTools(settings, github_session=github))

    response = app.test_client().post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 400
    assert "GITHUB_REPO" in response.get_json()["error"]


def test_unexpected_error_is_500(settings):
    tools = Mock()
    tools.git_commit_and_push.side_effect = KeyError("sha")
    app = create_app(settings, tools)

    with patch("bridge_agent.logger") as logger:
        response = app.test_client().post("/mcp/git_commit_and_push", json=commit_body())

    assert response.status_code == 500
    assert response.get_json() == {"ok": False, "error": "internal error"}
    logger.exception.assert_called_once()


def test_unknown_route_stays_404(app_client):
    assert app_client.get("/nope").status_code == 404


def test_render_deploy(app_client, render_session):
    response = app_client.post("/mcp/render_deploy")

    assert response.status_code == 200
    assert response.get_json()["deployId"] == "dep-1"
    assert render_session.request.call_args.args[1].endswith("/services/srv-123/deploys")


def test_render_deploy_failure_is_502(app_client, render_session):
    render_session.request.return_value = FakeResponse(404, {"message": "service not found"})

    response = app_client.post("/mcp/render_deploy", json={"serviceId": "srv-missing"})

    assert response.status_code == 502
    assert "service not found" in response.get_json()["error"]


@pytest.mark.parametrize("error,status", [
    (ValidationError("x"), 400),
    (ConfigurationError("x"), 400),
    (BranchNotFoundError("b"), 404),
    (ConcurrentUpdateError("b", "a" * 40), 409),
    (UpstreamError("create_tree", 500, "x"), 502),
    (DeadlineExceededError("update_ref"), 504),
    (RuntimeError("x"), 500),
])
def test_status_for(error, status):
    assert status_for(error) == status
