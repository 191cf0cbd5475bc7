"""Shared test fixtures."""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.dependencies import reset_services
from app.models import GitHubIssue, GitHubLabel, GitHubMilestone, GitHubUser
from main import app


def _dt(day: int, month: int = 1) -> datetime:
    return datetime(2024, month, day, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point every service at a fresh data directory and rebuild the singletons."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GITHUB_TOKEN", "")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("MCP_REQUIRE_AUTH", "true")
    get_settings.cache_clear()
    reset_services()
    yield
    get_settings.cache_clear()
    reset_services()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        github_token="ghp_test",
        jwt_secret_key="test-secret-key",
    )


@pytest.fixture
def with_github_token(monkeypatch):
    """Configure a PAT through the environment for the service singletons."""
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    get_settings.cache_clear()
    reset_services()


@pytest.fixture
def make_issue():
    def _make(number: int, **overrides) -> GitHubIssue:
        data = {
            "id": 1000 + number,
            "number": number,
            "title": f"Issue {number}",
            "state": "open",
            "html_url": f"https://github.com/octo/repo/issues/{number}",
            "created_at": _dt(1),
            "updated_at": _dt(1),
            "repository_full_name": "octo/repo",
        }
        data.update(overrides)
        return GitHubIssue(**data)
    return _make


@pytest.fixture
def sample_issues(make_issue):
    return [
        make_issue(
            1,
            title="Login crash",
            body="Stack trace attached",
            user=GitHubUser(login="alice"),
            assignees=[GitHubUser(login="bob")],
            labels=[GitHubLabel(name="bug")],
            milestone=GitHubMilestone(title="v1"),
            created_at=_dt(1),
            updated_at=_dt(5),
            comments=3,
        ),
        make_issue(
            2,
            title="Add dark mode",
            user=GitHubUser(login="carol"),
            labels=[GitHubLabel(name="enhancement")],
            created_at=_dt(2),
            updated_at=_dt(3),
            comments=0,
        ),
        make_issue(
            3,
            title="Crash on logout",
            state="closed",
            user=GitHubUser(login="bob"),
            assignees=[GitHubUser(login="alice")],
            labels=[GitHubLabel(name="bug"), GitHubLabel(name="ui")],
            created_at=_dt(3),
            updated_at=_dt(4),
            closed_at=_dt(4),
            comments=5,
        ),
        make_issue(
            4,
            title="docs typo",
            state="closed",
            user=GitHubUser(login="dave"),
            created_at=_dt(10),
            updated_at=_dt(1, month=2),
            closed_at=_dt(1, month=2),
            comments=3,
            repository_full_name="octo/docs",
        ),
    ]


@pytest.fixture
def issue_node():
    """Raw GitHub REST issue payload."""
    def _node(number: int, **overrides) -> dict:
        node = {
            "id": 5000 + number,
            "number": number,
            "title": f"Issue {number}",
            "body": "",
            "state": "open",
            "html_url": f"https://github.com/octo/repo/issues/{number}",
            "created_at": "2024-01-01T12:00:00Z",
            "updated_at": "2024-01-02T12:00:00Z",
            "closed_at": None,
            "user": {"id": 1, "login": "alice"},
            "assignees": [],
            "labels": [],
            "milestone": None,
            "comments": 0,
        }
        node.update(overrides)
        return node
    return _node


@pytest.fixture
def repository_node():
    return {
        "id": 42,
        "name": "repo",
        "full_name": "octo/repo",
        "description": "Sample repository",
        "private": False,
        "html_url": "https://github.com/octo/repo",
        "stargazers_count": 7,
        "forks_count": 1,
        "open_issues_count": 3,
        "language": "Python",
        "created_at": "2023-06-01T08:00:00Z",
        "updated_at": "2024-01-01T08:00:00Z",
        "owner": {"id": 9, "login": "octo"},
    }


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    response = client.post(
        "/api/auth/login",
        json={"userId": "user-1", "email": "user@example.com", "roles": ["admin"]},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
