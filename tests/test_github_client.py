"""Tests for GitHubService using pytest-httpx."""
import json
import logging

import httpx
import pytest
from pytest_httpx import HTTPXMock

from app.github_client import (
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubService,
    GitHubTimeoutError,
)

BASE_URL = "https://api.github.com"
ISSUES_URL = f"{BASE_URL}/repos/octo/repo/issues"


def _issues_page(page: int) -> str:
    return f"{ISSUES_URL}?state=all&per_page=100&page={page}"


@pytest.fixture
def service(settings) -> GitHubService:
    return GitHubService(settings)


class TestAuthentication:
    def test_token_from_settings(self, service) -> None:
        assert service.is_authenticated

    def test_clear_and_set(self, service) -> None:
        service.clear_authentication()
        assert not service.is_authenticated
        service.set_authentication("ghp_other")
        assert service.is_authenticated

    def test_get_issues_requires_token(self, service) -> None:
        service.clear_authentication()
        with pytest.raises(GitHubAuthenticationError, match="Personal Access Token"):
            service.get_issues("octo", "repo")

    def test_bearer_header_sent(self, service, httpx_mock: HTTPXMock, repository_node) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/repos/octo/repo", json=repository_node)
        service.get_repository("octo", "repo")
        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer ghp_test"
        assert request.headers["Accept"] == "application/vnd.github+json"


class TestGetIssues:
    def test_paginates_until_a_short_page(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(url=_issues_page(1), json=[issue_node(n) for n in range(1, 101)])
        httpx_mock.add_response(url=_issues_page(2), json=[issue_node(101)])

        issues = service.get_issues("octo", "repo")

        assert len(issues) == 101
        assert issues[-1].number == 101
        assert all(i.repository_full_name == "octo/repo" for i in issues)

    def test_maps_fields(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        node = issue_node(
            5,
            state="closed",
            closed_at="2024-01-03T00:00:00Z",
            assignees=[{"login": "bob"}],
            labels=[{"name": "bug", "color": "d73a4a", "default": True}],
            milestone={"title": "v1", "due_on": "2024-02-01T00:00:00Z", "created_at": "2023-12-01T00:00:00Z"},
            comments=4,
        )
        httpx_mock.add_response(url=_issues_page(1), json=[node, issue_node(6, pull_request={"url": "x"})])

        issue, pull_request = service.get_issues("octo", "repo")

        assert issue.is_closed
        assert issue.closed_at.isoformat() == "2024-01-03T00:00:00+00:00"
        assert [a.login for a in issue.assignees] == ["bob"]
        assert issue.labels[0].is_default
        assert issue.milestone.title == "v1"
        assert issue.comments == 4
        assert not issue.is_pull_request
        assert pull_request.is_pull_request

    def test_empty_repository(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=_issues_page(1), json=[])
        assert service.get_issues("octo", "repo") == []


class TestErrorMapping:
    def test_not_found(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=_issues_page(1), status_code=404, json={"message": "Not Found"})
        with pytest.raises(GitHubNotFoundError, match="octo/repo") as exc_info:
            service.get_issues("octo", "repo")
        assert exc_info.value.status_code == 404

    def test_unauthorized(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/repos/octo/repo", status_code=401, json={"message": "Bad credentials"})
        with pytest.raises(GitHubAuthenticationError, match="authentication failed"):
            service.get_repository("octo", "repo")

    def test_forbidden(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/repos/octo/repo", status_code=403, json={"message": "Forbidden"})
        with pytest.raises(GitHubPermissionError, match="Access forbidden"):
            service.get_repository("octo", "repo")

    def test_rate_limited(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}/repos/octo/repo",
            status_code=403,
            headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"},
            json={"message": "API rate limit exceeded"},
        )
        with pytest.raises(GitHubPermissionError, match="rate limit exceeded"):
            service.get_repository("octo", "repo")

    def test_server_error(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/repos/octo/repo", status_code=500, json={"message": "boom"})
        with pytest.raises(GitHubApiError, match="500: boom") as exc_info:
            service.get_repository("octo", "repo")
        assert exc_info.value.status_code == 500

    def test_timeout(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
        with pytest.raises(GitHubTimeoutError):
            service.get_repository("octo", "repo")

    def test_connection_error(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        with pytest.raises(GitHubConnectionError):
            service.get_repository("octo", "repo")


class TestIssueOperations:
    def test_invalid_number_rejected_without_request(self, service) -> None:
        with pytest.raises(ValueError, match="greater than zero"):
            service.get_issue("octo", "repo", 0)

    def test_create_requires_title(self, service) -> None:
        with pytest.raises(ValueError):
            service.create_issue("octo", "repo", "  ")

    def test_create(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(method="POST", url=ISSUES_URL, status_code=201, json=issue_node(12, title="New"))
        issue = service.create_issue("octo", "repo", "New", "Details")
        assert issue.number == 12
        assert json.loads(httpx_mock.get_request().content) == {"title": "New", "body": "Details"}

    def test_update_requires_a_change(self, service) -> None:
        with pytest.raises(ValueError, match="Nothing to update"):
            service.update_issue("octo", "repo", 3)

    def test_close_sends_state(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/3", json=issue_node(3, state="closed"))
        assert service.close_issue("octo", "repo", 3).is_closed
        assert json.loads(httpx_mock.get_request().content) == {"state": "closed"}

    def test_assign_replaces_assignees(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(
            method="PATCH", url=f"{ISSUES_URL}/3", json=issue_node(3, assignees=[{"login": "bob"}])
        )
        issue = service.assign_issue("octo", "repo", 3, ["bob"])
        assert [a.login for a in issue.assignees] == ["bob"]
        assert json.loads(httpx_mock.get_request().content) == {"assignees": ["bob"]}

    def test_agent_assignment(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(url=f"{ISSUES_URL}/3", json=issue_node(3, assignees=[{"login": "Copilot"}]))
        assert service.has_agent_assignment("octo", "repo", 3, ["copilot"])

    def test_agent_assignment_error_is_false(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{ISSUES_URL}/3", status_code=404, json={"message": "Not Found"})
        assert not service.has_agent_assignment("octo", "repo", 3, ["copilot"])


class TestBulkOperations:
    def test_partial_failure_is_reported_and_logged_once(
        self, service, httpx_mock: HTTPXMock, issue_node, caplog
    ) -> None:
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/1", json=issue_node(1, state="closed"))
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/2", json=issue_node(2, state="closed"))

        with caplog.at_level(logging.INFO, logger="app.github_client"):
            result = service.bulk_close("octo", "repo", [1, 0, 2])

        assert result.operation == "close"
        assert result.succeeded == [1, 2]
        assert list(result.failed) == [0]
        assert "greater than zero" in result.failed[0]

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "#0" in errors[0].getMessage()
        assert any("Succeeded: 2, Failed: 1" in r.getMessage() for r in caplog.records)

    def test_github_error_does_not_stop_the_batch(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/1", status_code=404, json={"message": "Not Found"})
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/2", json=issue_node(2))

        result = service.bulk_reopen("octo", "repo", [1, 2])

        assert result.succeeded == [2]
        assert result.failed == {1: "Issue #1 not found in 'octo/repo'."}

    def test_repeated_numbers_are_processed_once(
        self, service, httpx_mock: HTTPXMock, issue_node, caplog
    ) -> None:
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/3", json=issue_node(3, state="closed"))

        with caplog.at_level(logging.ERROR, logger="app.github_client"):
            result = service.bulk_close("octo", "repo", [0, 3, 0, -1, 3])

        assert result.succeeded == [3]
        assert list(result.failed) == [0, -1]
        assert result.total == 2 + 1
        assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == len(result.failed)
        assert not set(result.succeeded) & set(result.failed)

    def test_bulk_assign(self, service, httpx_mock: HTTPXMock, issue_node) -> None:
        httpx_mock.add_response(method="PATCH", url=f"{ISSUES_URL}/4", json=issue_node(4))
        result = service.bulk_assign("octo", "repo", [4], ["bob"])
        assert result.succeeded == [4]
        assert result.total == 1


class TestMetadata:
    def test_labels(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}/repos/octo/repo/labels?per_page=100&page=1",
            json=[{"id": 1, "name": "bug", "color": "d73a4a"}],
        )
        assert [label.name for label in service.get_labels("octo", "repo")] == ["bug"]

    def test_milestones_include_closed(self, service, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}/repos/octo/repo/milestones?state=all&per_page=100&page=1",
            json=[{"id": 1, "number": 1, "title": "v1", "state": "closed"}],
        )
        assert service.get_milestones("octo", "repo")[0].state == "closed"

    def test_search_repositories(self, service, httpx_mock: HTTPXMock, repository_node) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}/search/repositories?q=octo&per_page=100",
            json={"total_count": 1, "items": [repository_node]},
        )
        assert [r.full_name for r in service.search_repositories(" octo ")] == ["octo/repo"]

    def test_search_requires_query(self, service) -> None:
        with pytest.raises(ValueError):
            service.search_repositories("")
