"""
GitHub API client: repositories, issues, labels, milestones and assignees.
A thin httpx wrapper over the GitHub REST API that maps HTTP failures to
exceptions carrying user-facing messages.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from app.config import Settings, get_settings
from app.date_utils import parse_github_datetime
from app.logger import log_bulk_summary
from app.models import (
    BulkOperationResult,
    GitHubIssue,
    GitHubLabel,
    GitHubMilestone,
    GitHubRepository,
    GitHubUser,
)

logger = logging.getLogger(__name__)

PER_PAGE = 100


# ── Errors ────────────────────────────────────────────────────────────────


class GitHubApiError(RuntimeError):
    """Base error for GitHub calls; ``str(exc)`` is safe to show to users."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubAuthenticationError(GitHubApiError):
    pass


class GitHubPermissionError(GitHubAuthenticationError):
    pass


class GitHubNotFoundError(GitHubApiError):
    pass


class GitHubTimeoutError(GitHubApiError):
    pass


class GitHubConnectionError(GitHubApiError):
    pass


# ── Mapping helpers ───────────────────────────────────────────────────────


def _map_user(node: Optional[Dict[str, Any]]) -> GitHubUser:
    node = node or {}
    return GitHubUser(
        id=node.get("id") or 0,
        login=node.get("login") or "",
        avatar_url=node.get("avatar_url") or "",
        html_url=node.get("html_url") or "",
        type=node.get("type") or "User",
    )


def _map_label(node: Dict[str, Any]) -> GitHubLabel:
    return GitHubLabel(
        id=node.get("id") or 0,
        name=node.get("name") or "",
        color=node.get("color") or "",
        description=node.get("description") or "",
        is_default=bool(node.get("default", False)),
    )


def _map_milestone(node: Dict[str, Any]) -> GitHubMilestone:
    created_at = parse_github_datetime(node.get("created_at"))
    updated_at = parse_github_datetime(node.get("updated_at")) or created_at
    milestone = GitHubMilestone(
        id=node.get("id") or 0,
        number=node.get("number") or 0,
        title=node.get("title") or "",
        description=node.get("description") or "",
        state=node.get("state") or "open",
        due_on=parse_github_datetime(node.get("due_on")),
    )
    if created_at:
        milestone.created_at = created_at
    if updated_at:
        milestone.updated_at = updated_at
    return milestone


def _map_repository(node: Dict[str, Any]) -> GitHubRepository:
    created_at = parse_github_datetime(node.get("created_at"))
    updated_at = parse_github_datetime(node.get("updated_at")) or created_at
    repository = GitHubRepository(
        id=node["id"],
        name=node.get("name") or "",
        full_name=node.get("full_name") or "",
        description=node.get("description") or "",
        private=bool(node.get("private", False)),
        html_url=node.get("html_url") or "",
        stargazers_count=node.get("stargazers_count") or 0,
        forks_count=node.get("forks_count") or 0,
        open_issues_count=node.get("open_issues_count") or 0,
        language=node.get("language") or "",
        owner=_map_user(node.get("owner")),
    )
    if created_at:
        repository.created_at = created_at
    if updated_at:
        repository.updated_at = updated_at
    return repository


def _map_issue(node: Dict[str, Any], repository_full_name: Optional[str] = None) -> GitHubIssue:
    created_at = parse_github_datetime(node.get("created_at"))
    milestone = node.get("milestone")
    return GitHubIssue(
        id=node.get("id") or 0,
        number=node["number"],
        title=node.get("title") or "",
        body=node.get("body") or "",
        state=node.get("state") or "open",
        html_url=node.get("html_url") or "",
        created_at=created_at,
        updated_at=parse_github_datetime(node.get("updated_at")) or created_at,
        closed_at=parse_github_datetime(node.get("closed_at")),
        user=_map_user(node.get("user")),
        assignees=[_map_user(a) for a in node.get("assignees") or []],
        labels=[_map_label(label) for label in node.get("labels") or []],
        milestone=_map_milestone(milestone) if milestone else None,
        comments=node.get("comments") or 0,
        is_pull_request="pull_request" in node,
        repository_full_name=repository_full_name,
    )


def _validate_issue_number(issue_number: int) -> None:
    if issue_number <= 0:
        raise ValueError("Issue number must be greater than zero.")


# ── Service ───────────────────────────────────────────────────────────────


class GitHubService:
    """
    Client for the GitHub REST API v3.

    Credentials follow the stored Personal Access Token; call
    ``set_authentication`` whenever the token changes.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self.base_url = self._settings.github_api_base.rstrip("/")
        self.timeout = self._settings.http_timeout
        self._token: Optional[str] = self._settings.github_token or None

    # -- authentication ---------------------------------------------------

    def set_authentication(self, token: Optional[str]) -> None:
        self._token = token or None

    def clear_authentication(self) -> None:
        self._token = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> Dict[str, str]:
        h = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._settings.github_user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            h["Authorization"] = f"Bearer {self._token}"
        return h

    def _require_authentication(self, action: str) -> None:
        if not self.is_authenticated:
            raise GitHubAuthenticationError(
                f"GitHub authentication is required to {action}. "
                "Please configure your GitHub Personal Access Token.",
                status_code=401,
            )

    # -- transport --------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        not_found_message: Optional[str] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.request(method, url, headers=self._headers(), params=params, json=json)
        except httpx.TimeoutException as exc:
            raise GitHubTimeoutError("Request to GitHub API timed out. Please try again later.") from exc
        except httpx.TransportError as exc:
            raise GitHubConnectionError(
                "Unable to connect to GitHub API. Please check your internet connection and try again."
            ) from exc

        if resp.status_code >= 400:
            raise self._error_for_response(resp, not_found_message)
        return resp

    @staticmethod
    def _error_for_response(resp: httpx.Response, not_found_message: Optional[str]) -> GitHubApiError:
        status = resp.status_code
        if status == 401:
            return GitHubAuthenticationError(
                "GitHub authentication failed. Please check your Personal Access Token "
                "and ensure it has the required 'repo' permissions.",
                status_code=status,
            )
        if status == 403:
            if resp.headers.get("x-ratelimit-remaining") == "0":
                reset = resp.headers.get("x-ratelimit-reset")
                return GitHubPermissionError(
                    f"GitHub API rate limit exceeded. Reset at epoch={reset}.",
                    status_code=status,
                )
            return GitHubPermissionError(
                "Access forbidden. Your GitHub token may not have permission to access this repository, "
                "or you may have exceeded the API rate limit.",
                status_code=status,
            )
        if status == 404:
            return GitHubNotFoundError(
                not_found_message or "The requested GitHub resource was not found.",
                status_code=status,
            )
        try:
            detail = resp.json().get("message", "")
        except ValueError:
            detail = resp.text[:500]
        return GitHubApiError(f"GitHub API error {status}: {detail}", status_code=status)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        return self._request("GET", path, params=params, **kwargs).json()

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Iterable[Dict[str, Any]]:
        page = 1
        while True:
            p = dict(params or {})
            p["per_page"] = PER_PAGE
            p["page"] = page
            data = self._get(path, params=p, **kwargs)
            if not isinstance(data, list) or not data:
                return
            yield from data
            if len(data) < PER_PAGE:
                return
            page += 1

    # -- repositories -----------------------------------------------------

    def get_repositories(self) -> List[GitHubRepository]:
        """Repositories of the authenticated user."""
        self._require_authentication("list your repositories")
        repositories = [_map_repository(r) for r in self._paginate("/user/repos", params={"sort": "updated"})]
        logger.info(f"Fetched {len(repositories)} repositories for current user")
        return repositories

    def search_repositories(self, query: str) -> List[GitHubRepository]:
        if not query or not query.strip():
            raise ValueError("Search query must not be empty.")
        raw = self._get("/search/repositories", params={"q": query.strip(), "per_page": PER_PAGE})
        return [_map_repository(r) for r in raw.get("items", [])]

    def get_repository(self, owner: str, repo: str) -> GitHubRepository:
        raw = self._get(
            f"/repos/{owner}/{repo}",
            not_found_message=f"Repository '{owner}/{repo}' not found. "
                              "Please verify the repository name and that you have access to it.",
        )
        return _map_repository(raw)

    # -- issues -----------------------------------------------------------

    def get_issues(self, owner: str, repo: str, state: str = "all") -> List[GitHubIssue]:
        """
        Fetch every issue of a repository (pull requests included, flagged).

        Args:
            owner: Repository owner
            repo: Repository name
            state: GitHub state query - 'open', 'closed' or 'all'

        Returns:
            Issues as read-only snapshots
        """
        self._require_authentication("access repository issues")
        full_name = f"{owner}/{repo}"
        issues = [
            _map_issue(node, repository_full_name=full_name)
            for node in self._paginate(
                f"/repos/{owner}/{repo}/issues",
                params={"state": state},
                not_found_message=f"Repository '{full_name}' not found. "
                                  "Please verify the repository name and that you have access to it.",
            )
        ]
        logger.info(f"Fetched {len(issues)} issues from {full_name} (state={state})")
        return issues

    def get_issue(self, owner: str, repo: str, issue_number: int) -> GitHubIssue:
        _validate_issue_number(issue_number)
        raw = self._get(
            f"/repos/{owner}/{repo}/issues/{issue_number}",
            not_found_message=f"Issue #{issue_number} not found in '{owner}/{repo}'.",
        )
        return _map_issue(raw, repository_full_name=f"{owner}/{repo}")

    def create_issue(self, owner: str, repo: str, title: str, body: str = "") -> GitHubIssue:
        if not title or not title.strip():
            raise ValueError("Issue title must not be empty.")
        raw = self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues",
            json={"title": title, "body": body},
            not_found_message=f"Repository '{owner}/{repo}' not found.",
        ).json()
        logger.info(f"Created issue #{raw.get('number')} in {owner}/{repo}")
        return _map_issue(raw, repository_full_name=f"{owner}/{repo}")

    def _update_issue(self, owner: str, repo: str, issue_number: int, payload: Dict[str, Any]) -> GitHubIssue:
        _validate_issue_number(issue_number)
        raw = self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/issues/{issue_number}",
            json=payload,
            not_found_message=f"Issue #{issue_number} not found in '{owner}/{repo}'.",
        ).json()
        return _map_issue(raw, repository_full_name=f"{owner}/{repo}")

    def update_issue(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> GitHubIssue:
        payload: Dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if body is not None:
            payload["body"] = body
        if not payload:
            raise ValueError("Nothing to update: provide a title or a body.")
        issue = self._update_issue(owner, repo, issue_number, payload)
        logger.info(f"Updated issue #{issue_number} in {owner}/{repo}")
        return issue

    def close_issue(self, owner: str, repo: str, issue_number: int) -> GitHubIssue:
        issue = self._update_issue(owner, repo, issue_number, {"state": "closed"})
        logger.info(f"Closed issue #{issue_number} in {owner}/{repo}")
        return issue

    def reopen_issue(self, owner: str, repo: str, issue_number: int) -> GitHubIssue:
        issue = self._update_issue(owner, repo, issue_number, {"state": "open"})
        logger.info(f"Reopened issue #{issue_number} in {owner}/{repo}")
        return issue

    def assign_issue(self, owner: str, repo: str, issue_number: int, assignees: List[str]) -> GitHubIssue:
        """Replace the assignee list of an issue."""
        issue = self._update_issue(owner, repo, issue_number, {"assignees": list(assignees)})
        logger.info(f"Assigned issue #{issue_number} in {owner}/{repo} to {', '.join(assignees) or 'nobody'}")
        return issue

    def has_agent_assignment(self, owner: str, repo: str, issue_number: int, agent_logins: Iterable[str]) -> bool:
        """Whether any of ``agent_logins`` is assigned. Errors count as "no"."""
        wanted = {login.lower() for login in agent_logins}
        try:
            issue = self.get_issue(owner, repo, issue_number)
        except Exception as e:
            logger.error(f"Error checking agent assignment for issue #{issue_number} in {owner}/{repo}: {e}")
            return False
        return any(a.login.lower() in wanted for a in issue.assignees)

    # -- repository metadata ----------------------------------------------

    def get_available_assignees(self, owner: str, repo: str) -> List[GitHubUser]:
        return [_map_user(u) for u in self._paginate(f"/repos/{owner}/{repo}/assignees")]

    def get_labels(self, owner: str, repo: str) -> List[GitHubLabel]:
        return [_map_label(label) for label in self._paginate(f"/repos/{owner}/{repo}/labels")]

    def get_milestones(self, owner: str, repo: str, state: str = "all") -> List[GitHubMilestone]:
        return [
            _map_milestone(m)
            for m in self._paginate(f"/repos/{owner}/{repo}/milestones", params={"state": state})
        ]

    # -- bulk operations --------------------------------------------------

    def _bulk(
        self,
        operation: str,
        owner: str,
        repo: str,
        issue_numbers: Iterable[int],
        action: Callable[[int], Any],
    ) -> BulkOperationResult:
        result = BulkOperationResult(operation=operation)
        # Each number is acted on once, in first-seen order
        for number in dict.fromkeys(issue_numbers):
            try:
                action(number)
                result.succeeded.append(number)
            except Exception as e:
                logger.error(f"Failed to {operation} issue #{number} in {owner}/{repo}: {e}")
                result.failed[number] = str(e)
        log_bulk_summary(result, logger)
        return result

    def bulk_close(self, owner: str, repo: str, issue_numbers: Iterable[int]) -> BulkOperationResult:
        return self._bulk("close", owner, repo, issue_numbers, lambda n: self.close_issue(owner, repo, n))

    def bulk_reopen(self, owner: str, repo: str, issue_numbers: Iterable[int]) -> BulkOperationResult:
        return self._bulk("reopen", owner, repo, issue_numbers, lambda n: self.reopen_issue(owner, repo, n))

    def bulk_assign(
        self,
        owner: str,
        repo: str,
        issue_numbers: Iterable[int],
        assignees: List[str],
    ) -> BulkOperationResult:
        return self._bulk(
            "assign", owner, repo, issue_numbers,
            lambda n: self.assign_issue(owner, repo, n, assignees),
        )
