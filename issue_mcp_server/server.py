"""
MCP Server exposes watched repositories and issue filtering/export as MCP
tools and resources.

Resources (read-only context for LLMs):
    issues://watched-repositories  pinned repositories
    issues://capabilities  server capabilities

Tools (callable actions):
    list_watched_repositories  pinned repositories
    list_issues  fetch + filter + sort issues of a repository
    export_issues  CSV / JSON export of filtered issues
    get_capabilities  capability description

The stdio transport is trusted-local: whoever launched the process owns the
pipe, so tools run without a bearer token and the capabilities reported
here say so. JWTs guard the REST surface only.
"""
import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from app.dependencies import (
    get_export_service,
    get_filter_service,
    get_github_service,
    get_mcp_service,
    get_repository_service,
)
from app.models import IssueFilter, IssueSortBy, IssueState, SortDirection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "GitHub Issue Manager",
    instructions=(
        "MCP server that lists watched GitHub repositories and filters, "
        "sorts and exports their issues."
    ),
)


def _build_filter(
    state: str = "open",
    search: str = "",
    labels: Optional[List[str]] = None,
    assignees: Optional[List[str]] = None,
    milestone: Optional[str] = None,
    author: Optional[str] = None,
    sort_by: str = "updated",
    sort_direction: str = "descending",
) -> IssueFilter:
    return IssueFilter(
        search_query=search,
        state=IssueState(state),
        labels=labels or [],
        assignees=assignees or [],
        milestone=milestone,
        author=author,
        sort_by=IssueSortBy(sort_by),
        sort_direction=SortDirection(sort_direction),
    )


# ═══════════════════════════════════════════════════════════════════════════
#  RESOURCES
# ═══════════════════════════════════════════════════════════════════════════


@mcp.resource("issues://watched-repositories")
def resource_watched_repositories() -> str:
    """Repositories pinned by the user."""
    return list_watched_repositories()


@mcp.resource("issues://capabilities")
def resource_capabilities() -> str:
    return get_capabilities()


# ═══════════════════════════════════════════════════════════════════════════
#  TOOLS
# ═══════════════════════════════════════════════════════════════════════════


@mcp.tool()
def list_watched_repositories() -> str:
    """List the repositories pinned by the user."""
    repositories = get_repository_service().get_watched_repositories()
    return json.dumps([r.model_dump(mode="json") for r in repositories], indent=2)


@mcp.tool()
def list_issues(
    owner: str,
    repo: str,
    state: str = "open",
    search: str = "",
    labels: Optional[List[str]] = None,
    assignees: Optional[List[str]] = None,
    milestone: Optional[str] = None,
    author: Optional[str] = None,
    sort_by: str = "updated",
    sort_direction: str = "descending",
) -> str:
    """
    Fetch the issues of a repository and filter them.

    Args:
        owner: Repository owner.
        repo: Repository name.
        state: 'open', 'closed' or 'all' (default 'open').
        search: Case-insensitive text matched against title, body, author and assignees.
        labels: Keep issues carrying at least one of these labels.
        assignees: Keep issues assigned to at least one of these logins.
        milestone: Milestone title.
        author: Author login.
        sort_by: 'created', 'updated', 'comments', 'title' or 'number'.
        sort_direction: 'ascending' or 'descending'.
    """
    issue_filter = _build_filter(state, search, labels, assignees, milestone, author, sort_by, sort_direction)
    filters = get_filter_service()
    all_issues = get_github_service().get_issues(owner, repo, state="all")
    filtered = filters.apply_filter(all_issues, issue_filter)
    return json.dumps(
        {
            "repository": f"{owner}/{repo}",
            "stats": filters.get_filter_stats(all_issues, filtered).model_dump(mode="json"),
            "issues": [i.model_dump(mode="json") for i in filtered],
        },
        indent=2,
    )


@mcp.tool()
def export_issues(
    owner: str,
    repo: str,
    format: str = "csv",
    state: str = "open",
    search: str = "",
    labels: Optional[List[str]] = None,
) -> str:
    """
    Export filtered issues of a repository.

    Args:
        owner: Repository owner.
        repo: Repository name.
        format: 'csv' or 'json' (default 'csv').
        state: 'open', 'closed' or 'all' (default 'open').
        search: Case-insensitive text search.
        labels: Keep issues carrying at least one of these labels.
    """
    issue_filter = _build_filter(state=state, search=search, labels=labels)
    all_issues = get_github_service().get_issues(owner, repo, state="all")
    filtered = get_filter_service().apply_filter(all_issues, issue_filter)
    return get_export_service().export(filtered, f"{owner}/{repo}", format)


@mcp.tool()
def get_capabilities() -> str:
    """Describe the server version, capabilities and authentication scheme."""
    return json.dumps(get_mcp_service().get_capabilities(surface="stdio"), indent=2)
