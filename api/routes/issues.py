"""
Issue querying, export, editing and bulk operations for one repository.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import Response

from api.errors import to_http_exception
from app.dependencies import get_export_service, get_filter_service, get_github_service
from app.export_service import SUPPORTED_FORMATS, IssueExportService
from app.filter_service import IssueFilterService
from app.github_client import GitHubService
from app.models import (
    BulkOperationResult,
    GitHubIssue,
    GitHubLabel,
    GitHubMilestone,
    GitHubUser,
    IssueFilter,
)
from auth.oauth2 import get_current_claims
from schemas.issues import (
    AssignIssueRequest,
    BulkAssignRequest,
    BulkIssueRequest,
    CreateIssueRequest,
    IssueQueryResponse,
    UpdateIssueRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/repositories/{owner}/{repo}",
    tags=["Issues"],
    dependencies=[Depends(get_current_claims)],
)


def _filtered_issues(
    owner: str,
    repo: str,
    issue_filter: Optional[IssueFilter],
    github: GitHubService,
    filters: IssueFilterService,
):
    active = issue_filter if issue_filter is not None else filters.current_filter
    all_issues = github.get_issues(owner, repo, state="all")
    return active, all_issues, filters.apply_filter(all_issues, active)


@router.post("/issues/query", response_model=IssueQueryResponse)
def query_issues(
    owner: str,
    repo: str,
    issue_filter: Optional[IssueFilter] = Body(default=None),
    github: GitHubService = Depends(get_github_service),
    filters: IssueFilterService = Depends(get_filter_service),
):
    """
    Fetch every issue of ``owner/repo`` and filter it client-side.

    The request body is an IssueFilter; the current filter applies when the
    body is omitted.
    """
    try:
        active, all_issues, filtered = _filtered_issues(owner, repo, issue_filter, github, filters)
        return IssueQueryResponse(
            repository=f"{owner}/{repo}",
            issues=filtered,
            stats=filters.get_filter_stats(all_issues, filtered),
            has_active_filters=active.has_active_filters,
        )
    except Exception as exc:
        raise to_http_exception(exc, f"fetching issues for {owner}/{repo}")


@router.post("/issues/export")
def export_issues(
    owner: str,
    repo: str,
    export_format: str = Query("csv", alias="format", pattern="^(csv|json)$"),
    issue_filter: Optional[IssueFilter] = Body(default=None),
    github: GitHubService = Depends(get_github_service),
    filters: IssueFilterService = Depends(get_filter_service),
    exporter: IssueExportService = Depends(get_export_service),
):
    """Download the filtered issues as a CSV or JSON attachment."""
    repository_name = f"{owner}/{repo}"
    try:
        active, _all_issues, filtered = _filtered_issues(owner, repo, issue_filter, github, filters)
        content = exporter.export(filtered, repository_name, export_format)
        filename = exporter.generate_filename(repository_name, active, export_format)
    except Exception as exc:
        raise to_http_exception(exc, f"exporting issues for {repository_name}")

    return Response(
        content=content,
        media_type=SUPPORTED_FORMATS[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/issues", response_model=GitHubIssue, status_code=201)
def create_issue(
    owner: str,
    repo: str,
    request: CreateIssueRequest,
    github: GitHubService = Depends(get_github_service),
):
    try:
        return github.create_issue(owner, repo, request.title, request.body)
    except Exception as exc:
        raise to_http_exception(exc, f"creating issue in {owner}/{repo}")


@router.patch("/issues/{issue_number}", response_model=GitHubIssue)
def update_issue(
    owner: str,
    repo: str,
    issue_number: int,
    request: UpdateIssueRequest,
    github: GitHubService = Depends(get_github_service),
):
    try:
        return github.update_issue(owner, repo, issue_number, title=request.title, body=request.body)
    except Exception as exc:
        raise to_http_exception(exc, f"updating issue #{issue_number} in {owner}/{repo}")


@router.put("/issues/{issue_number}/assignees", response_model=GitHubIssue)
def assign_issue(
    owner: str,
    repo: str,
    issue_number: int,
    request: AssignIssueRequest,
    github: GitHubService = Depends(get_github_service),
):
    try:
        return github.assign_issue(owner, repo, issue_number, request.assignees)
    except Exception as exc:
        raise to_http_exception(exc, f"assigning issue #{issue_number} in {owner}/{repo}")


# ── Bulk operations (best effort, no rollback) ───────────────────────────


@router.post("/issues/bulk/close", response_model=BulkOperationResult)
def bulk_close(owner: str, repo: str, request: BulkIssueRequest, github: GitHubService = Depends(get_github_service)):
    return github.bulk_close(owner, repo, request.issue_numbers)


@router.post("/issues/bulk/reopen", response_model=BulkOperationResult)
def bulk_reopen(owner: str, repo: str, request: BulkIssueRequest, github: GitHubService = Depends(get_github_service)):
    return github.bulk_reopen(owner, repo, request.issue_numbers)


@router.post("/issues/bulk/assign", response_model=BulkOperationResult)
def bulk_assign(owner: str, repo: str, request: BulkAssignRequest, github: GitHubService = Depends(get_github_service)):
    return github.bulk_assign(owner, repo, request.issue_numbers, request.assignees)


# ── Repository metadata for filter pickers ───────────────────────────────


@router.get("/assignees", response_model=List[GitHubUser])
def list_assignees(owner: str, repo: str, github: GitHubService = Depends(get_github_service)):
    try:
        return github.get_available_assignees(owner, repo)
    except Exception as exc:
        raise to_http_exception(exc, f"fetching assignees for {owner}/{repo}")


@router.get("/labels", response_model=List[GitHubLabel])
def list_labels(owner: str, repo: str, github: GitHubService = Depends(get_github_service)):
    try:
        return github.get_labels(owner, repo)
    except Exception as exc:
        raise to_http_exception(exc, f"fetching labels for {owner}/{repo}")


@router.get("/milestones", response_model=List[GitHubMilestone])
def list_milestones(owner: str, repo: str, github: GitHubService = Depends(get_github_service)):
    try:
        return github.get_milestones(owner, repo)
    except Exception as exc:
        raise to_http_exception(exc, f"fetching milestones for {owner}/{repo}")
