from typing import List, Optional

from pydantic import BaseModel, Field

from app.models import FilterStats, GitHubIssue, IssueFilter


class CreateIssueRequest(BaseModel):
    title: str
    body: str = ""


class UpdateIssueRequest(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


class AssignIssueRequest(BaseModel):
    assignees: List[str] = Field(default_factory=list)


class BulkIssueRequest(BaseModel):
    issue_numbers: List[int] = Field(min_length=1)


class BulkAssignRequest(BulkIssueRequest):
    assignees: List[str] = Field(default_factory=list)


class WatchRepositoryRequest(BaseModel):
    owner: str
    repo: str


class SaveFilterRequest(BaseModel):
    name: str
    filter: Optional[IssueFilter] = None


class IssueQueryResponse(BaseModel):
    repository: str
    issues: List[GitHubIssue]
    stats: FilterStats
    has_active_filters: bool
