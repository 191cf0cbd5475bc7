"""
Pydantic models for the issue manager.
Mirror the GitHub REST resources the app reads, plus the filter/export
value objects built on top of them.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.date_utils import ensure_utc, utcnow


class GitHubUser(BaseModel):
    """GitHub user model."""
    id: int = 0
    login: str = ""
    avatar_url: str = ""
    html_url: str = ""
    type: str = "User"


class GitHubLabel(BaseModel):
    """GitHub issue label model."""
    id: int = 0
    name: str = ""
    color: str = ""
    description: str = ""
    is_default: bool = False


class GitHubMilestone(BaseModel):
    """GitHub milestone model."""
    id: int = 0
    number: int = 0
    title: str = ""
    description: str = ""
    state: str = "open"
    due_on: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("due_on", "created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class GitHubRepository(BaseModel):
    """GitHub repository model."""
    id: int
    name: str
    full_name: str
    description: str = ""
    private: bool = False
    html_url: str = ""
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    language: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    owner: GitHubUser = Field(default_factory=GitHubUser)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class GitHubIssue(BaseModel):
    """GitHub issue model. A read-only snapshot; GitHub owns the lifecycle."""
    id: int = 0
    number: int = Field(gt=0)
    title: str = ""
    body: str = ""
    state: str = "open"
    html_url: str = ""
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    user: GitHubUser = Field(default_factory=GitHubUser)
    assignees: List[GitHubUser] = Field(default_factory=list)
    labels: List[GitHubLabel] = Field(default_factory=list)
    milestone: Optional[GitHubMilestone] = None
    comments: int = 0
    is_pull_request: bool = False
    repository_full_name: Optional[str] = None

    @field_validator("created_at", "updated_at", "closed_at")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def is_open(self) -> bool:
        return self.state.lower() == "open"

    @property
    def is_closed(self) -> bool:
        return self.state.lower() == "closed"


class IssueState(str, Enum):
    """Issue state filter options."""
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class IssueSortBy(str, Enum):
    """Sort keys for issues."""
    CREATED = "created"
    UPDATED = "updated"
    COMMENTS = "comments"
    TITLE = "title"
    NUMBER = "number"


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class IssueFilter(BaseModel):
    """
    Filter criteria for GitHub issues.

    Instances are mutable; services store and hand out clones so that a
    caller mutating its copy never changes shared state.
    """
    search_query: str = ""
    state: IssueState = IssueState.OPEN
    assignees: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    milestone: Optional[str] = None
    repositories: List[str] = Field(default_factory=list)
    author: Optional[str] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    updated_after: Optional[datetime] = None
    updated_before: Optional[datetime] = None
    closed_after: Optional[datetime] = None
    closed_before: Optional[datetime] = None
    sort_by: IssueSortBy = IssueSortBy.UPDATED
    sort_direction: SortDirection = SortDirection.DESCENDING

    model_config = {"validate_assignment": True}

    @field_validator(
        "created_after", "created_before",
        "updated_after", "updated_before",
        "closed_after", "closed_before",
    )
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def has_active_filters(self) -> bool:
        """True when any criterion is set (the default open state and sorting do not count)."""
        return bool(
            self.search_query.strip()
            or self.state != IssueState.OPEN
            or self.assignees
            or self.labels
            or (self.milestone and self.milestone.strip())
            or self.repositories
            or self.created_after is not None
            or self.created_before is not None
            or self.updated_after is not None
            or self.updated_before is not None
            or self.closed_after is not None
            or self.closed_before is not None
            or (self.author and self.author.strip())
        )

    def reset(self) -> None:
        """Reset all filters to default values in place."""
        for name, field in type(self).model_fields.items():
            setattr(self, name, field.get_default(call_default_factory=True))

    def clone(self) -> "IssueFilter":
        return self.model_copy(deep=True)


class SavedFilter(BaseModel):
    """A named, persisted filter query."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    filter: IssueFilter = Field(default_factory=IssueFilter)
    created_at: datetime = Field(default_factory=utcnow)
    last_used: datetime = Field(default_factory=utcnow)


class FilterStats(BaseModel):
    total_issues: int = 0
    filtered_issues: int = 0
    open_issues: int = 0
    closed_issues: int = 0
    filtered_percentage: float = 0.0


class DateRange(BaseModel):
    start_date: datetime
    end_date: datetime


class ExportStats(BaseModel):
    total_issues: int = 0
    open_issues: int = 0
    closed_issues: int = 0
    unique_assignees: int = 0
    unique_labels: int = 0
    date_range: Optional[DateRange] = None


class BulkOperationResult(BaseModel):
    """
    Outcome of a best-effort batch over distinct issue numbers. No rollback.

    Every number lands in exactly one of ``succeeded`` or ``failed``.
    """
    operation: str
    succeeded: List[int] = Field(default_factory=list)
    failed: Dict[int, str] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)
