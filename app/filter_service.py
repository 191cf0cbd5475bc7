"""
Issue filtering, sorting and saved filter queries.

Filtering is a conjunction of independent predicates followed by a single
stable sort. Issues with equal sort keys keep their input order in both
directions.
"""
import threading
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from app.config import Settings, get_settings
from app.date_utils import utcnow
from app.logger import get_logger
from app.models import (
    FilterStats,
    GitHubIssue,
    IssueFilter,
    IssueSortBy,
    IssueState,
    SavedFilter,
    SortDirection,
)
from app.storage import get_data_dir, read_json_file, write_json_file

logger = get_logger(__name__)

SAVED_FILTERS_FILE_NAME = "saved-filters.json"

SORT_KEYS = {
    IssueSortBy.CREATED: lambda issue: issue.created_at,
    IssueSortBy.UPDATED: lambda issue: issue.updated_at,
    IssueSortBy.COMMENTS: lambda issue: issue.comments,
    IssueSortBy.TITLE: lambda issue: issue.title.casefold(),
    IssueSortBy.NUMBER: lambda issue: issue.number,
}


# ── Predicates ────────────────────────────────────────────────────────────


def _matches_search(issue: GitHubIssue, query: str) -> bool:
    return (
        query in issue.title.lower()
        or query in issue.body.lower()
        or query in issue.user.login.lower()
        or any(query in a.login.lower() for a in issue.assignees)
    )


def _matches_state(issue: GitHubIssue, state: IssueState) -> bool:
    if state == IssueState.ALL:
        return True
    if state == IssueState.CLOSED:
        return issue.is_closed
    return issue.is_open


def _within(value: Optional[datetime], after: Optional[datetime], before: Optional[datetime]) -> bool:
    if after is None and before is None:
        return True
    if value is None:
        return False
    if after is not None and value < after:
        return False
    if before is not None and value > before:
        return False
    return True


def filter_issues(issues: Iterable[GitHubIssue], issue_filter: IssueFilter) -> List[GitHubIssue]:
    """Apply every active predicate of ``issue_filter`` and sort the survivors."""
    f = issue_filter
    query = f.search_query.strip().lower()
    assignees = {a.lower() for a in f.assignees}
    labels = {label.lower() for label in f.labels}
    repositories = {r.lower() for r in f.repositories}
    milestone = (f.milestone or "").strip().lower()
    author = (f.author or "").strip().lower()

    filtered = []
    for issue in issues:
        if query and not _matches_search(issue, query):
            continue
        if not _matches_state(issue, f.state):
            continue
        if assignees and not any(a.login.lower() in assignees for a in issue.assignees):
            continue
        if labels and not any(label.name.lower() in labels for label in issue.labels):
            continue
        if milestone and (issue.milestone is None or issue.milestone.title.lower() != milestone):
            continue
        if author and issue.user.login.lower() != author:
            continue
        if repositories and (issue.repository_full_name or "").lower() not in repositories:
            continue
        if not _within(issue.created_at, f.created_after, f.created_before):
            continue
        if not _within(issue.updated_at, f.updated_after, f.updated_before):
            continue
        if not _within(issue.closed_at, f.closed_after, f.closed_before):
            continue
        filtered.append(issue)

    return sort_issues(filtered, f.sort_by, f.sort_direction)


def sort_issues(
    issues: Iterable[GitHubIssue],
    sort_by: IssueSortBy = IssueSortBy.UPDATED,
    direction: SortDirection = SortDirection.DESCENDING,
) -> List[GitHubIssue]:
    key = SORT_KEYS.get(sort_by, SORT_KEYS[IssueSortBy.UPDATED])
    # sorted() is stable and keeps that stability with reverse=True
    return sorted(issues, key=key, reverse=direction == SortDirection.DESCENDING)


# ── Service ───────────────────────────────────────────────────────────────


class IssueFilterService:
    """
    Holds the current filter and the saved filter list.

    Saved filters are persisted to ``saved-filters.json`` in the data
    directory. Persistence failures are logged, never raised.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._file = get_data_dir(self._settings.data_dir) / SAVED_FILTERS_FILE_NAME
        self._lock = threading.RLock()
        self._current = IssueFilter()
        self._saved: List[SavedFilter] = []
        self._listeners: List[Callable[[IssueFilter], None]] = []
        self._load_saved_filters()

    # -- current filter ---------------------------------------------------

    @property
    def current_filter(self) -> IssueFilter:
        with self._lock:
            return self._current.clone()

    def subscribe(self, callback: Callable[[IssueFilter], None]) -> None:
        """Register a callback invoked with a copy of the filter after each change."""
        self._listeners.append(callback)

    def update_filter(self, issue_filter: IssueFilter) -> IssueFilter:
        with self._lock:
            self._current = issue_filter.clone()
        self._notify()
        return self.current_filter

    def reset_filter(self) -> IssueFilter:
        with self._lock:
            self._current.reset()
        self._notify()
        return self.current_filter

    def _notify(self) -> None:
        current = self.current_filter
        for callback in list(self._listeners):
            callback(current.clone())

    def apply_filter(
        self,
        issues: Iterable[GitHubIssue],
        issue_filter: Optional[IssueFilter] = None,
    ) -> List[GitHubIssue]:
        """Filter and sort ``issues`` with ``issue_filter`` (the current filter if omitted)."""
        return filter_issues(issues, issue_filter if issue_filter is not None else self.current_filter)

    @staticmethod
    def get_filter_stats(all_issues: List[GitHubIssue], filtered_issues: List[GitHubIssue]) -> FilterStats:
        total = len(all_issues)
        filtered = len(filtered_issues)
        return FilterStats(
            total_issues=total,
            filtered_issues=filtered,
            open_issues=sum(1 for i in filtered_issues if i.is_open),
            closed_issues=sum(1 for i in filtered_issues if i.is_closed),
            filtered_percentage=(filtered / total * 100) if total else 0.0,
        )

    # -- saved filters ----------------------------------------------------

    def get_saved_filters(self) -> List[SavedFilter]:
        """Saved filters, most recently used first."""
        with self._lock:
            ordered = sorted(self._saved, key=lambda s: s.last_used, reverse=True)
            return [s.model_copy(deep=True) for s in ordered]

    def save_filter(self, name: str, issue_filter: Optional[IssueFilter] = None) -> SavedFilter:
        """Save a filter under ``name``, replacing any filter with the same name."""
        if not name or not name.strip():
            raise ValueError("Saved filter name must not be empty.")
        name = name.strip()
        with self._lock:
            source = issue_filter if issue_filter is not None else self._current
            now = utcnow()
            saved = SavedFilter(name=name, filter=source.clone(), created_at=now, last_used=now)
            self._saved = [s for s in self._saved if s.name.lower() != name.lower()]
            self._saved.append(saved)
            self._save_filters_to_file()
        logger.info(f"Saved filter '{name}' ({saved.id})")
        return saved.model_copy(deep=True)

    def load_saved_filter(self, filter_id: str) -> Optional[IssueFilter]:
        """Make a saved filter current. Returns the loaded filter, or None if unknown."""
        with self._lock:
            saved = next((s for s in self._saved if s.id == filter_id), None)
            if saved is None:
                logger.warning(f"Saved filter not found: {filter_id}")
                return None
            saved.last_used = utcnow()
            self._current = saved.filter.clone()
            self._save_filters_to_file()
        self._notify()
        logger.info(f"Loaded saved filter '{saved.name}'")
        return self.current_filter

    def delete_saved_filter(self, filter_id: str) -> bool:
        with self._lock:
            before = len(self._saved)
            self._saved = [s for s in self._saved if s.id != filter_id]
            removed = len(self._saved) != before
            if removed:
                self._save_filters_to_file()
        if removed:
            logger.info(f"Deleted saved filter {filter_id}")
        return removed

    def _load_saved_filters(self) -> None:
        try:
            raw = read_json_file(self._file, default=[]) or []
            self._saved = [SavedFilter.model_validate(s) for s in raw]
        except Exception as e:
            logger.error(f"Error loading saved filters: {e}")
            self._saved = []

    def _save_filters_to_file(self) -> None:
        try:
            write_json_file(self._file, [s.model_dump(mode="json") for s in self._saved])
        except Exception as e:
            logger.error(f"Error saving filters to file: {e}")
