"""
Exports filtered issues to CSV or JSON, plus export filenames and statistics.
"""
import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.date_utils import FILENAME_TIMESTAMP_FORMAT, format_export_datetime, utcnow
from app.logger import get_logger
from app.models import DateRange, ExportStats, GitHubIssue, IssueFilter, IssueState

logger = get_logger(__name__)

CSV_COLUMNS = [
    "Repository", "Number", "Title", "State", "Author", "Assignees", "Labels",
    "Milestone", "Created", "Updated", "Closed", "Comments", "URL",
]

EXPORTED_BY = "GitHubIssueManager"
EXPORT_VERSION = "2.0"

SUPPORTED_FORMATS = {"csv": "text/csv", "json": "application/json"}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class IssueExportService:
    """Serializes issue collections. Stateless."""

    def export_to_csv(self, issues: List[GitHubIssue], repository_name: str) -> str:
        """
        One row per issue in a fixed column order.

        Values containing commas, quotes or newlines are quoted with doubled
        inner quotes, so any RFC 4180 reader gets the original text back.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(CSV_COLUMNS)
        for issue in issues:
            writer.writerow([
                repository_name,
                issue.number,
                issue.title,
                issue.state,
                issue.user.login,
                ";".join(a.login for a in issue.assignees),
                ";".join(label.name for label in issue.labels),
                issue.milestone.title if issue.milestone else "",
                format_export_datetime(issue.created_at),
                format_export_datetime(issue.updated_at),
                format_export_datetime(issue.closed_at),
                issue.comments,
                issue.html_url,
            ])
        logger.info(f"Exported {len(issues)} issues from {repository_name} to CSV")
        return buffer.getvalue()

    def export_to_json(self, issues: List[GitHubIssue], repository_name: str) -> str:
        """Nested camelCase document: ``{"metadata": {...}, "issues": [...]}``."""
        export_data = {
            "metadata": {
                "exportedAt": utcnow().isoformat(),
                "repository": repository_name,
                "totalIssues": len(issues),
                "exportedBy": EXPORTED_BY,
                "version": EXPORT_VERSION,
            },
            "issues": [self._issue_to_json(issue, repository_name) for issue in issues],
        }
        logger.info(f"Exported {len(issues)} issues from {repository_name} to JSON")
        return json.dumps(export_data, indent=2, ensure_ascii=False)

    @staticmethod
    def _issue_to_json(issue: GitHubIssue, repository_name: str) -> Dict[str, Any]:
        milestone = None
        if issue.milestone:
            milestone = {
                "title": issue.milestone.title,
                "description": issue.milestone.description,
                "state": issue.milestone.state,
                "dueOn": _iso(issue.milestone.due_on),
            }
        return {
            "repository": repository_name,
            "number": issue.number,
            "title": issue.title,
            "body": issue.body,
            "state": issue.state,
            "author": {
                "login": issue.user.login,
                "avatarUrl": issue.user.avatar_url,
                "htmlUrl": issue.user.html_url,
            },
            "assignees": [
                {"login": a.login, "avatarUrl": a.avatar_url, "htmlUrl": a.html_url}
                for a in issue.assignees
            ],
            "labels": [
                {"name": label.name, "color": label.color, "description": label.description}
                for label in issue.labels
            ],
            "milestone": milestone,
            "dates": {
                "createdAt": _iso(issue.created_at),
                "updatedAt": _iso(issue.updated_at),
                "closedAt": _iso(issue.closed_at),
            },
            "metrics": {
                "commentCount": issue.comments,
                "isPullRequest": issue.is_pull_request,
            },
            "links": {
                "htmlUrl": issue.html_url,
            },
        }

    def export(self, issues: List[GitHubIssue], repository_name: str, export_format: str) -> str:
        export_format = export_format.lower()
        if export_format == "csv":
            return self.export_to_csv(issues, repository_name)
        if export_format == "json":
            return self.export_to_json(issues, repository_name)
        raise ValueError(f"Unsupported export format '{export_format}'. Supported: {', '.join(SUPPORTED_FORMATS)}")

    @staticmethod
    def generate_filename(
        repository_name: str,
        issue_filter: IssueFilter,
        export_format: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Build ``issues-<owner-repo>-<timestamp>[-<suffix>].<format>``.

        The suffix lists, in order: a non-default state, the assignee count,
        the label count and ``search`` when a search query is set.
        """
        timestamp = (now or utcnow()).strftime(FILENAME_TIMESTAMP_FORMAT)
        repo_name = repository_name.replace("/", "-")

        parts = []
        if issue_filter.has_active_filters:
            if issue_filter.state != IssueState.OPEN:
                parts.append(issue_filter.state.value)
            if issue_filter.assignees:
                parts.append(f"assignees-{len(issue_filter.assignees)}")
            if issue_filter.labels:
                parts.append(f"labels-{len(issue_filter.labels)}")
            if issue_filter.search_query.strip():
                parts.append("search")

        suffix = f"-{'-'.join(parts)}" if parts else ""
        return f"issues-{repo_name}-{timestamp}{suffix}.{export_format}"

    @staticmethod
    def get_export_stats(issues: List[GitHubIssue]) -> ExportStats:
        date_range = None
        if issues:
            date_range = DateRange(
                start_date=min(i.created_at for i in issues),
                end_date=max(i.updated_at for i in issues),
            )
        return ExportStats(
            total_issues=len(issues),
            open_issues=sum(1 for i in issues if i.is_open),
            closed_issues=sum(1 for i in issues if i.is_closed),
            unique_assignees=len({a.login for i in issues for a in i.assignees}),
            unique_labels=len({label.name for i in issues for label in i.labels}),
            date_range=date_range,
        )
