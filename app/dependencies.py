"""
Process-wide service singletons.

Services are created lazily on first use and wired together here: the GitHub
client follows the PAT held by the authentication service.
"""
from typing import Optional

from app.auth_service import AuthenticationService
from app.export_service import IssueExportService
from app.filter_service import IssueFilterService
from app.github_client import GitHubService
from app.mcp_service import McpServerService
from app.repository_service import RepositoryService

_auth_service: Optional[AuthenticationService] = None
_github_service: Optional[GitHubService] = None
_repository_service: Optional[RepositoryService] = None
_filter_service: Optional[IssueFilterService] = None
_export_service: Optional[IssueExportService] = None
_mcp_service: Optional[McpServerService] = None


def get_auth_service() -> AuthenticationService:
    """Get or create the singleton authentication service."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthenticationService()
    return _auth_service


def get_github_service() -> GitHubService:
    """Get or create the singleton GitHub client, bound to the stored PAT."""
    global _github_service
    if _github_service is None:
        auth_service = get_auth_service()
        service = GitHubService()
        service.set_authentication(auth_service.current_token)
        auth_service.subscribe(lambda _authenticated: service.set_authentication(auth_service.current_token))
        _github_service = service
    return _github_service


def get_repository_service() -> RepositoryService:
    global _repository_service
    if _repository_service is None:
        _repository_service = RepositoryService()
    return _repository_service


def get_filter_service() -> IssueFilterService:
    global _filter_service
    if _filter_service is None:
        _filter_service = IssueFilterService()
    return _filter_service


def get_export_service() -> IssueExportService:
    global _export_service
    if _export_service is None:
        _export_service = IssueExportService()
    return _export_service


def get_mcp_service() -> McpServerService:
    global _mcp_service
    if _mcp_service is None:
        _mcp_service = McpServerService(get_auth_service())
    return _mcp_service


def reset_services() -> None:
    """Drop every singleton so the next access rebuilds it from current settings."""
    global _auth_service, _github_service, _repository_service
    global _filter_service, _export_service, _mcp_service
    _auth_service = None
    _github_service = None
    _repository_service = None
    _filter_service = None
    _export_service = None
    _mcp_service = None
