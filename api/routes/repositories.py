"""
Repository browsing and the local watchlist.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.errors import to_http_exception
from app.dependencies import get_github_service, get_repository_service
from app.github_client import GitHubService
from app.models import GitHubRepository
from app.repository_service import RepositoryService
from auth.oauth2 import get_current_claims
from schemas.issues import WatchRepositoryRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/repositories",
    tags=["Repositories"],
    dependencies=[Depends(get_current_claims)],
)


@router.get("", response_model=List[GitHubRepository])
def list_repositories(github: GitHubService = Depends(get_github_service)):
    """Repositories of the user owning the configured GitHub token."""
    try:
        return github.get_repositories()
    except Exception as exc:
        raise to_http_exception(exc, "fetching repositories")


@router.get("/search", response_model=List[GitHubRepository])
def search_repositories(
    q: str = Query(..., min_length=1, description="GitHub repository search query"),
    github: GitHubService = Depends(get_github_service),
):
    try:
        return github.search_repositories(q)
    except Exception as exc:
        raise to_http_exception(exc, "searching repositories")


# ── Watchlist ────────────────────────────────────────────────────────────


@router.get("/watched", response_model=List[GitHubRepository])
def list_watched(repositories: RepositoryService = Depends(get_repository_service)):
    return repositories.get_watched_repositories()


@router.post("/watched", status_code=201)
def watch_repository(
    request: WatchRepositoryRequest,
    response: Response,
    github: GitHubService = Depends(get_github_service),
    repositories: RepositoryService = Depends(get_repository_service),
):
    """Resolve ``owner/repo`` on GitHub and pin it. 200 when it was already pinned."""
    try:
        repository = github.get_repository(request.owner, request.repo)
    except Exception as exc:
        raise to_http_exception(exc, f"fetching repository {request.owner}/{request.repo}")
    added = repositories.add_repository(repository)
    if not added:
        response.status_code = 200
    return {"added": added, "repository": repository.model_dump(mode="json")}


@router.delete("/watched/{repository_id}")
def unwatch_repository(
    repository_id: int,
    repositories: RepositoryService = Depends(get_repository_service),
):
    if not repositories.remove_repository(repository_id):
        raise HTTPException(status_code=404, detail="Repository is not watched")
    return {"message": f"Repository {repository_id} removed from watchlist"}


@router.get("/{owner}/{repo}", response_model=GitHubRepository)
def get_repository(owner: str, repo: str, github: GitHubService = Depends(get_github_service)):
    try:
        return github.get_repository(owner, repo)
    except Exception as exc:
        raise to_http_exception(exc, f"fetching repository {owner}/{repo}")
