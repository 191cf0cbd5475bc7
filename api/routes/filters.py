"""
Current filter and saved filter queries.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_filter_service
from app.filter_service import IssueFilterService
from app.models import IssueFilter, SavedFilter
from auth.oauth2 import get_current_claims
from schemas.issues import SaveFilterRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/filters",
    tags=["Filters"],
    dependencies=[Depends(get_current_claims)],
)


@router.get("/current", response_model=IssueFilter)
def get_current_filter(filters: IssueFilterService = Depends(get_filter_service)):
    return filters.current_filter


@router.put("/current", response_model=IssueFilter)
def update_current_filter(issue_filter: IssueFilter, filters: IssueFilterService = Depends(get_filter_service)):
    return filters.update_filter(issue_filter)


@router.delete("/current", response_model=IssueFilter)
def reset_current_filter(filters: IssueFilterService = Depends(get_filter_service)):
    return filters.reset_filter()


@router.get("/saved", response_model=List[SavedFilter])
def list_saved_filters(filters: IssueFilterService = Depends(get_filter_service)):
    return filters.get_saved_filters()


@router.post("/saved", response_model=SavedFilter, status_code=201)
def save_filter(request: SaveFilterRequest, filters: IssueFilterService = Depends(get_filter_service)):
    """Save ``request.filter`` (or the current filter) under a name."""
    try:
        return filters.save_filter(request.name, request.filter)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/saved/{filter_id}/load", response_model=IssueFilter)
def load_saved_filter(filter_id: str, filters: IssueFilterService = Depends(get_filter_service)):
    loaded = filters.load_saved_filter(filter_id)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Saved filter not found")
    return loaded


@router.delete("/saved/{filter_id}")
def delete_saved_filter(filter_id: str, filters: IssueFilterService = Depends(get_filter_service)):
    if not filters.delete_saved_filter(filter_id):
        raise HTTPException(status_code=404, detail="Saved filter not found")
    return {"message": "Saved filter deleted"}
