import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.auth_service import AuthenticationService
from app.dependencies import get_auth_service
from auth.oauth2 import get_bearer_token, get_current_claims
from schemas.auth import GitHubTokenRequest, LoginRequest, ValidateTokenRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login")
def login(request: LoginRequest, auth_service: AuthenticationService = Depends(get_auth_service)):
    """Issue an API JWT for the given user. No password: identity is asserted by the caller."""
    try:
        if not request.user_id or not request.email:
            raise HTTPException(status_code=400, detail="UserId and Email are required")

        token = auth_service.generate_jwt_token(request.user_id, request.email, request.roles)
        expires = auth_service.token_expiry(token)
        return {
            "token": token,
            "expires": expires.isoformat() if expires else None,
            "user": {"id": request.user_id, "email": request.email},
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {e}")
        raise HTTPException(status_code=500, detail="Login failed")


@router.post("/validate")
def validate_token(request: ValidateTokenRequest, auth_service: AuthenticationService = Depends(get_auth_service)):
    try:
        if not request.token:
            raise HTTPException(status_code=400, detail="Token is required")
        return {"valid": auth_service.validate_jwt_token(request.token)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error validating token: {e}")
        raise HTTPException(status_code=500, detail="Token validation failed")


@router.post("/logout")
def logout(
    _claims: Dict[str, Any] = Depends(get_current_claims),
    token: Optional[str] = Depends(get_bearer_token),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    try:
        auth_service.clear_jwt_token(token)
        return {"message": "Logged out successfully"}
    except Exception as e:
        logger.error(f"Error during logout: {e}")
        raise HTTPException(status_code=500, detail="Logout failed")


@router.get("/me")
def get_current_user(claims: Dict[str, Any] = Depends(get_current_claims)):
    """Protected endpoint returning the identity carried by the bearer token."""
    return {
        "id": claims.get("sub"),
        "email": claims.get("email"),
        "roles": claims.get("roles") or [],
        "isAuthenticated": True,
    }


# ── GitHub Personal Access Token ─────────────────────────────────────────


@router.get("/github-status")
def github_status(
    _claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    return {
        "githubAuthenticated": auth_service.is_authenticated,
        "apiAuthenticated": auth_service.is_api_authenticated,
    }


@router.put("/github-token")
def set_github_token(
    request: GitHubTokenRequest,
    _claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    try:
        auth_service.set_token(request.token)
        return {"message": "GitHub token configured", "githubAuthenticated": True}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error storing GitHub token: {e}")
        raise HTTPException(status_code=500, detail="Failed to store GitHub token")


@router.delete("/github-token")
def clear_github_token(
    _claims: Dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    try:
        auth_service.clear_token()
        return {"message": "GitHub token cleared", "githubAuthenticated": False}
    except Exception as e:
        logger.error(f"Error clearing GitHub token: {e}")
        raise HTTPException(status_code=500, detail="Failed to clear GitHub token")
