import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from app.auth_service import AuthenticationService
from app.date_utils import utcnow
from app.dependencies import get_auth_service, get_mcp_service
from app.mcp_service import McpServerService
from auth.oauth2 import get_current_claims

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/mcp",
    tags=["MCP"],
    dependencies=[Depends(get_current_claims)],
)


@router.get("/status")
def get_status(
    mcp_service: McpServerService = Depends(get_mcp_service),
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    try:
        return {
            "serverStatus": "running",
            "authenticationRequired": mcp_service.is_authentication_required,
            "githubAuthenticated": auth_service.is_authenticated,
            "apiAuthenticated": auth_service.is_api_authenticated,
            "timestamp": utcnow().isoformat(),
        }
    except Exception as e:
        logger.error(f"Error getting MCP status: {e}")
        raise HTTPException(status_code=500, detail="Failed to get server status")


@router.get("/capabilities")
def get_capabilities(mcp_service: McpServerService = Depends(get_mcp_service)):
    try:
        return mcp_service.get_capabilities()
    except Exception as e:
        logger.error(f"Error getting MCP capabilities: {e}")
        raise HTTPException(status_code=500, detail="Failed to get capabilities")


@router.post("/validate-access")
def validate_access(
    authorization: Optional[str] = Header(default=None),
    mcp_service: McpServerService = Depends(get_mcp_service),
):
    try:
        token = authorization.replace("Bearer ", "", 1).strip() if authorization else None
        is_valid = mcp_service.validate_api_access(token)
        return {
            "valid": is_valid,
            "message": "Access granted" if is_valid else "Access denied - invalid or missing token",
        }
    except Exception as e:
        logger.error(f"Error validating MCP access: {e}")
        raise HTTPException(status_code=500, detail="Access validation failed")
