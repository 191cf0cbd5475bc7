"""
MCP surface bookkeeping: access checks and capability description shared by
the REST controller and the FastMCP tool server.
"""
import logging
from typing import Any, Dict, Optional

from app.auth_service import AuthenticationService
from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

MCP_VERSION = "1.0.0"

CAPABILITIES = [
    "github_repository_management",
    "github_issue_management",
    "authentication_required",
    "jwt_token_support",
]


class McpServerService:

    def __init__(self, auth_service: AuthenticationService, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._auth_service = auth_service
        self._running = False

    @property
    def is_authentication_required(self) -> bool:
        return self._settings.mcp_require_auth

    @property
    def is_running(self) -> bool:
        return self._running

    def validate_api_access(self, token: Optional[str]) -> bool:
        """Whether a caller presenting ``token`` may use the MCP surface."""
        if not self.is_authentication_required:
            return True
        if not token:
            logger.warning("MCP access denied: missing token")
            return False
        valid = self._auth_service.validate_jwt_token(token)
        if not valid:
            logger.warning("MCP access denied: invalid or expired token")
        return valid

    def get_capabilities(self, surface: str = "rest") -> Dict[str, Any]:
        """
        Capability description for one surface. Only the REST surface checks
        bearer tokens; the stdio transport is a trusted local pipe.
        """
        return {
            "version": MCP_VERSION,
            "capabilities": list(CAPABILITIES),
            "authentication": {
                "type": "JWT",
                "required": surface == "rest" and self.is_authentication_required,
                "schemes": ["Bearer"],
            },
        }

    def start(self) -> None:
        logger.info("MCP Server service starting...")
        self._running = True

    def stop(self) -> None:
        logger.info("MCP Server service stopping...")
        self._running = False
