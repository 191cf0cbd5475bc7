"""
Authentication service.

Two layers of credentials live here:

* the GitHub Personal Access Token, persisted to ``auth.json`` in the data
  directory and pushed to listeners (the GitHub client) whenever it changes;
* locally issued JWTs that guard the REST and MCP surfaces.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from app.config import Settings, get_settings
from app.storage import delete_file, get_data_dir, read_json_file, write_json_file
from auth.jwt_handler import create_access_token, decode_access_token

logger = logging.getLogger(__name__)

AUTH_FILE_NAME = "auth.json"


class AuthenticationService:
    """Holds the GitHub PAT and issues/validates API JWTs."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._auth_file = get_data_dir(self._settings.data_dir) / AUTH_FILE_NAME
        self._lock = threading.Lock()
        self._current_token: Optional[str] = None
        self._current_jwt: Optional[str] = None
        self._revoked_jtis: Set[str] = set()
        self._listeners: List[Callable[[bool], None]] = []
        self._load_stored_token()

    # ── GitHub PAT ────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return bool(self._current_token)

    @property
    def current_token(self) -> Optional[str]:
        return self._current_token

    def subscribe(self, callback: Callable[[bool], None]) -> None:
        """Register a callback invoked with ``is_authenticated`` after every PAT change."""
        self._listeners.append(callback)

    def set_token(self, token: str) -> None:
        if not token or not token.strip():
            raise ValueError("GitHub token must not be empty.")
        with self._lock:
            self._current_token = token.strip()
            self._save_token()
        self._notify()
        logger.info("GitHub token configured")

    def clear_token(self) -> None:
        with self._lock:
            self._current_token = None
            self._delete_stored_token()
        self._notify()
        logger.info("GitHub token cleared")

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self.is_authenticated)

    def _load_stored_token(self) -> None:
        # A token from the environment applies until one is stored explicitly
        self._current_token = self._settings.github_token or None
        try:
            data = read_json_file(self._auth_file, default={}) or {}
            if data.get("token"):
                self._current_token = data["token"]
        except Exception as e:
            logger.error(f"Error loading stored token: {e}")

    def _save_token(self) -> None:
        try:
            write_json_file(self._auth_file, {"token": self._current_token})
        except Exception as e:
            logger.error(f"Error saving token: {e}")

    def _delete_stored_token(self) -> None:
        try:
            delete_file(self._auth_file)
        except Exception as e:
            logger.error(f"Error deleting stored token: {e}")

    # ── API JWTs ──────────────────────────────────────────────────────────

    def generate_jwt_token(self, user_id: str, email: str, roles: Optional[Sequence[str]] = None) -> str:
        """Issue an HMAC-signed JWT for ``user_id`` with the configured expiry."""
        token = create_access_token(
            {"sub": user_id, "email": email, "roles": list(roles or [])},
            settings=self._settings,
        )
        with self._lock:
            self._current_jwt = token
        logger.info(f"Issued API token for user {user_id}")
        return token

    def token_expiry(self, token: str) -> Optional[datetime]:
        claims = self.decode_jwt_token(token)
        if not claims:
            return None
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

    def decode_jwt_token(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Claims of a valid, non-revoked token, else None."""
        if not token:
            return None
        claims = decode_access_token(token, settings=self._settings)
        if claims is None:
            return None
        with self._lock:
            if claims.get("jti") in self._revoked_jtis:
                return None
        return claims

    def validate_jwt_token(self, token: Optional[str]) -> bool:
        return self.decode_jwt_token(token) is not None

    def clear_jwt_token(self, token: Optional[str] = None) -> None:
        """Revoke ``token`` (or the last issued token) for the lifetime of the process."""
        with self._lock:
            target = token or self._current_jwt
            if target == self._current_jwt:
                self._current_jwt = None
        if not target:
            return
        claims = decode_access_token(target, settings=self._settings)
        if claims and claims.get("jti"):
            with self._lock:
                self._revoked_jtis.add(claims["jti"])
        logger.info("API token revoked")

    @property
    def is_api_authenticated(self) -> bool:
        return self.validate_jwt_token(self._current_jwt)
