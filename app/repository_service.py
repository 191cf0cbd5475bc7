"""
Watched repositories: repositories the user pinned for quick access.

The service owns its list: every read and every mutation goes through one
lock, and readers only ever see snapshot copies.
"""
import threading
from typing import Callable, List, Optional

from app.config import Settings, get_settings
from app.logger import get_logger
from app.models import GitHubRepository
from app.storage import get_data_dir, read_json_file, write_json_file

logger = get_logger(__name__)

WATCHED_FILE_NAME = "watched-repositories.json"


class RepositoryService:

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._file = get_data_dir(self._settings.data_dir) / WATCHED_FILE_NAME
        self._lock = threading.Lock()
        self._watched: List[GitHubRepository] = []
        self._listeners: List[Callable[[], None]] = []
        self._load()

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def get_watched_repositories(self) -> List[GitHubRepository]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._watched]

    def is_watched(self, repository_id: int) -> bool:
        with self._lock:
            return any(r.id == repository_id for r in self._watched)

    def add_repository(self, repository: GitHubRepository) -> bool:
        """Add a repository unless one with the same id is already watched."""
        with self._lock:
            if any(r.id == repository.id for r in self._watched):
                return False
            self._watched.append(repository.model_copy(deep=True))
            self._save()
        self._notify()
        logger.info(f"Added repository to watchlist: {repository.full_name}")
        return True

    def remove_repository(self, repository_id: int) -> bool:
        with self._lock:
            repository = next((r for r in self._watched if r.id == repository_id), None)
            if repository is None:
                return False
            self._watched.remove(repository)
            self._save()
        self._notify()
        logger.info(f"Removed repository from watchlist: {repository.full_name}")
        return True

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _load(self) -> None:
        try:
            raw = read_json_file(self._file, default=[]) or []
            self._watched = [GitHubRepository.model_validate(r) for r in raw]
            if self._watched:
                logger.info(f"Loaded {len(self._watched)} watched repositories")
        except Exception as e:
            logger.error(f"Error loading watched repositories: {e}")
            self._watched = []

    def _save(self) -> None:
        # Caller holds the lock
        try:
            write_json_file(self._file, [r.model_dump(mode="json") for r in self._watched])
        except Exception as e:
            logger.error(f"Error saving watched repositories: {e}")
