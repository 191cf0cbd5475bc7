"""
Flat JSON file persistence for local state (PAT, watchlist, saved filters).
Single-writer assumption: callers serialize access with their own locks.
"""
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def get_data_dir(data_dir: str) -> Path:
    """
    Resolve the data directory, creating it if needed.

    Args:
        data_dir: Configured data directory

    Returns:
        Path to the data directory
    """
    path = Path(data_dir)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created data directory: {path}")
    return path


def read_json_file(path: Path, default: Any = None) -> Any:
    """Read and parse a JSON file, returning ``default`` if it does not exist."""
    if not path.exists():
        return default
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def write_json_file(path: Path, data: Any) -> None:
    """Write ``data`` as indented JSON, replacing the file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
    tmp_path.replace(path)


def delete_file(path: Path) -> bool:
    """Delete a file if present. Returns True when something was removed."""
    if path.exists():
        path.unlink()
        return True
    return False
