"""Per-API session token storage."""

from pathlib import Path
from typing import Optional

from .config import get_session_dir
from .logger import get_logger

log = get_logger(__name__)


def token_path(api: str, session_dir: Optional[Path] = None) -> Path:
    return Path(session_dir or get_session_dir()) / f"{api}.token"


def read_token(api: str, session_dir: Optional[Path] = None) -> Optional[str]:
    """Return the stored token for an API, or None if there is no session."""
    path = token_path(api, session_dir)
    if not path.is_file():
        return None
    log.debug("Reading session token from %s", path)
    return path.read_text().strip()


def write_token(api: str, token: str, session_dir: Optional[Path] = None) -> Path:
    """
    Store a session token, creating the session directory if needed.

    Returns:
        Path of the written token file
    """
    path = token_path(api, session_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token.strip())
    log.debug("Stored session token in %s", path)
    return path


def clear_token(api: str, session_dir: Optional[Path] = None) -> bool:
    """Delete the stored token. Returns False when there was nothing to delete."""
    path = token_path(api, session_dir)
    if not path.exists():
        return False
    path.unlink()
    log.debug("Removed session token %s", path)
    return True
