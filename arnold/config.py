"""Configuration discovery for the arnold CLI."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .logger import get_logger

log = get_logger(__name__)

RC_FILENAME = ".arnoldrc"
DEFAULT_PORT = "3000"
VALID_APIS = ("shop", "admin")

# rc/env key -> ArnoldConfig attribute
RC_KEYS = {
    "ARNOLD_SHOP_API": "shop_api",
    "ARNOLD_ADMIN_API": "admin_api",
}


class InvalidApiError(ValueError):
    """Raised when an API selector is neither "shop" nor "admin"."""


@dataclass
class ArnoldConfig:
    shop_api: str
    admin_api: str


def find_rc_file(start: Optional[str] = None) -> Optional[Path]:
    """
    Look for an rc file in the start directory and each of its parents.

    Args:
        start: Directory to start from, defaults to the working directory

    Returns:
        Path to the nearest rc file, or None if there is none up to the root
    """
    directory = Path(start or os.getcwd()).resolve()
    while True:
        candidate = directory / RC_FILENAME
        if candidate.is_file():
            return candidate
        if directory.parent == directory:
            return None
        directory = directory.parent


def parse_rc_file(path: str) -> Dict[str, str]:
    """
    Parse an rc file of KEY=VALUE lines.

    Blank lines and lines starting with '#' are skipped, values may contain
    '=' and unknown keys are ignored.

    Returns:
        Mapping of ArnoldConfig attribute names to values
    """
    config: Dict[str, str] = {}
    with open(path, "r") as file:
        for line in file:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            key, _, value = line.partition("=")
            attribute = RC_KEYS.get(key.strip())
            if attribute is not None:
                config[attribute] = value.strip()
    return config


def _base_url() -> str:
    return f"http://localhost:{os.getenv('PORT', DEFAULT_PORT)}"


def load_config() -> ArnoldConfig:
    """
    Resolve the API endpoints.

    Priority for each endpoint: ARNOLD_*_API environment variable, then the
    nearest .arnoldrc, then localhost on $PORT (3000 when unset).
    """
    rc_file = find_rc_file()
    rc_config = parse_rc_file(str(rc_file)) if rc_file else {}
    if rc_file:
        log.debug("Using rc file %s", rc_file)

    base_url = _base_url()
    return ArnoldConfig(
        shop_api=os.getenv("ARNOLD_SHOP_API")
        or rc_config.get("shop_api")
        or f"{base_url}/shop-api",
        admin_api=os.getenv("ARNOLD_ADMIN_API")
        or rc_config.get("admin_api")
        or f"{base_url}/admin-api",
    )


def validate_api(api: str) -> None:
    if api not in VALID_APIS:
        raise InvalidApiError(f'Invalid API "{api}": must be "shop" or "admin"')


def get_api_url(api: str, config: ArnoldConfig) -> str:
    validate_api(api)
    return config.shop_api if api == "shop" else config.admin_api


def get_session_dir() -> Path:
    return Path.home() / ".arnold"
