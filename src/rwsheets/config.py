"""Centralized credential configuration.

Credentials live in the rwsheets repo root by default:
    .env                    - RWSHEETS_* settings
    google/credentials.json - Google OAuth client credentials
    google/token.json       - Google OAuth tokens

This module auto-loads the .env file on import. The credential and token
locations can be overridden with the RWSHEETS_CREDENTIALS and RWSHEETS_TOKEN
environment variables.
"""

import os
from pathlib import Path

# __file__ is src/rwsheets/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
GOOGLE_DIR = REPO_ROOT / "google"

ENV_FILE = REPO_ROOT / ".env"
DEFAULT_CREDENTIALS = GOOGLE_DIR / "credentials.json"
DEFAULT_TOKEN = GOOGLE_DIR / "token.json"

CREDENTIALS_VAR = "RWSHEETS_CREDENTIALS"
TOKEN_VAR = "RWSHEETS_TOKEN"
SSID_VAR = "RWSHEETS_SSID"
GID_VAR = "RWSHEETS_GID"


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            # Env vars take precedence
            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def credentials_path() -> Path:
    """Path of the OAuth client credentials file."""
    value = os.environ.get(CREDENTIALS_VAR)
    return Path(value) if value else DEFAULT_CREDENTIALS


def token_path() -> Path:
    """Path of the stored OAuth token file."""
    value = os.environ.get(TOKEN_VAR)
    return Path(value) if value else DEFAULT_TOKEN


def default_spreadsheet() -> tuple[str | None, int | None]:
    """Get the default spreadsheet ID and sheet GID from the environment.

    Returns:
        Tuple of (ssid, gid); either may be None when unset.

    Raises:
        ValueError: If RWSHEETS_GID is set but is not an integer.
    """
    ssid = os.environ.get(SSID_VAR) or None
    gid_str = os.environ.get(GID_VAR)
    if not gid_str:
        return ssid, None

    try:
        gid = int(gid_str)
    except ValueError as e:
        raise ValueError(f"{GID_VAR} must be an integer sheet ID, got {gid_str!r}") from e
    return ssid, gid


def ensure_google_dir() -> Path:
    """Create google credentials directory if it doesn't exist.

    Returns:
        Path to google directory.
    """
    GOOGLE_DIR.mkdir(parents=True, exist_ok=True)
    return GOOGLE_DIR


def get_config_status() -> dict:
    """Get status of the configured credentials and defaults.

    Returns:
        Dictionary with configuration status.
    """
    creds = credentials_path()
    token = token_path()
    return {
        "repo_root": str(REPO_ROOT),
        "env_file": ENV_FILE.exists(),
        "google": {
            "credentials_path": str(creds),
            "credentials": creds.exists(),
            "token_path": str(token),
            "token": token.exists(),
        },
        "spreadsheet": {
            "ssid": bool(os.environ.get(SSID_VAR)),
            "gid": bool(os.environ.get(GID_VAR)),
        },
    }


# Auto-load .env from repo root on import
_loaded = _load_env_file(ENV_FILE)
