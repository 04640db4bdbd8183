"""Google OAuth management using Authlib.

This module provides OAuth 2.0 authentication for the Sheets API with:
- Interactive authorization with the token cached to disk
- Automatic token refresh with scope preservation
- Sheets (and other Google API) service creation

Credentials are stored in the rwsheets repo by default:
    google/credentials.json - OAuth client credentials
    google/token.json       - OAuth tokens

Sheets scope options:
    drive                 - See, edit, create, and delete all of your Google Drive files
    drive_file            - See, edit, create, and delete only the Drive files you use with this app
    drive_readonly        - See and download all your Google Drive files
    sheets                - See, edit, create, and delete all your Google Sheets spreadsheets
    sheets_readonly       - See all your Google Sheets spreadsheets
"""

import json
import logging
import os
import webbrowser
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build

from rwsheets import config
from rwsheets.google.exceptions import (
    AuthorizationRequired,
    CredentialsNotFoundError,
    InvalidCredentialsError,
    ScopeMismatchError,
    TokenError,
)

logger = logging.getLogger(__name__)


SCOPES = {
    "drive": "https://www.googleapis.com/auth/drive",
    "drive_readonly": "https://www.googleapis.com/auth/drive.readonly",
    "drive_file": "https://www.googleapis.com/auth/drive.file",
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "sheets_readonly": "https://www.googleapis.com/auth/spreadsheets.readonly",
}

DEFAULT_SCOPES = ["sheets"]


def resolve_scopes(scopes: list[str]) -> list[str]:
    """Map scope names to URLs; full ``https://`` URLs pass through.

    Raises:
        ValueError: If a name is neither a known scope nor a URL.
    """
    unknown = [s for s in scopes if not s.startswith("https://") and s not in SCOPES]
    if unknown:
        raise ValueError(
            f"Unknown scope: {', '.join(unknown)}. Use full URL or one of: {list(SCOPES)}"
        )
    return [SCOPES.get(s, s) for s in scopes]


def _authlib_token(stored: dict[str, Any]) -> dict[str, Any]:
    """Convert a google-auth token file into the dict OAuth2Session expects."""
    expiry = stored.get("expiry")
    if isinstance(expiry, str):
        expiry = datetime.fromisoformat(expiry.replace("Z", "+00:00")).timestamp()
    return {
        "access_token": stored.get("token"),
        "refresh_token": stored.get("refresh_token"),
        "token_type": stored.get("type", "Bearer"),
        "expires_at": expiry,
        "scope": " ".join(stored.get("scopes", [])),
    }


class GoogleOAuth:
    """Google OAuth management using Authlib.

    Handles OAuth 2.0 authorization flow, token management, and
    Google API service creation.

    Example:
        >>> auth = GoogleOAuth(scopes=["sheets"])
        >>> if not auth.is_authorized():
        ...     auth.authorize_interactive()
        >>> sheets_service = auth.build_service("sheets", "v4")
    """

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    REVOKE_URL = "https://oauth2.googleapis.com/revoke"

    def __init__(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_path: str | Path | None = None,
        credentials_path: str | Path | None = None,
    ):
        """Initialize Google OAuth.

        Args:
            scopes: List of scope names (e.g., ["sheets"]) or full URLs.
                   If None, defaults to ["sheets"].
            client_id: OAuth client ID (loaded from credentials file if not provided).
            client_secret: OAuth client secret (loaded from credentials file if not provided).
            token_path: Path to store/load tokens. Defaults to google/token.json.
            credentials_path: Path to OAuth credentials file. Defaults to google/credentials.json.
        """
        self.token_path = Path(token_path) if token_path else config.token_path()
        self.credentials_path = (
            Path(credentials_path) if credentials_path else config.credentials_path()
        )

        self.required_scopes = resolve_scopes(scopes or DEFAULT_SCOPES)

        if not client_id or not client_secret:
            client_id, client_secret = self._load_client_credentials()

        self.client_id = client_id
        self.client_secret = client_secret

        self.session = OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.required_scopes),
            redirect_uri="http://localhost:0",
            token=self._load_token(),
            update_token=self._save_token,
            token_endpoint=self.TOKEN_URL,
            grant_type="refresh_token",
            token_endpoint_auth_method="client_secret_post",
        )

        self._state: str | None = None

    def _load_client_credentials(self) -> tuple[str, str]:
        """Load OAuth client credentials from file."""
        path = str(self.credentials_path)
        try:
            with open(self.credentials_path) as f:
                creds = json.load(f)
        except FileNotFoundError as e:
            raise CredentialsNotFoundError(path) from e
        except OSError as e:
            logger.warning(f"Unable to read client secret file {path}: {e}")
            raise CredentialsNotFoundError(path) from e
        except json.JSONDecodeError as e:
            raise InvalidCredentialsError(path, f"not valid JSON ({e})") from e

        # Handle both web and installed app credential formats
        if "installed" in creds:
            app_creds = creds["installed"]
        elif "web" in creds:
            app_creds = creds["web"]
        else:
            raise InvalidCredentialsError(path, "expected 'installed' or 'web' key")

        try:
            return app_creds["client_id"], app_creds["client_secret"]
        except KeyError as e:
            raise InvalidCredentialsError(path, f"missing {e.args[0]!r}") from e

    def _load_token(self) -> dict[str, Any] | None:
        """Load token from storage."""
        if not self.token_path.exists():
            logger.info("No existing token found")
            return None

        # JSONDecodeError and a bad ISO expiry both surface as ValueError
        try:
            with open(self.token_path) as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("expected a JSON object")
            token = _authlib_token(stored)
        except (OSError, ValueError) as e:
            logger.warning(f"Unable to read token file {self.token_path}: {e}")
            return None

        granted = set(token["scope"].split())
        missing = set(self.required_scopes) - granted
        if missing:
            logger.warning(f"Token missing required scopes: {missing}")
            return None

        logger.info(f"Loaded token with scopes: {granted}")
        return token

    def _save_token(
        self,
        token: dict[str, Any],
        refresh_token: str | None = None,
        access_token: str | None = None,
    ):
        """Save token to storage (Authlib callback)."""
        if access_token:
            token["access_token"] = access_token
        if refresh_token:
            token["refresh_token"] = refresh_token

        granted = set(token.get("scope", "").split())
        missing = set(self.required_scopes) - granted
        if missing:
            raise ScopeMismatchError(missing)

        # google.oauth2.credentials reads this layout
        stored = {
            "token": token["access_token"],
            "refresh_token": token.get("refresh_token"),
            "token_uri": self.TOKEN_URL,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scopes": sorted(granted),
            "type": token.get("token_type", "Bearer"),
            "expiry": token.get("expires_at"),
            "_class": "google.oauth2.credentials.Credentials",
        }

        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_path, "w") as f:
            json.dump(stored, f, indent=2)
        os.chmod(self.token_path, 0o600)
        logger.info(f"Token saved to {self.token_path} with scopes: {granted}")

    def is_authorized(self) -> bool:
        """True when a token is loaded and it grants every required scope."""
        token = self.session.token
        if not token:
            return False
        return set(self.required_scopes) <= set(token.get("scope", "").split())

    def get_authorization_url(self) -> str:
        """Start OAuth authorization flow.

        Returns:
            Authorization URL for user to visit.
        """
        authorization_url, state = self.session.create_authorization_url(
            self.AUTHORIZE_URL,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )

        self._state = state
        return authorization_url

    def fetch_token(self, authorization_response: str) -> dict[str, Any]:
        """Complete authorization flow and fetch token.

        Args:
            authorization_response: The full redirect URL from OAuth callback.

        Returns:
            The fetched OAuth token dict.
        """
        token = self.session.fetch_token(
            self.TOKEN_URL,
            authorization_response=authorization_response,
            client_secret=self.client_secret,
        )

        self._save_token(token)
        return token

    def authorize_interactive(
        self,
        prompt: Callable[[str], str] = input,
        open_browser: bool = False,
    ) -> dict[str, Any]:
        """Run the consent flow from a terminal and cache the resulting token.

        Prints the authorization URL, then reads the redirect URL back
        through ``prompt``.

        Args:
            prompt: Callable used to read the redirect URL.
            open_browser: Also open the URL in the default browser.

        Returns:
            The fetched OAuth token dict.

        Raises:
            TokenError: If no redirect URL is given or the exchange fails.
        """
        url = self.get_authorization_url()
        print(
            "Go to the following link in your browser, then paste the URL "
            f"you are redirected to:\n{url}\n"
        )
        if open_browser:
            webbrowser.open(url)

        redirect_url = prompt("Paste redirect URL: ").strip()
        if not redirect_url:
            raise TokenError("No redirect URL provided")

        try:
            return self.fetch_token(redirect_url)
        except OAuth2Error as e:
            raise TokenError(f"Unable to retrieve token from web: {e}") from e

    def get_credentials(self) -> GoogleCredentials:
        """Get Google Credentials object for API client libraries.

        Returns:
            Google Credentials object with current token.

        Raises:
            TokenError: If not authorized or token refresh fails.
        """
        if not self.is_authorized():
            raise TokenError("Not authorized or missing required scopes")

        # Refresh if expired
        expires_at = self.session.token.get("expires_at", 0)
        if expires_at and expires_at < datetime.now().timestamp():
            logger.info("Token expired, refreshing...")
            try:
                self.session.refresh_token(
                    self.TOKEN_URL,
                    refresh_token=self.session.token.get("refresh_token"),
                )
            except OAuth2Error as e:
                raise TokenError(f"Failed to refresh token: {e}") from e

        return GoogleCredentials(
            token=self.session.token["access_token"],
            refresh_token=self.session.token.get("refresh_token"),
            token_uri=self.TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.required_scopes,
        )

    def build_service(self, service_name: str = "sheets", version: str = "v4"):
        """Build a Google API service with current credentials.

        Args:
            service_name: Name of the service (e.g., 'sheets', 'drive').
            version: API version (e.g., 'v4').

        Returns:
            Google API service object.
        """
        creds = self.get_credentials()
        return build(service_name, version, credentials=creds, cache_discovery=False)

    def revoke_token(self):
        """Revoke the current token and clear local storage."""
        if not self.session.token:
            logger.warning("No token to revoke")
            return

        try:
            self.session.post(
                self.REVOKE_URL,
                params={"token": self.session.token["access_token"]},
            )
        except requests.RequestException as e:
            logger.warning(f"Failed to revoke token remotely: {e}")

        if self.token_path.exists():
            self.token_path.unlink()

        logger.info("Token revoked successfully")

    def get_token_info(self) -> dict[str, Any]:
        """Summarize the loaded token: status, scopes, time left, refresh token."""
        token = self.session.token
        if not token:
            return {"status": "no_token"}

        status, expires_in = "valid", "unknown"
        expires_at = token.get("expires_at")
        if expires_at:
            remaining = expires_at - datetime.now().timestamp()
            expires_in = str(timedelta(seconds=max(0, remaining)))
            if remaining < 0:
                status = "expired"

        return {
            "status": status,
            "scopes": token.get("scope", "").split(),
            "expires_in": expires_in,
            "has_refresh_token": bool(token.get("refresh_token")),
        }


def new_sheets_service(
    credential_file: str | Path,
    token_file: str | Path,
    *scopes: str,
    prompt: Callable[[str], str] | None = input,
):
    """Create an authenticated Google Sheets v4 service.

    If ``token_file`` does not hold a usable token, the interactive consent
    flow runs and the new token is written to ``token_file``.

    Args:
        credential_file: Path to the GCP OAuth2 client credentials JSON.
        token_file: Path to the cached token created with the given scopes.
        *scopes: Scope names or URLs needed for the Sheets service.
                 Defaults to ["sheets"].
        prompt: Callable used to read the redirect URL. Pass None to raise
                AuthorizationRequired instead of prompting.

    Returns:
        Google Sheets API service object.

    Raises:
        CredentialsNotFoundError: If the credentials file cannot be read.
        InvalidCredentialsError: If the credentials file is malformed.
        AuthorizationRequired: If consent is needed and prompt is None.
        TokenError: If authorization or token refresh fails.
    """
    auth = GoogleOAuth(
        scopes=list(scopes) or None,
        token_path=token_file,
        credentials_path=credential_file,
    )

    if not auth.is_authorized():
        if prompt is None:
            raise AuthorizationRequired(auth.get_authorization_url())
        auth.authorize_interactive(prompt)

    return auth.build_service("sheets", "v4")
