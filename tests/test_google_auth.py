"""Tests for Google OAuth authentication."""

import json
import os
import stat

import pytest

from rwsheets.google import (
    AuthorizationRequired,
    CredentialsNotFoundError,
    GoogleOAuth,
    InvalidCredentialsError,
    ScopeMismatchError,
    TokenError,
    new_sheets_service,
)
from rwsheets.google import oauth
from rwsheets.google.oauth import SCOPES

SHEETS_URL = "https://www.googleapis.com/auth/spreadsheets"
DRIVE_URL = "https://www.googleapis.com/auth/drive"


@pytest.fixture
def mock_credentials(tmp_path):
    """Create a mock credentials file."""
    creds = {
        "installed": {
            "client_id": "test-client-id.apps.googleusercontent.com",
            "client_secret": "test-client-secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }
    creds_path = tmp_path / "credentials.json"
    with open(creds_path, "w") as f:
        json.dump(creds, f)
    return creds_path


@pytest.fixture
def mock_token(tmp_path):
    """Create a mock token file."""
    token = {
        "token": "test-access-token",
        "refresh_token": "test-refresh-token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "test-client-id.apps.googleusercontent.com",
        "client_secret": "test-client-secret",
        "scopes": [SHEETS_URL, DRIVE_URL],
        "type": "Bearer",
        "expiry": "2099-01-01T00:00:00Z",
    }
    token_path = tmp_path / "token.json"
    with open(token_path, "w") as f:
        json.dump(token, f)
    return token_path


@pytest.fixture
def fake_build(monkeypatch):
    """Replace googleapiclient's build() and record its calls."""
    calls = []

    def _build(service_name, version, **kwargs):
        calls.append((service_name, version, kwargs))
        return {"service": service_name, "version": version}

    monkeypatch.setattr(oauth, "build", _build)
    return calls


class TestGoogleOAuthBasics:
    """Test basic GoogleOAuth functionality."""

    def test_scope_resolution(self, mock_credentials, tmp_path):
        """Should resolve scope names to URLs."""
        auth = GoogleOAuth(
            scopes=["sheets", "drive_file"],
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        assert auth.required_scopes == [
            SHEETS_URL,
            "https://www.googleapis.com/auth/drive.file",
        ]

    def test_default_scope_is_sheets(self, mock_credentials, tmp_path):
        """Should default to the spreadsheets scope."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        assert auth.required_scopes == [SHEETS_URL]

    def test_unknown_scope_raises(self):
        """Should raise error for unknown scope names."""
        with pytest.raises(ValueError, match="Unknown scope"):
            GoogleOAuth(scopes=["unknown_scope"])

    def test_resolve_scopes(self):
        """Should map names and pass URLs through, naming every unknown scope."""
        assert oauth.resolve_scopes(["sheets", DRIVE_URL]) == [SHEETS_URL, DRIVE_URL]
        with pytest.raises(ValueError, match="sheetz, docs"):
            oauth.resolve_scopes(["sheetz", "sheets", "docs"])

    def test_full_url_scopes_accepted(self, tmp_path):
        """Should accept full scope URLs."""
        with pytest.raises(CredentialsNotFoundError):
            GoogleOAuth(
                scopes=[SHEETS_URL],
                credentials_path=str(tmp_path / "missing.json"),
            )

    def test_credentials_not_found(self, tmp_path):
        """Should raise error when credentials file is missing."""
        with pytest.raises(CredentialsNotFoundError) as exc_info:
            GoogleOAuth(credentials_path=str(tmp_path / "nonexistent.json"))
        assert exc_info.value.path.endswith("nonexistent.json")

    def test_invalid_credentials_format(self, tmp_path):
        """Should reject a credentials file without installed/web keys."""
        creds_path = tmp_path / "credentials.json"
        creds_path.write_text(json.dumps({"type": "service_account"}))

        with pytest.raises(InvalidCredentialsError, match="'installed' or 'web'"):
            GoogleOAuth(credentials_path=str(creds_path))

    def test_credentials_not_json(self, tmp_path):
        """Should reject a credentials file that is not JSON."""
        creds_path = tmp_path / "credentials.json"
        creds_path.write_text("client_id=abc")

        with pytest.raises(InvalidCredentialsError, match="not valid JSON"):
            GoogleOAuth(credentials_path=str(creds_path))

    def test_credentials_missing_secret(self, tmp_path):
        """Should reject client credentials without a secret."""
        creds_path = tmp_path / "credentials.json"
        creds_path.write_text(json.dumps({"installed": {"client_id": "abc"}}))

        with pytest.raises(InvalidCredentialsError, match="client_secret"):
            GoogleOAuth(credentials_path=str(creds_path))

    def test_available_scopes(self):
        """Should have the Sheets and Drive scopes defined."""
        assert SCOPES["sheets"] == SHEETS_URL
        assert "sheets_readonly" in SCOPES
        assert "drive" in SCOPES
        assert "drive_file" in SCOPES
        assert "drive_readonly" in SCOPES


class TestGoogleOAuthWithCredentials:
    """Tests that require mock credentials."""

    def test_load_installed_credentials(self, mock_credentials, tmp_path):
        """Should load installed app credentials."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        assert auth.client_id == "test-client-id.apps.googleusercontent.com"
        assert auth.client_secret == "test-client-secret"

    def test_load_web_credentials(self, tmp_path):
        """Should load web app credentials."""
        creds = {
            "web": {
                "client_id": "web-client-id.apps.googleusercontent.com",
                "client_secret": "web-client-secret",
            }
        }
        creds_path = tmp_path / "credentials.json"
        with open(creds_path, "w") as f:
            json.dump(creds, f)

        auth = GoogleOAuth(
            credentials_path=str(creds_path),
            token_path=str(tmp_path / "token.json"),
        )
        assert auth.client_id == "web-client-id.apps.googleusercontent.com"

    def test_is_authorized_without_token(self, mock_credentials, tmp_path):
        """Should return False when no token exists."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        assert auth.is_authorized() is False

    def test_is_authorized_with_valid_token(self, mock_credentials, mock_token):
        """Should return True when valid token exists."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(mock_token),
        )
        assert auth.is_authorized() is True

    def test_unreadable_token_is_ignored(self, mock_credentials, tmp_path):
        """Should treat a corrupt token file as no token."""
        token_path = tmp_path / "token.json"
        token_path.write_text("{not json")

        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(token_path),
        )
        assert auth.is_authorized() is False

    @pytest.mark.parametrize(
        "content",
        ['["not", "an", "object"]', '{"token": "x", "expiry": "tomorrow"}'],
    )
    def test_malformed_token_is_ignored(self, mock_credentials, tmp_path, content):
        """Should treat a non-object token or a bad expiry as no token."""
        token_path = tmp_path / "token.json"
        token_path.write_text(content)

        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(token_path),
        )
        assert auth.is_authorized() is False
        assert auth.get_token_info() == {"status": "no_token"}

    def test_get_authorization_url(self, mock_credentials, tmp_path):
        """Should generate authorization URL."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        url = auth.get_authorization_url()
        assert "accounts.google.com" in url
        assert "client_id=" in url
        assert "scope=" in url

    def test_get_token_info_no_token(self, mock_credentials, tmp_path):
        """Should return no_token status when no token exists."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        info = auth.get_token_info()
        assert info["status"] == "no_token"

    def test_get_token_info_with_token(self, mock_credentials, mock_token):
        """Should return token info when token exists."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(mock_token),
        )
        info = auth.get_token_info()
        assert info["status"] == "valid"
        assert info["has_refresh_token"] is True
        assert len(info["scopes"]) == 2

    def test_scope_validation_on_token_load(self, mock_credentials, tmp_path):
        """Should reject token with missing scopes."""
        token = {
            "token": "test-access-token",
            "refresh_token": "test-refresh-token",
            "scopes": [SHEETS_URL],
            "expiry": "2099-01-01T00:00:00Z",
        }
        token_path = tmp_path / "token.json"
        with open(token_path, "w") as f:
            json.dump(token, f)

        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(token_path),
            scopes=["sheets", "drive"],
        )
        assert auth.is_authorized() is False

    def test_get_credentials_requires_token(self, mock_credentials, tmp_path):
        """Should raise TokenError when not authorized."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
        )
        with pytest.raises(TokenError):
            auth.get_credentials()

    def test_save_token_rejects_missing_scopes(self, mock_credentials, tmp_path):
        """Should refuse to store a token lacking the required scopes."""
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(tmp_path / "token.json"),
            scopes=["sheets", "drive"],
        )
        with pytest.raises(ScopeMismatchError) as exc_info:
            auth._save_token({"access_token": "abc", "scope": SHEETS_URL})
        assert exc_info.value.missing_scopes == {DRIVE_URL}
        assert not (tmp_path / "token.json").exists()

    def test_save_token_writes_private_file(self, mock_credentials, tmp_path):
        """Should write the token in Google format, readable only by the owner."""
        token_path = tmp_path / "nested" / "token.json"
        auth = GoogleOAuth(
            credentials_path=str(mock_credentials),
            token_path=str(token_path),
        )
        auth._save_token(
            {
                "access_token": "abc",
                "refresh_token": "def",
                "token_type": "Bearer",
                "expires_at": 4102444800,
                "scope": SHEETS_URL,
            }
        )

        saved = json.loads(token_path.read_text())
        assert saved["token"] == "abc"
        assert saved["refresh_token"] == "def"
        assert saved["scopes"] == [SHEETS_URL]
        if os.name == "posix":
            assert stat.S_IMODE(token_path.stat().st_mode) == 0o600


class TestNewSheetsService:
    """Tests for building an authenticated Sheets service."""

    def test_builds_sheets_v4_with_cached_token(self, mock_credentials, mock_token, fake_build):
        """Should build the Sheets v4 service from a cached token."""
        service = new_sheets_service(mock_credentials, mock_token, "sheets")

        assert service == {"service": "sheets", "version": "v4"}
        name, version, kwargs = fake_build[0]
        assert (name, version) == ("sheets", "v4")
        assert kwargs["credentials"].token == "test-access-token"

    def test_no_token_without_prompt_raises(self, mock_credentials, tmp_path, fake_build):
        """Should raise AuthorizationRequired with the consent URL."""
        with pytest.raises(AuthorizationRequired) as exc_info:
            new_sheets_service(mock_credentials, tmp_path / "token.json", prompt=None)

        assert "accounts.google.com" in exc_info.value.authorization_url
        assert fake_build == []

    def test_empty_redirect_url_raises(self, mock_credentials, tmp_path, fake_build, capsys):
        """Should raise TokenError when no redirect URL is entered."""
        with pytest.raises(TokenError, match="No redirect URL"):
            new_sheets_service(mock_credentials, tmp_path / "token.json", prompt=lambda _: "  ")

        assert "accounts.google.com" in capsys.readouterr().out

    def test_interactive_flow_saves_token(
        self, mock_credentials, tmp_path, fake_build, monkeypatch
    ):
        """Should exchange the pasted redirect URL and cache the token."""
        token_path = tmp_path / "token.json"
        redirects = []

        def fake_fetch_token(self, authorization_response):
            redirects.append(authorization_response)
            token = {
                "access_token": "fresh-token",
                "refresh_token": "fresh-refresh",
                "token_type": "Bearer",
                "expires_at": 4102444800,
                "scope": SHEETS_URL,
            }
            self.session.token = token
            self._save_token(token)
            return token

        monkeypatch.setattr(GoogleOAuth, "fetch_token", fake_fetch_token)

        new_sheets_service(
            mock_credentials,
            token_path,
            "sheets",
            prompt=lambda _: "http://localhost:0/?code=abc&state=xyz",
        )

        assert redirects == ["http://localhost:0/?code=abc&state=xyz"]
        assert json.loads(token_path.read_text())["token"] == "fresh-token"
        assert fake_build[0][2]["credentials"].token == "fresh-token"

    def test_missing_credentials_file(self, tmp_path):
        """Should surface CredentialsNotFoundError unchanged."""
        with pytest.raises(CredentialsNotFoundError):
            new_sheets_service(tmp_path / "missing.json", tmp_path / "token.json")
