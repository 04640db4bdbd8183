"""Google OAuth utilities for the Sheets API."""

from rwsheets.google.exceptions import (
    AuthorizationRequired,
    CredentialsNotFoundError,
    GoogleAuthError,
    InvalidCredentialsError,
    ScopeMismatchError,
    TokenError,
)
from rwsheets.google.oauth import GoogleOAuth, new_sheets_service

__all__ = [
    "GoogleOAuth",
    "new_sheets_service",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "InvalidCredentialsError",
    "TokenError",
    "ScopeMismatchError",
    "AuthorizationRequired",
]
