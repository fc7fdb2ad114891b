"""
Google API service initialization.

Shared by all adapters. Loads the token file, builds service objects.
Uses lru_cache for thread-safe caching.
"""

from functools import lru_cache

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource

from oauth_config import API_TIMEOUT, SCOPES, TOKEN_FILE

__all__ = [
    "get_docs_service",
    "get_gmail_service",
    "clear_service_cache",
]


def _get_credentials() -> Credentials:
    """Load authorized-user credentials from TOKEN_FILE."""
    if not TOKEN_FILE.exists():
        raise FileNotFoundError(
            f"{TOKEN_FILE} not found. Set UNFOLD_TOKEN_FILE to an authorized-user token."
        )
    return Credentials.from_authorized_user_file(str(TOKEN_FILE), scopes=SCOPES)


def _get_authorized_http(creds: Credentials) -> google_auth_httplib2.AuthorizedHttp:
    """Create authorized HTTP client with timeout."""
    http = httplib2.Http(timeout=API_TIMEOUT)
    return google_auth_httplib2.AuthorizedHttp(creds, http=http)


@lru_cache(maxsize=1)
def get_docs_service() -> Resource:
    """Get authenticated Google Docs API service (cached, thread-safe)."""
    creds = _get_credentials()
    return build("docs", "v1", http=_get_authorized_http(creds))


@lru_cache(maxsize=1)
def get_gmail_service() -> Resource:
    """Get authenticated Gmail API service (cached, thread-safe)."""
    creds = _get_credentials()
    return build("gmail", "v1", http=_get_authorized_http(creds))


def clear_service_cache() -> None:
    """Clear cached services. Useful for testing or after re-auth."""
    get_docs_service.cache_clear()
    get_gmail_service.cache_clear()
