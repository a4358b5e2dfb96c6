"""InNoHassle identity-service token provider.

:class:`SessionTokenProvider` exchanges identity-service session cookies
for a bearer token at ``GET {accounts_url}/tokens/generate-my-token``.

Session cookies are resolved from (first match wins):

1. The ``cookies`` constructor argument.
2. The ``SPORTCLUB_SESSION_COOKIES`` environment variable, in ``Cookie``
   header syntax (``name=value; other=value``).
3. The ``sessionCookies`` entry of client-local storage, written by
   ``sportclub auth setup``.
"""

import os

import requests

from sportclub.auth.interfaces import TokenProvider
from sportclub.auth.storage import (
    SESSION_COOKIES_KEY,
    LocalStorage,
    load_cookies as _load_stored_cookies,
    load_token as _load_stored_token,
    save_token as _save_token,
)
from sportclub.config import Settings
from sportclub.core.exceptions import AuthUnavailableError
from sportclub.logging_utils import get_logger

logger = get_logger(__name__)

_ENV_SESSION_COOKIES = "SPORTCLUB_SESSION_COOKIES"
_TOKEN_PATH = "/tokens/generate-my-token"


def parse_cookie_header(header: str) -> dict[str, str]:
    """Parse ``name=value; other=value`` into a dict.

    Segments without ``=`` are ignored.
    """
    cookies: dict[str, str] = {}
    for part in header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            cookies[name.strip()] = value.strip()
    return cookies


class SessionTokenProvider(TokenProvider):
    """Issues bearer tokens from identity-service session cookies.

    Every call to :meth:`acquire_token` performs a network request and
    unconditionally overwrites the cached token, both in memory and in
    client-local storage.  There is no expiry check.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cookies: dict[str, str] | None = None,
        storage: LocalStorage | None = None,
        session: requests.Session | None = None,
    ):
        """Initialise the token provider.

        Args:
            settings: Connection settings.  Defaults to
                :meth:`Settings.from_env`.
            cookies: Session cookies.  When provided, the environment and
                stored cookies are skipped.
            storage: Client-local storage for the token and cookies.
            session: HTTP session to use (mainly for tests).
        """
        self._settings = settings or Settings.from_env()
        self._cookies = cookies
        self._storage = storage or LocalStorage(self._settings.storage_dir)
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": self._settings.user_agent,
            "Accept": "application/json",
        })
        self._token: str | None = None

    @property
    def token_url(self) -> str:
        """Return the full URL of the token endpoint."""
        return f"{self._settings.accounts_url}{_TOKEN_PATH}"

    # -------------------------
    # TokenProvider interface
    # -------------------------

    def acquire_token(self) -> str:
        """Request a new token and store it.

        Returns:
            The token issued by the identity service.

        Raises:
            AuthUnavailableError: If the endpoint cannot be reached,
                answers with a non-success status, or returns no usable
                ``access_token``.
        """
        url = self.token_url
        logger.debug("Requesting access token from %s", url)
        try:
            response = self._session.get(
                url,
                cookies=self._resolve_cookies(),
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            raise AuthUnavailableError(
                f"Could not reach the identity service at {url}: {exc}"
            ) from exc

        if not response.ok:
            raise AuthUnavailableError(
                "Could not obtain an access token: "
                f"{response.status_code} {response.reason}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise AuthUnavailableError(
                "The identity service returned a malformed token response."
            ) from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthUnavailableError(
                "The identity service response has no access_token."
            )

        self._token = token
        _save_token(self._storage, token)
        logger.debug("Access token acquired and stored")
        return token

    def current_token(self) -> str | None:
        """Return the last acquired token, falling back to storage."""
        if self._token is not None:
            return self._token
        return _load_stored_token(self._storage)

    # -------------------------
    # Internal helpers
    # -------------------------

    def _resolve_cookies(self) -> dict[str, str]:
        """Resolve session cookies from all available sources."""
        # 1. Constructor values (highest priority)
        if self._cookies:
            return dict(self._cookies)

        # 2. Environment variable
        header = os.getenv(_ENV_SESSION_COOKIES)
        if header:
            cookies = parse_cookie_header(header)
            if cookies:
                return cookies

        # 3. Local storage
        return _load_stored_cookies(self._storage)

    def credential_source(self) -> str:
        """Return a human-readable description of where cookies came from.

        Useful for the ``auth status`` CLI command.
        """
        if self._cookies:
            return "constructor arguments"
        if os.getenv(_ENV_SESSION_COOKIES):
            return "environment variables"
        if _load_stored_cookies(self._storage):
            return str(self._storage.path_for(SESSION_COOKIES_KEY))
        return "none"
