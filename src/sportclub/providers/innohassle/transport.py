"""Authenticated request pipeline for the sports API.

:class:`RequestExecutor` acquires a fresh bearer token before every
request, builds the headers, dispatches the request and converts every
failure into one of the library exceptions:

+-----------------------------------+------------------------------------+
| Outcome                           | Result                             |
+===================================+====================================+
| token cannot be obtained          | ``AuthUnavailableError`` (as-is)   |
+-----------------------------------+------------------------------------+
| no HTTP response (DNS, refused,   | ``NetworkError``                   |
| TLS, timeout)                     |                                    |
+-----------------------------------+------------------------------------+
| HTTP 401 / 403                    | ``AuthError``                      |
+-----------------------------------+------------------------------------+
| any other non-2xx                 | ``ApiError``                       |
+-----------------------------------+------------------------------------+
| 2xx with an empty body            | ``None``                           |
+-----------------------------------+------------------------------------+
| 2xx with a non-JSON body          | ``MalformedResponseError``         |
+-----------------------------------+------------------------------------+

There are no retries and no caching.
"""

import json
from typing import Any

import requests

from sportclub.auth.interfaces import TokenProvider
from sportclub.config import Settings
from sportclub.core.exceptions import (
    ApiError,
    AuthError,
    MalformedResponseError,
    NetworkError,
)
from sportclub.logging_utils import get_logger

logger = get_logger(__name__)

_AUTH_STATUSES = (401, 403)


class RequestExecutor:
    """Sends authenticated JSON requests relative to a base URL.

    The executor keeps its own :class:`requests.Session`, separate from
    the token provider's, and never sends cookies on it.
    """

    def __init__(
        self,
        tokens: TokenProvider,
        settings: Settings | None = None,
        session: requests.Session | None = None,
    ):
        """Initialise the executor.

        Args:
            tokens: Source of bearer tokens; called once per request.
            settings: Connection settings.  Defaults to
                :meth:`Settings.from_env`.
            session: HTTP session to use (mainly for tests).
        """
        self._tokens = tokens
        self._settings = settings or Settings.from_env()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self._settings.user_agent})

    def url_for(self, endpoint: str) -> str:
        """Return the absolute URL for *endpoint* (e.g. ``"/clubs"``)."""
        return f"{self._settings.api_base_url}{endpoint}"

    def build_headers(
        self,
        token: str | None,
        multipart: bool = False,
        extra: dict[str, str] | None = None,
    ) -> dict[str, str]:
        """Return the headers for one request.

        Args:
            token: Bearer token; the ``Authorization`` header is omitted
                when it is empty or ``None``.
            multipart: When ``True``, ``Content-Type`` is left for
                :mod:`requests` to set with the multipart boundary.
            extra: Caller headers, applied last so they win.
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if not multipart:
            headers["Content-Type"] = "application/json"
        if extra:
            headers.update(extra)
        return headers

    def execute(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        headers: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Send one authenticated request and return the parsed JSON body.

        Args:
            endpoint: Path relative to the API base URL.
            method: HTTP method.
            body: JSON-serialisable payload.  When *files* is given, this
                is sent as the plain form fields of the multipart body.
            headers: Extra headers that override the defaults.
            files: Multipart file parts in :mod:`requests` format.

        Returns:
            The decoded JSON body, or ``None`` when the body is empty.

        Raises:
            AuthUnavailableError: If the token provider fails.
            NetworkError: If no HTTP response is received.
            AuthError: On HTTP 401 or 403.
            ApiError: On any other non-success status.
            MalformedResponseError: If a success body is not JSON.
        """
        url = self.url_for(endpoint)
        token = self._tokens.acquire_token()
        multipart = files is not None

        if multipart:
            data = body
        elif body is not None:
            data = json.dumps(body)
        else:
            data = None

        # Nothing from earlier responses may leak into this request.
        self.session.cookies.clear()
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                data=data,
                files=files,
                headers=self.build_headers(token, multipart, headers),
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("CORS or network error for %s: %s", url, exc)
            raise NetworkError(url) from exc

        if not response.ok:
            self._raise_for_response(url, response)

        text = response.text
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise MalformedResponseError(url, text) from exc

    def _raise_for_response(self, url: str, response: requests.Response) -> None:
        try:
            details = response.json()
        except ValueError:
            details = None

        logger.error(
            "API Error: %s %s",
            response.status_code,
            response.reason,
            extra={
                "url": url,
                "status": response.status_code,
                "status_text": response.reason,
                "details": details,
            },
        )

        if response.status_code in _AUTH_STATUSES:
            logger.warning(
                "Authentication error for %s. Token may be expired or invalid.",
                url,
            )
            raise AuthError(response.status_code, response.reason, details)
        raise ApiError(response.status_code, response.reason, details)
