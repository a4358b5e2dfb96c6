"""Domain exceptions for the sportclub library."""


class SportclubError(Exception):
    """Base class for all sportclub library exceptions."""


class ConfigurationError(SportclubError):
    """Raised when settings read from the environment are invalid."""


class ProviderError(SportclubError):
    """Raised when a provider encounters an unrecoverable error."""


class AuthUnavailableError(SportclubError):
    """Raised when no access token can be obtained.

    The token provider raises this when the identity endpoint is
    unreachable, answers with a non-success status, or returns a body
    without a usable ``access_token``.
    """


class NetworkError(SportclubError):
    """Raised when a request fails before any HTTP response is received."""

    def __init__(self, url: str, message: str | None = None):
        self.url = url
        super().__init__(
            message
            or (
                f"Network error: Unable to connect to API at {url}. "
                "This might be a CORS issue or the server is unavailable."
            )
        )


class ApiError(SportclubError):
    """Raised when the API answers with a non-success status code.

    Attributes:
        status: The HTTP status code.
        status_text: The HTTP reason phrase.
        details: The parsed JSON error body, or ``None`` when the body was
            empty or not JSON.
    """

    def __init__(
        self,
        status: int,
        status_text: str,
        details: object = None,
        message: str | None = None,
    ):
        self.status = status
        self.status_text = status_text
        self.details = details
        super().__init__(message or f"API Error: {status} {status_text}")


class AuthError(ApiError):
    """Raised when the API rejects the access token (HTTP 401 or 403).

    The caller is responsible for guiding the user through
    re-authentication; the token may be invalid or expired.
    """

    def __init__(self, status: int, status_text: str, details: object = None):
        detail = None
        if isinstance(details, dict):
            detail = details.get("detail")
        super().__init__(
            status,
            status_text,
            details,
            message=f"Authentication failed: {detail or 'Access denied'}",
        )


class MalformedResponseError(SportclubError):
    """Raised when a successful response body is not valid JSON."""

    def __init__(self, url: str, body: str):
        self.url = url
        self.body = body
        super().__init__(f"Malformed JSON response from {url}")
