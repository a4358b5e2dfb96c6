"""Abstract interfaces for the authentication layer.

This module defines the contract that any token-issuing strategy must
implement.  It is free of platform-specific details so that a session
cookie flow, a static API key, or an expiry-aware cache can all be
swapped in without changing the request executor.
"""

from abc import ABC, abstractmethod


class TokenProvider(ABC):
    """Abstract base class for bearer token sources.

    Implementations own the token cache exclusively; callers only see
    :meth:`acquire_token` and :meth:`current_token`.

    Example usage::

        tokens = SessionTokenProvider(settings)   # concrete implementation
        executor = RequestExecutor(tokens, settings=settings)
        client = SportClient(executor)
        service = ClubService(client)
    """

    @abstractmethod
    def acquire_token(self) -> str:
        """Obtain a fresh token and store it as the current one.

        This performs I/O on every call; it is not a cache read.

        Returns:
            The newly issued bearer token.

        Raises:
            AuthUnavailableError: If a token cannot be obtained.
        """

    @abstractmethod
    def current_token(self) -> str | None:
        """Return the most recently stored token without any I/O.

        This method must not raise; it returns ``None`` when no token has
        been stored yet.
        """
