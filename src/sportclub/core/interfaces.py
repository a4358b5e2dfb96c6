"""Abstract interface for sports platform providers."""

from abc import ABC, abstractmethod

from sportclub.core.models import Club


class SportProvider(ABC):
    """Abstract base class for sports platform API providers.

    The service layer depends exclusively on this abstraction, never on a
    specific provider implementation.
    """

    @abstractmethod
    def get_clubs(self) -> list[Club]:
        """Return every club with its groups and scheduled trainings.

        Returns:
            A list of :class:`Club` domain model instances.

        Raises:
            AuthUnavailableError: If no access token could be obtained.
            AuthError: If the API rejects the access token.
            NetworkError: If the API cannot be reached.
            ApiError: If the API answers with any other error status.
            MalformedResponseError: If the response body is not JSON.
        """

    @abstractmethod
    def get_faq(self) -> dict[str, str]:
        """Return the FAQ as a mapping of question to answer.

        Raises:
            The same exceptions as :meth:`get_clubs`.
        """
