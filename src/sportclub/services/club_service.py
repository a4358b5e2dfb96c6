"""Service layer that wraps a SportProvider for club-related operations."""

from datetime import datetime, timezone

from sportclub.core.exceptions import ProviderError
from sportclub.core.interfaces import SportProvider
from sportclub.core.models import Club, UpcomingSession
from sportclub.core.schedule import DEFAULT_LIMIT, upcoming_sessions


class ClubService:
    """Provides business-logic methods for sports club data.

    Delegates all API calls to the injected provider so that the service
    layer remains independent of any specific platform.
    """

    def __init__(self, provider: SportProvider):
        """Initialise the service.

        Args:
            provider: A concrete implementation of :class:`SportProvider`.
        """
        self.provider = provider

    def get_clubs(self) -> list[Club]:
        """Return all clubs."""
        return self.provider.get_clubs()

    def get_club(self, club_id: int) -> Club:
        """Return the club with the given identifier.

        Args:
            club_id: The numeric club identifier.

        Returns:
            A :class:`Club` domain model instance.

        Raises:
            ProviderError: If no club has that identifier.
        """
        for club in self.provider.get_clubs():
            if club.id == club_id:
                return club
        raise ProviderError(f"Club {club_id} not found.")

    def get_faq(self) -> dict[str, str]:
        """Return FAQ entries keyed by question."""
        return self.provider.get_faq()

    def upcoming_sessions(
        self,
        club: Club,
        now: datetime | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[UpcomingSession]:
        """Return the club's next sessions across all of its groups.

        Args:
            club: An already-fetched :class:`Club`.
            now: Reference instant; defaults to the current UTC time.
            limit: Maximum number of sessions returned.

        Returns:
            Sessions ordered by start time, at most *limit* of them.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        return upcoming_sessions(club.groups, now, limit)
