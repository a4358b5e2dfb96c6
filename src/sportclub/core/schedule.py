"""Upcoming-session aggregation over a club's groups.

Everything here is pure: no I/O and no mutation of the input models.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from sportclub.core.models import Group, UpcomingSession
from sportclub.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_LABEL = "Training"
DEFAULT_LIMIT = 10


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware :class:`datetime`.

    A trailing ``Z`` means UTC.  Naive values are taken as UTC.

    Raises:
        ValueError: If *value* is not an ISO-8601 timestamp.
        TypeError: If *value* is not a string.
    """
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO-8601 string, got {value!r}")
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def upcoming_sessions(
    groups: Iterable[Group],
    now: datetime,
    limit: int = DEFAULT_LIMIT,
) -> list[UpcomingSession]:
    """Return the next *limit* sessions across all *groups*.

    A training qualifies when its end is strictly after *now*; its start
    is never compared, so sessions already in progress are included.
    Qualifying sessions are ordered by start ascending.  The sort is
    stable: sessions with equal starts keep their group/training order.

    Trainings whose start or end cannot be parsed are skipped with a
    warning rather than failing the whole aggregation.

    Args:
        groups: Groups whose ``trainings`` are flattened, in order.
        now: Reference instant.  Naive values are taken as UTC.
        limit: Maximum number of sessions returned.

    Returns:
        A new list of :class:`UpcomingSession` instances.
    """
    if limit <= 0:
        return []
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    sessions: list[UpcomingSession] = []
    for group in groups:
        for training in group.trainings or []:
            try:
                start = parse_instant(training.start)
                end = parse_instant(training.end)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping training %s in group %s: bad timestamps "
                    "(start=%r, end=%r)",
                    training.id,
                    group.id,
                    training.start,
                    training.end,
                )
                continue
            if end <= now:
                continue
            sessions.append(
                UpcomingSession(
                    id=training.id,
                    start=start,
                    end=end,
                    training_class=training.training_class or DEFAULT_LABEL,
                    available_spots=training.available_spots,
                )
            )

    return sorted(sessions, key=lambda s: s.start)[:limit]
