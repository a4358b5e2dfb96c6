"""Data model dataclasses shared across providers."""

from dataclasses import dataclass, field
from datetime import datetime


# ----------------------
# People
# ----------------------


@dataclass
class Trainer:
    """Represents a trainer who leads a group."""

    id: int
    name: str
    email: str | None = None


@dataclass
class Student:
    """Represents a student on a training roster."""

    id: int
    name: str
    email: str | None = None
    medical_group: str | None = None
    hours: float = 0.0
    attended: bool = False


@dataclass
class Participants:
    """Roster summary attached to a training."""

    total_checked_in: int = 0
    students: list[Student] = field(default_factory=list)


# ----------------------
# Training
# ----------------------


@dataclass
class Training:
    """Represents a single scheduled training session."""

    id: int

    start: str
    """ISO-8601 start instant as sent by the API."""

    end: str
    """ISO-8601 end instant as sent by the API."""

    training_class: str | None = None
    """Class label (e.g. ``"Beginners"``), or ``None`` when unset."""

    capacity: int = 0
    available_spots: int = 0
    group_accredited: bool = False
    can_grade: bool = False
    can_check_in: bool = False
    checked_in: bool = False
    participants: Participants = field(default_factory=Participants)


# ----------------------
# Group
# ----------------------


@dataclass
class Group:
    """Represents a cohort inside a club with its own schedule."""

    id: int
    name: str
    description: str | None = None
    capacity: int = 0
    current_enrollment: int = 0
    is_club: bool = False
    accredited: bool = False
    trainings: list[Training] = field(default_factory=list)
    trainers: list[Trainer] = field(default_factory=list)
    allowed_medical_groups: list[str] = field(default_factory=list)


# ----------------------
# Club
# ----------------------


@dataclass
class Club:
    """Represents a sports club."""

    id: int
    name: str
    description: str | None = None
    groups: list[Group] = field(default_factory=list)

    total_groups: int = 0
    """Group count declared by the API.  Not checked against ``groups``."""


# ----------------------
# UpcomingSession
# ----------------------


@dataclass(frozen=True)
class UpcomingSession:
    """Read-only projection of a future :class:`Training`.

    Built by :func:`~sportclub.core.schedule.upcoming_sessions`; never
    persisted.
    """

    id: int
    start: datetime
    end: datetime
    training_class: str
    """Class label, ``"Training"`` when the source training had none."""

    available_spots: int
