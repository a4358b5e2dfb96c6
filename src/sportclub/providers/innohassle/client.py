"""InNoHassle sports provider backed by the authenticated JSON API."""

from typing import Any

from sportclub.core.exceptions import MalformedResponseError
from sportclub.core.interfaces import SportProvider
from sportclub.core.models import (
    Club,
    Group,
    Participants,
    Student,
    Trainer,
    Training,
)
from sportclub.providers.innohassle.transport import RequestExecutor


class SportClient(SportProvider):
    """Typed accessors for the sports API resources.

    Each method issues exactly one request through the injected
    :class:`RequestExecutor` (which acquires a fresh token first) and
    converts the JSON body to domain models.  Nothing is cached and
    nothing is retried; executor errors propagate unchanged.
    """

    CLUBS_PATH = "/clubs"
    FAQ_PATH = "/faq"

    def __init__(self, executor: RequestExecutor):
        """Initialise the client.

        Args:
            executor: The authenticated request pipeline.
        """
        self._executor = executor

    def get_clubs(self) -> list[Club]:
        """Return all clubs with their groups and trainings.

        An empty response body yields an empty list.

        Raises:
            MalformedResponseError: If the body is not a JSON array of club
                objects, or a nested group, training, trainer or student
                entry is not an object.
        """
        url = self._executor.url_for(self.CLUBS_PATH)
        data = self._executor.execute(self.CLUBS_PATH)
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedResponseError(url, str(data))
        return [self._parse_club(raw, url) for raw in data]

    def get_faq(self) -> dict[str, str]:
        """Return FAQ entries keyed by question.

        An empty response body yields an empty dict.

        Raises:
            MalformedResponseError: If the body is not a JSON object.
        """
        data = self._executor.execute(self.FAQ_PATH)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise MalformedResponseError(
                self._executor.url_for(self.FAQ_PATH), str(data)
            )
        return {str(question): str(answer) for question, answer in data.items()}

    # ------------------------------------------------------------------
    # Parsers
    # ------------------------------------------------------------------

    @staticmethod
    def _objects(raw: Any, url: str) -> list[dict[str, Any]]:
        """Return *raw* as a list of JSON objects.

        ``None`` counts as an empty list.

        Raises:
            MalformedResponseError: If *raw* is not a list of objects.
        """
        if raw is None:
            return []
        if not isinstance(raw, list) or not all(
            isinstance(item, dict) for item in raw
        ):
            raise MalformedResponseError(url, str(raw))
        return raw

    @classmethod
    def _parse_club(cls, raw: Any, url: str) -> Club:
        if not isinstance(raw, dict):
            raise MalformedResponseError(url, str(raw))
        return Club(
            id=raw.get("id"),
            name=raw.get("name", ""),
            description=raw.get("description"),
            groups=[
                cls._parse_group(g, url)
                for g in cls._objects(raw.get("groups"), url)
            ],
            total_groups=raw.get("total_groups") or 0,
        )

    @classmethod
    def _parse_group(cls, raw: dict[str, Any], url: str) -> Group:
        medical_groups = raw.get("allowed_medical_groups") or []
        if not isinstance(medical_groups, list):
            raise MalformedResponseError(url, str(medical_groups))
        return Group(
            id=raw.get("id"),
            name=raw.get("name", ""),
            description=raw.get("description"),
            capacity=raw.get("capacity") or 0,
            current_enrollment=raw.get("current_enrollment") or 0,
            is_club=bool(raw.get("is_club")),
            accredited=bool(raw.get("accredited")),
            trainings=[
                cls._parse_training(t, url)
                for t in cls._objects(raw.get("trainings"), url)
            ],
            trainers=[
                Trainer(
                    id=t.get("id"),
                    name=t.get("name", ""),
                    email=t.get("email"),
                )
                for t in cls._objects(raw.get("trainers"), url)
            ],
            allowed_medical_groups=[str(m) for m in medical_groups],
        )

    @classmethod
    def _parse_training(cls, raw: dict[str, Any], url: str) -> Training:
        roster = raw.get("participants") or {}
        if not isinstance(roster, dict):
            raise MalformedResponseError(url, str(roster))
        return Training(
            id=raw.get("id"),
            start=raw.get("start", ""),
            end=raw.get("end", ""),
            training_class=raw.get("training_class"),
            capacity=raw.get("capacity") or 0,
            available_spots=raw.get("available_spots") or 0,
            group_accredited=bool(raw.get("group_accredited")),
            can_grade=bool(raw.get("can_grade")),
            can_check_in=bool(raw.get("can_check_in")),
            checked_in=bool(raw.get("checked_in")),
            participants=Participants(
                total_checked_in=roster.get("total_checked_in") or 0,
                students=[
                    Student(
                        id=s.get("id"),
                        name=s.get("name", ""),
                        email=s.get("email"),
                        medical_group=s.get("medical_group"),
                        hours=s.get("hours") or 0.0,
                        attended=bool(s.get("attended")),
                    )
                    for s in cls._objects(roster.get("students"), url)
                ],
            ),
        )
