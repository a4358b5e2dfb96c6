"""Unit tests for the typed resource client."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from sportclub.core.exceptions import AuthError, MalformedResponseError
from sportclub.core.models import Club, Student, Trainer
from sportclub.core.schedule import upcoming_sessions
from sportclub.providers.innohassle.client import SportClient
from sportclub.providers.innohassle.transport import RequestExecutor

CLUBS_PAYLOAD = [
    {
        "id": 7,
        "name": "Table Tennis",
        "description": "Ping pong",
        "total_groups": 5,
        "groups": [
            {
                "id": 70,
                "name": "Beginners",
                "description": "First steps",
                "capacity": 20,
                "current_enrollment": 12,
                "is_club": True,
                "accredited": False,
                "trainers": [
                    {"id": 1, "name": "Ivan", "email": "ivan@example.com"}
                ],
                "allowed_medical_groups": ["general", "preparatory"],
                "trainings": [
                    {
                        "id": 700,
                        "start": "2024-01-14T18:00:00+03:00",
                        "end": "2024-01-14T19:30:00+03:00",
                        "training_class": None,
                        "group_accredited": False,
                        "can_grade": True,
                        "can_check_in": True,
                        "checked_in": False,
                        "capacity": 20,
                        "available_spots": 8,
                        "participants": {
                            "total_checked_in": 1,
                            "students": [
                                {
                                    "id": 5,
                                    "name": "Anna",
                                    "email": "anna@example.com",
                                    "medical_group": "general",
                                    "hours": 12.5,
                                    "attended": True,
                                }
                            ],
                        },
                    }
                ],
            }
        ],
    }
]


@pytest.fixture()
def executor():
    ex = MagicMock(spec=RequestExecutor)
    ex.url_for.side_effect = lambda endpoint: f"https://api.test{endpoint}"
    return ex


def test_get_clubs_parses_nested_payload(executor):
    executor.execute.return_value = CLUBS_PAYLOAD
    clubs = SportClient(executor).get_clubs()

    executor.execute.assert_called_once_with("/clubs")
    assert len(clubs) == 1
    club = clubs[0]
    assert isinstance(club, Club)
    assert club.total_groups == 5
    assert len(club.groups) == 1

    group = club.groups[0]
    assert group.is_club is True
    assert group.trainers == [Trainer(id=1, name="Ivan", email="ivan@example.com")]
    assert group.allowed_medical_groups == ["general", "preparatory"]

    training = group.trainings[0]
    assert training.start == "2024-01-14T18:00:00+03:00"
    assert training.training_class is None
    assert training.available_spots == 8
    assert training.can_grade is True
    assert training.participants.total_checked_in == 1
    assert training.participants.students[0] == Student(
        id=5,
        name="Anna",
        email="anna@example.com",
        medical_group="general",
        hours=12.5,
        attended=True,
    )


def test_get_clubs_tolerates_missing_fields(executor):
    executor.execute.return_value = [
        {"id": 1, "name": "Yoga", "groups": [{"id": 2, "name": "All"}]}
    ]
    club = SportClient(executor).get_clubs()[0]
    assert club.description is None
    assert club.total_groups == 0
    assert club.groups[0].trainings == []


def test_get_clubs_empty_body(executor):
    executor.execute.return_value = None
    assert SportClient(executor).get_clubs() == []


def test_get_clubs_rejects_non_list(executor):
    executor.execute.return_value = {"detail": "nope"}
    with pytest.raises(MalformedResponseError):
        SportClient(executor).get_clubs()


def test_get_faq(executor):
    executor.execute.return_value = {"How to join?": "Sign up in the app."}
    assert SportClient(executor).get_faq() == {
        "How to join?": "Sign up in the app."
    }
    executor.execute.assert_called_once_with("/faq")


def test_get_faq_rejects_non_mapping(executor):
    executor.execute.return_value = ["q", "a"]
    with pytest.raises(MalformedResponseError):
        SportClient(executor).get_faq()


def test_errors_propagate_unchanged(executor):
    error = AuthError(403, "Forbidden", None)
    executor.execute.side_effect = error
    with pytest.raises(AuthError) as exc_info:
        SportClient(executor).get_faq()
    assert exc_info.value is error
    assert executor.execute.call_count == 1


@pytest.mark.parametrize(
    "payload",
    [
        ["oops"],
        [{"id": 1, "name": "x", "groups": ["not a group"]}],
        [{"id": 1, "name": "x", "groups": {"id": 2}}],
        [{"id": 1, "name": "x", "groups": [{"id": 2, "trainings": [42]}]}],
        [{"id": 1, "name": "x", "groups": [{"id": 2, "trainers": ["Ivan"]}]}],
        [
            {
                "id": 1,
                "name": "x",
                "groups": [
                    {"id": 2, "allowed_medical_groups": "general"}
                ],
            }
        ],
        [
            {
                "id": 1,
                "name": "x",
                "groups": [
                    {
                        "id": 2,
                        "trainings": [
                            {"id": 3, "participants": {"students": ["Anna"]}}
                        ],
                    }
                ],
            }
        ],
        [
            {
                "id": 1,
                "name": "x",
                "groups": [
                    {"id": 2, "trainings": [{"id": 3, "participants": [1]}]}
                ],
            }
        ],
    ],
)
def test_get_clubs_rejects_nested_shape_errors(executor, payload):
    executor.execute.return_value = payload
    with pytest.raises(MalformedResponseError) as exc_info:
        SportClient(executor).get_clubs()
    assert exc_info.value.url == "https://api.test/clubs"


def test_null_timestamps_do_not_break_upcoming_sessions(executor):
    executor.execute.return_value = [
        {
            "id": 1,
            "name": "Boxing",
            "groups": [
                {
                    "id": 10,
                    "name": "All levels",
                    "trainings": [
                        {"id": 1, "start": None, "end": "2024-01-15T10:00:00Z"},
                        {
                            "id": 2,
                            "start": "2024-01-14T10:00:00Z",
                            "end": "2024-01-14T11:00:00Z",
                        },
                    ],
                }
            ],
        }
    ]
    club = SportClient(executor).get_clubs()[0]
    now = datetime(2024, 1, 10, tzinfo=timezone.utc)
    assert [s.id for s in upcoming_sessions(club.groups, now, 10)] == [2]
