"""Unit tests for token storage and the session token provider.

HTTP sessions are replaced with MagicMock objects so that no real
requests are made.
"""

from unittest.mock import MagicMock

import pytest
import requests

from sportclub.auth.storage import (
    ACCESS_TOKEN_KEY,
    SESSION_COOKIES_KEY,
    LocalStorage,
    clear_token,
    load_cookies,
    load_token,
    save_cookies,
    save_token,
)
from sportclub.config import Settings
from sportclub.core.exceptions import AuthUnavailableError
from sportclub.providers.innohassle.auth import (
    SessionTokenProvider,
    parse_cookie_header,
)


def _response(status=200, body=None, reason="OK"):
    r = MagicMock()
    r.status_code = status
    r.ok = status < 400
    r.reason = reason
    if isinstance(body, Exception):
        r.json.side_effect = body
    else:
        r.json.return_value = body
    return r


@pytest.fixture()
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage")


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        accounts_url="https://accounts.test/v0",
        timeout=5,
        storage_dir=tmp_path / "storage",
    )


@pytest.fixture()
def session():
    s = MagicMock()
    s.headers = {}
    return s


@pytest.fixture(autouse=True)
def _no_env_cookies(monkeypatch):
    monkeypatch.delenv("SPORTCLUB_SESSION_COOKIES", raising=False)


# ---------------------------------------------------------------------------
# LocalStorage
# ---------------------------------------------------------------------------


class TestLocalStorage:
    def test_token_stored_as_json_string(self, storage):
        save_token(storage, "abc.def")
        raw = storage.path_for(ACCESS_TOKEN_KEY).read_text(encoding="utf-8")
        assert raw == '"abc.def"'
        assert load_token(storage) == "abc.def"

    def test_missing_file_reads_empty(self, storage):
        assert load_token(storage) is None
        assert load_cookies(storage) == {}

    def test_corrupt_token_reads_empty(self, storage):
        storage.directory.mkdir(parents=True)
        storage.path_for(ACCESS_TOKEN_KEY).write_text('"abc', encoding="utf-8")
        assert load_token(storage) is None

    def test_clear_token(self, storage):
        save_token(storage, "abc")
        assert clear_token(storage) is True
        assert clear_token(storage) is False
        assert load_token(storage) is None

    def test_keys_are_independent(self, storage):
        save_cookies(storage, {"session": "s1"})
        save_token(storage, "abc")
        assert load_cookies(storage) == {"session": "s1"}
        assert load_token(storage) == "abc"

    def test_token_write_never_touches_cookies(self, storage):
        save_cookies(storage, {"sid": "x"})
        cookie_file = storage.path_for(SESSION_COOKIES_KEY)
        before = cookie_file.read_bytes()
        # A half-written token entry, as left by an interrupted writer.
        token_file = storage.path_for(ACCESS_TOKEN_KEY)
        token_file.write_text('"half', encoding="utf-8")

        save_token(storage, "tok")

        assert load_cookies(storage) == {"sid": "x"}
        assert cookie_file.read_bytes() == before
        assert load_token(storage) == "tok"

    def test_write_leaves_no_temp_files(self, storage):
        save_token(storage, "abc")
        save_token(storage, "def")
        names = sorted(p.name for p in storage.directory.iterdir())
        assert names == ["accessToken.json"]

    def test_file_is_owner_only(self, storage):
        save_token(storage, "abc")
        mode = storage.path_for(ACCESS_TOKEN_KEY).stat().st_mode
        assert mode & 0o777 == 0o600


def test_parse_cookie_header():
    assert parse_cookie_header("a=1; b = 2 ;junk; =x") == {"a": "1", "b": "2"}


# ---------------------------------------------------------------------------
# SessionTokenProvider
# ---------------------------------------------------------------------------


class TestSessionTokenProvider:
    def _provider(self, settings, session, storage, cookies=None):
        return SessionTokenProvider(
            settings=settings, cookies=cookies, storage=storage, session=session
        )

    def test_acquire_sends_cookies_and_stores_token(
        self, settings, session, storage
    ):
        session.get.return_value = _response(body={"access_token": "tok-1"})
        provider = self._provider(settings, session, storage, {"sid": "xyz"})

        assert provider.acquire_token() == "tok-1"

        session.get.assert_called_once_with(
            "https://accounts.test/v0/tokens/generate-my-token",
            cookies={"sid": "xyz"},
            timeout=5,
        )
        assert provider.current_token() == "tok-1"
        assert load_token(storage) == "tok-1"

    def test_every_call_refreshes(self, settings, session, storage):
        session.get.side_effect = [
            _response(body={"access_token": "tok-1"}),
            _response(body={"access_token": "tok-2"}),
        ]
        provider = self._provider(settings, session, storage)
        assert provider.acquire_token() == "tok-1"
        assert provider.acquire_token() == "tok-2"
        assert session.get.call_count == 2
        assert load_token(storage) == "tok-2"

    def test_non_success_status(self, settings, session, storage):
        session.get.return_value = _response(401, {"detail": "no"}, "Unauthorized")
        provider = self._provider(settings, session, storage)
        with pytest.raises(AuthUnavailableError, match="401 Unauthorized"):
            provider.acquire_token()
        assert load_token(storage) is None

    def test_unreachable(self, settings, session, storage):
        session.get.side_effect = requests.ConnectionError("refused")
        provider = self._provider(settings, session, storage)
        with pytest.raises(AuthUnavailableError) as exc_info:
            provider.acquire_token()
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_missing_access_token(self, settings, session, storage):
        session.get.return_value = _response(body={"token": "x"})
        provider = self._provider(settings, session, storage)
        with pytest.raises(AuthUnavailableError):
            provider.acquire_token()

    def test_malformed_body(self, settings, session, storage):
        session.get.return_value = _response(body=ValueError("bad json"))
        provider = self._provider(settings, session, storage)
        with pytest.raises(AuthUnavailableError):
            provider.acquire_token()

    def test_current_token_falls_back_to_storage(
        self, settings, session, storage
    ):
        save_token(storage, "persisted")
        provider = self._provider(settings, session, storage)
        assert provider.current_token() == "persisted"
        session.get.assert_not_called()

    def test_current_token_none_when_empty(self, settings, session, storage):
        assert self._provider(settings, session, storage).current_token() is None

    def test_cookies_from_environment(
        self, settings, session, storage, monkeypatch
    ):
        monkeypatch.setenv("SPORTCLUB_SESSION_COOKIES", "sid=env; other=1")
        session.get.return_value = _response(body={"access_token": "t"})
        provider = self._provider(settings, session, storage)
        provider.acquire_token()
        assert session.get.call_args.kwargs["cookies"] == {
            "sid": "env",
            "other": "1",
        }
        assert provider.credential_source() == "environment variables"

    def test_cookies_from_storage(self, settings, session, storage):
        save_cookies(storage, {"sid": "stored"})
        session.get.return_value = _response(body={"access_token": "t"})
        provider = self._provider(settings, session, storage)
        provider.acquire_token()
        assert session.get.call_args.kwargs["cookies"] == {"sid": "stored"}
        assert provider.credential_source() == str(
            storage.path_for(SESSION_COOKIES_KEY)
        )

    def test_no_cookies_still_requests(self, settings, session, storage):
        session.get.return_value = _response(body={"access_token": "t"})
        provider = self._provider(settings, session, storage)
        assert provider.acquire_token() == "t"
        assert session.get.call_args.kwargs["cookies"] == {}
        assert provider.credential_source() == "none"
