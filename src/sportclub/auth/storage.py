"""Client-local persistent storage.

A small key/value store kept under one directory (by default
``~/.config/sportclub/``), one file per key.  Values are strings, as in a
browser's ``localStorage``; callers serialise structured data themselves.

Two keys are used by the library:

* ``accessToken``: the most recent bearer token, stored as a JSON string
  (``"\\"eyJ...\\""``) in ``accessToken.json``.  Written by the token
  provider on every successful acquisition.
* ``sessionCookies``: identity-service session cookies as a JSON object,
  in ``sessionCookies.json``.  Written by ``sportclub auth setup``.

Writing one key never touches another key's file.  Each write goes to a
temporary file that replaces the target atomically, with permissions
restricted to the owner (0o600).
"""

import json
import os
import tempfile
from pathlib import Path

from sportclub.config import DEFAULT_STORAGE_DIR

ACCESS_TOKEN_KEY = "accessToken"
SESSION_COOKIES_KEY = "sessionCookies"


class LocalStorage:
    """Directory-backed string key/value store.

    Unreadable entries read as ``None`` so that a damaged file never
    breaks token acquisition; write failures propagate.

    Args:
        directory: Directory holding the entry files.  Defaults to
            ``~/.config/sportclub/``.
    """

    def __init__(self, directory: Path | None = None):
        self._dir = directory or DEFAULT_STORAGE_DIR

    @property
    def directory(self) -> Path:
        """Return the directory holding the entry files."""
        return self._dir

    def path_for(self, key: str) -> Path:
        """Return the file that stores *key*."""
        return self._dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored string for *key*, or ``None``."""
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._dir, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> bool:
        """Remove *key*.

        Returns:
            ``True`` if the key existed, ``False`` otherwise.
        """
        path = self.path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True


# ---------------------------------------------------------------------------
# Typed helpers
# ---------------------------------------------------------------------------


def save_token(storage: LocalStorage, token: str) -> None:
    """Persist *token* under ``accessToken`` as a JSON string."""
    storage.set_item(ACCESS_TOKEN_KEY, json.dumps(token))


def load_token(storage: LocalStorage) -> str | None:
    """Return the persisted token, or ``None`` if absent or unreadable."""
    raw = storage.get_item(ACCESS_TOKEN_KEY)
    if raw is None:
        return None
    try:
        token = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return token if isinstance(token, str) and token else None


def clear_token(storage: LocalStorage) -> bool:
    """Remove the persisted token."""
    return storage.remove_item(ACCESS_TOKEN_KEY)


def save_cookies(storage: LocalStorage, cookies: dict[str, str]) -> None:
    """Persist identity-service session cookies."""
    storage.set_item(SESSION_COOKIES_KEY, json.dumps(cookies))


def load_cookies(storage: LocalStorage) -> dict[str, str]:
    """Return persisted session cookies, or an empty dict."""
    raw = storage.get_item(SESSION_COOKIES_KEY)
    if raw is None:
        return {}
    try:
        cookies = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if not isinstance(cookies, dict):
        return {}
    return {str(k): str(v) for k, v in cookies.items()}


def clear_cookies(storage: LocalStorage) -> bool:
    """Remove persisted session cookies."""
    return storage.remove_item(SESSION_COOKIES_KEY)
