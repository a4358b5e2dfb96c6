"""Environment-driven settings for the sportclub library and CLI."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from sportclub.core.exceptions import ConfigurationError

DEFAULT_API_BASE_URL = "http://t9d.store/api"
DEFAULT_ACCOUNTS_URL = "https://api.innohassle.ru/accounts/v0"
DEFAULT_STORAGE_DIR = Path.home() / ".config" / "sportclub"


@dataclass
class Settings:
    """Connection and runtime settings.

    Attributes:
        api_base_url: Base URL that resource endpoints are relative to.
        accounts_url: Base URL of the identity (token-issuing) service.
        timeout: Per-request timeout in seconds.
        user_agent: ``User-Agent`` header sent with every request.
        log_level: Level name used by the CLI when configuring logging.
        storage_dir: Directory backing client-local storage.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    accounts_url: str = DEFAULT_ACCOUNTS_URL
    timeout: float = 30.0
    user_agent: str = "sportclub/0.1"
    log_level: str = "WARNING"
    storage_dir: Path = field(default=DEFAULT_STORAGE_DIR)

    # Mapping of environment variables to settings fields
    ENV_MAPPING = {
        "SPORTCLUB_API_BASE_URL": "api_base_url",
        "SPORTCLUB_ACCOUNTS_URL": "accounts_url",
        "SPORTCLUB_TIMEOUT": "timeout",
        "SPORTCLUB_USER_AGENT": "user_agent",
        "SPORTCLUB_LOG_LEVEL": "log_level",
        "SPORTCLUB_STORAGE_DIR": "storage_dir",
    }

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from ``SPORTCLUB_*`` environment variables.

        Args:
            environ: Mapping to read instead of :data:`os.environ`.

        Returns:
            A :class:`Settings` instance; unset variables keep defaults.

        Raises:
            ConfigurationError: If ``SPORTCLUB_TIMEOUT`` is not a positive
                number.
        """
        environ = os.environ if environ is None else environ
        known = {f.name for f in fields(cls)}
        values: dict[str, object] = {}
        for env_var, name in cls.ENV_MAPPING.items():
            raw = environ.get(env_var)
            if raw is None or raw == "" or name not in known:
                continue
            values[name] = raw

        if "timeout" in values:
            try:
                timeout = float(values["timeout"])
            except ValueError:
                raise ConfigurationError(
                    f"SPORTCLUB_TIMEOUT must be a number, got {values['timeout']!r}"
                ) from None
            if timeout <= 0:
                raise ConfigurationError("SPORTCLUB_TIMEOUT must be positive")
            values["timeout"] = timeout
        if "storage_dir" in values:
            values["storage_dir"] = Path(values["storage_dir"]).expanduser()
        for name in ("api_base_url", "accounts_url"):
            if name in values:
                values[name] = str(values[name]).rstrip("/")

        return cls(**values)
