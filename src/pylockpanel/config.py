"""Client configuration for pylockpanel."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pylockpanel._constants import (
    BASE_URL,
    DEFAULT_MESSAGE_TTL,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)
from pylockpanel.exceptions import LockPanelConfigError

DEFAULT_STORAGE_PATH = Path("~/.config/pylockpanel/storage.json")


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise LockPanelConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise LockPanelConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LockPanelConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the lock service (no trailing slash needed).
    user_id : str or None
        Identifier to authenticate with.  When ``None`` the identifier is
        read from the local :class:`~pylockpanel.storage.IdentifierStore`.
    storage_path : Path
        Location of the identifier store document.
    refresh_interval : float
        Seconds between two status refreshes.
    message_ttl : float
        Seconds a transient message stays visible.
    request_timeout : float
        Total timeout of a single HTTP request in seconds.
    status_failure_threshold : int or None
        Number of consecutive failed status reads after which the session
        enters its fatal state.  ``None`` keeps the lock state ``UNKNOWN``
        indefinitely without escalating.
    """

    base_url: str = BASE_URL
    user_id: str | None = None
    storage_path: Path = DEFAULT_STORAGE_PATH
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    message_ttl: float = DEFAULT_MESSAGE_TTL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    status_failure_threshold: int | None = None

    def __post_init__(self) -> None:
        for name in ("refresh_interval", "message_ttl", "request_timeout"):
            if getattr(self, name) <= 0:
                raise LockPanelConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.status_failure_threshold is not None and self.status_failure_threshold < 1:
            raise LockPanelConfigError(
                f"status_failure_threshold must be >= 1, got {self.status_failure_threshold}"
            )
        if not self.base_url:
            raise LockPanelConfigError("base_url must be non-empty")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "storage_path", Path(self.storage_path).expanduser())

    @classmethod
    def from_env(cls, **overrides: Any) -> LockPanelConfig:
        """Create configuration from environment variables.

        Reads the optional ``LOCKPANEL_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LockPanelConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_CONFIG_MAP = {
            "LOCKPANEL_BASE_URL": "base_url",
            "LOCKPANEL_USER_ID": "user_id",
            "LOCKPANEL_STORAGE_PATH": "storage_path",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "LOCKPANEL_REFRESH_INTERVAL": "refresh_interval",
            "LOCKPANEL_MESSAGE_TTL": "message_ttl",
            "LOCKPANEL_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        threshold_env = env.get("LOCKPANEL_STATUS_FAILURE_THRESHOLD")
        if threshold_env is not None and "status_failure_threshold" not in overrides:
            config_kwargs["status_failure_threshold"] = _env_int(
                "LOCKPANEL_STATUS_FAILURE_THRESHOLD",
                threshold_env,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
