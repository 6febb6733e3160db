"""Durable local storage for the user identifier.

The identifier is issued out of band at registration time and written once;
the panel only reads it at load. The document is a small JSON object
(``{"user_id": "..."}``) so other keys can be added later without a
migration.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

_logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"


class IdentifierStore:
    """JSON file holding the identifier of the local user."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        """Return the stored identifier, or ``None`` if never registered.

        A missing, unreadable or malformed document counts as "never
        registered"; the panel then shows its registration notice.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("Identifier store %s is not readable", self._path, exc_info=True)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Identifier store %s is not valid JSON", self._path)
            return None

        value = data.get(USER_ID_KEY) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    def save(self, user_id: str) -> None:
        """Persist *user_id*, replacing any previous identifier."""
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("user_id must be non-empty")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps({USER_ID_KEY: user_id}), encoding="utf-8")
        os.replace(tmp, self._path)
