"""HTTP transport for the lock service JSON API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pylockpanel._constants import USER_AGENT, USER_ID_HEADER
from pylockpanel._redact import redact_for_log
from pylockpanel.config import LockPanelConfig
from pylockpanel.exceptions import LockPanelTransportError

_logger = logging.getLogger(__name__)


def _snippet(content: bytes, limit: int = 200) -> str:
    return content[:limit].decode("utf-8", errors="replace")


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        user_id: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ...


class HttpTransport:
    """JSON-over-HTTP transport that authenticates with the ``User-Id`` header."""

    def __init__(
        self,
        config: LockPanelConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        user_id: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON object.

        Raises :class:`LockPanelTransportError` on network errors, timeouts,
        non-2xx statuses and bodies that are not a JSON object.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
            USER_ID_HEADER: user_id,
        }
        url = f"{self._config.base_url}{endpoint}"
        body: str | None = None
        if payload is not None:
            headers["content-type"] = "application/json; charset=UTF-8"
            body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("%s %s headers=%s body=%s", method, url, redact_for_log(headers), redact_for_log(payload))

        try:
            async with self._http.request(method, url, data=body, headers=headers, timeout=self._timeout) as resp:
                content = await resp.read()
                if not 200 <= resp.status < 300:
                    raise LockPanelTransportError(
                        f"HTTP {resp.status} from {endpoint}: {_snippet(content)}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except LockPanelTransportError:
            raise
        except TimeoutError as exc:
            raise LockPanelTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise LockPanelTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            result = json.loads(content.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise LockPanelTransportError(
                f"Response from {endpoint} is not valid UTF-8: {exc.reason} at byte {exc.start}",
                endpoint=endpoint,
            ) from exc
        except json.JSONDecodeError as exc:
            raise LockPanelTransportError(
                f"Invalid JSON from {endpoint}: {_snippet(content)}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(result, dict):
            raise LockPanelTransportError(
                f"Expected a JSON object from {endpoint}, got {type(result).__name__}",
                endpoint=endpoint,
            )

        _logger.debug("%s %s -> %s", method, endpoint, redact_for_log(result))
        return result
