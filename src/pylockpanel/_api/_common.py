"""Shared helper for lock service endpoint modules.

Posts a request through the transport and validates the JSON body into a
response model. A body that does not validate counts as a transport
failure, the same as a non-2xx status.

It is internal to pylockpanel and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from pylockpanel._transport import Transport
from pylockpanel.exceptions import LockPanelTransportError
from pylockpanel.models._base import LockPanelBaseModel

M = TypeVar("M", bound=LockPanelBaseModel)


async def request_model(
    model: type[M],
    *,
    method: str,
    endpoint: str,
    transport: Transport,
    user_id: str,
    payload: Mapping[str, Any] | None = None,
) -> M:
    """Call *endpoint* and return its body parsed as *model*."""
    body = await transport.request_json(method, endpoint, user_id=user_id, payload=payload)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise LockPanelTransportError(
            f"Malformed response from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc
