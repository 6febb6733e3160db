"""Display name endpoints.

Endpoints:
  - GET  /api/get_name
  - POST /api/set_name   body ``{"name": str}``
"""

from __future__ import annotations

from pylockpanel._api._common import request_model
from pylockpanel._constants import GET_NAME_ENDPOINT, SET_NAME_ENDPOINT
from pylockpanel._transport import Transport
from pylockpanel.models.responses import AckResponse, GetNameResponse


async def fetch_name(transport: Transport, user_id: str) -> GetNameResponse:
    """Look up the display name recorded for *user_id*."""
    return await request_model(
        GetNameResponse,
        method="GET",
        endpoint=GET_NAME_ENDPOINT,
        transport=transport,
        user_id=user_id,
    )


async def save_name(transport: Transport, user_id: str, name: str) -> AckResponse:
    """Store *name* as the display name of *user_id*."""
    return await request_model(
        AckResponse,
        method="POST",
        endpoint=SET_NAME_ENDPOINT,
        transport=transport,
        user_id=user_id,
        payload={"name": name},
    )
