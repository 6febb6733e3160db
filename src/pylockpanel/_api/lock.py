"""Lock endpoints.

Endpoints:
  - GET  /api/status
  - POST /api/open
  - POST /api/close

Open and close only acknowledge that the actuator accepted the command;
the resulting state is read back through the status endpoint.
"""

from __future__ import annotations

from pylockpanel._api._common import request_model
from pylockpanel._constants import CLOSE_ENDPOINT, OPEN_ENDPOINT, STATUS_ENDPOINT
from pylockpanel._transport import Transport
from pylockpanel.models.responses import AckResponse, StatusResponse
from pylockpanel.models.session import CommandKind

COMMAND_ENDPOINTS: dict[CommandKind, str] = {
    CommandKind.OPEN: OPEN_ENDPOINT,
    CommandKind.CLOSE: CLOSE_ENDPOINT,
}


async def fetch_status(transport: Transport, user_id: str) -> StatusResponse:
    """Read the current lock state."""
    return await request_model(
        StatusResponse,
        method="GET",
        endpoint=STATUS_ENDPOINT,
        transport=transport,
        user_id=user_id,
    )


async def send_command(transport: Transport, user_id: str, command: CommandKind) -> AckResponse:
    """Ask the actuator to open or close the lock."""
    return await request_model(
        AckResponse,
        method="POST",
        endpoint=COMMAND_ENDPOINTS[command],
        transport=transport,
        user_id=user_id,
    )
