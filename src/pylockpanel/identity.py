"""Identity resolution: stored identifier -> display name."""

from __future__ import annotations

import logging

from pylockpanel._api.identity import fetch_name
from pylockpanel._redact import mask_identifier
from pylockpanel._transport import Transport
from pylockpanel.models.session import Identity

_logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps a locally stored identifier to the user's display name.

    Runs once when the panel loads. The result is either a registered
    identity or an unregistered one (no identifier, or no name recorded for
    it). Transport failures are raised as
    :class:`~pylockpanel.exceptions.LockPanelTransportError` so the caller
    can tell them apart from the unregistered case.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def resolve(self, stored_id: str | None) -> Identity:
        if stored_id is None or not stored_id.strip():
            _logger.debug("No stored identifier; skipping name lookup")
            return Identity()

        user_id = stored_id.strip()
        response = await fetch_name(self._transport, user_id)
        if response.name is None:
            _logger.info("Identifier %s has no display name; treating as unregistered", mask_identifier(user_id))
            return Identity(user_id=user_id)
        return Identity(user_id=user_id, display_name=response.name)
