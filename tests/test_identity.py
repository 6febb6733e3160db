from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pylockpanel._constants import GET_NAME_ENDPOINT
from pylockpanel.exceptions import LockPanelTransportError
from pylockpanel.identity import IdentityResolver
from pylockpanel.models.session import Identity


class _NameTransport:
    def __init__(self, body: dict[str, Any] | Exception) -> None:
        self._body = body
        self.calls: list[tuple[str, str, str]] = []

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        user_id: str,
        payload: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.calls.append((method, endpoint, user_id))
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


@pytest.mark.asyncio
@pytest.mark.parametrize("stored_id", [None, "", "   "])
async def test_missing_identifier_makes_no_remote_call(stored_id: str | None) -> None:
    transport = _NameTransport({"success": True, "name": "Kenji"})

    identity = await IdentityResolver(transport).resolve(stored_id)

    assert identity == Identity()
    assert not identity.is_registered
    assert transport.calls == []


@pytest.mark.asyncio
async def test_known_identifier_resolves_name() -> None:
    transport = _NameTransport({"success": True, "name": "Kenji"})

    identity = await IdentityResolver(transport).resolve(" user-1 ")

    assert identity == Identity(user_id="user-1", display_name="Kenji")
    assert identity.is_registered
    assert transport.calls == [("GET", GET_NAME_ENDPOINT, "user-1")]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"success": True}, {"success": True, "name": None}, {"success": True, "name": 42}])
async def test_identifier_without_name_is_unregistered(body: dict[str, Any]) -> None:
    identity = await IdentityResolver(_NameTransport(body)).resolve("user-1")

    assert identity == Identity(user_id="user-1")
    assert not identity.is_registered


@pytest.mark.asyncio
async def test_transport_failure_propagates() -> None:
    transport = _NameTransport(LockPanelTransportError("HTTP 403 from /api/get_name: ", status_code=403))

    with pytest.raises(LockPanelTransportError) as exc_info:
        await IdentityResolver(transport).resolve("user-1")

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_malformed_body_is_a_transport_failure() -> None:
    with pytest.raises(LockPanelTransportError, match="Malformed response from /api/get_name"):
        await IdentityResolver(_NameTransport({"name": "Kenji"})).resolve("user-1")
