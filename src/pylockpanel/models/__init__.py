"""Data models for pylockpanel."""

from pylockpanel.models._base import LockPanelBaseModel
from pylockpanel.models.responses import AckResponse, GetNameResponse, StatusResponse
from pylockpanel.models.session import (
    CommandKind,
    Identity,
    LockBelief,
    SessionState,
    TransientMessage,
)

__all__ = [
    "AckResponse",
    "CommandKind",
    "GetNameResponse",
    "Identity",
    "LockBelief",
    "LockPanelBaseModel",
    "SessionState",
    "StatusResponse",
    "TransientMessage",
]
