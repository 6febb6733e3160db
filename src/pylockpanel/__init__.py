"""pylockpanel - Async Python control panel client for a remotely actuated lock."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylockpanel")
except PackageNotFoundError:
    __version__ = "0+local"
from pylockpanel.config import LockPanelConfig
from pylockpanel.controller import LockSessionController
from pylockpanel.exceptions import (
    LockPanelConfigError,
    LockPanelError,
    LockPanelTransportError,
)
from pylockpanel.identity import IdentityResolver
from pylockpanel.models import (
    CommandKind,
    Identity,
    LockBelief,
    SessionState,
    TransientMessage,
)
from pylockpanel.storage import IdentifierStore

__all__ = [
    "__version__",
    "CommandKind",
    "IdentifierStore",
    "Identity",
    "IdentityResolver",
    "LockBelief",
    "LockPanelConfig",
    "LockPanelConfigError",
    "LockPanelError",
    "LockPanelTransportError",
    "LockSessionController",
    "SessionState",
    "TransientMessage",
]
