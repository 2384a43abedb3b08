"""UI server module for websocket session events and commands."""

from .commands import CommandError, SessionCommand, parse_command
from .config import ServerConfigurationError, UIServerConfig
from .service import UIServer

__all__ = [
    "CommandError",
    "ServerConfigurationError",
    "SessionCommand",
    "UIServerConfig",
    "UIServer",
    "parse_command",
]
