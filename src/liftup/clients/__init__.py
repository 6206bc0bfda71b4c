"""Interactive clients that drive a session runtime."""

from .console import ConsoleLiveStatus, ConsoleSessionClient

__all__ = ["ConsoleLiveStatus", "ConsoleSessionClient"]
