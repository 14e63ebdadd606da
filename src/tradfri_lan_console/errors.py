"""Client error types for gateway interactions."""

from __future__ import annotations

from typing import Any, Optional


class TradfriError(Exception):
    """Base error for gateway client failures."""


class ConnectError(TradfriError):
    """The secure session to the gateway could not be established."""


class TransportError(TradfriError):
    """Reading from or writing to the gateway failed."""


class ProtocolError(TradfriError):
    """The gateway answered, but not with something we can accept."""

    def __init__(self, message: str, code: Optional[Any] = None, payload: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.payload = payload


class DeviceDecodeError(TradfriError):
    """A device resource could not be turned into a light."""
