"""Tradfri LAN Console - terminal controller for gateway-connected smart lights.

This package provides a persistent DTLS/CoAP client for the lighting gateway,
a thread-safe handle for sharing it, and a small console built on top.
"""

__version__ = "1.0.0"

from .client import TradfriClient
from .errors import (
    ConnectError,
    DeviceDecodeError,
    ProtocolError,
    TradfriError,
    TransportError,
)
from .models import Light

__all__ = [
    "ConnectError",
    "DeviceDecodeError",
    "Light",
    "ProtocolError",
    "TradfriClient",
    "TradfriError",
    "TransportError",
    "__version__",
]
