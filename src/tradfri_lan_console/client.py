"""Thread-safe gateway client shared by the console and background workers."""

from __future__ import annotations

import functools
import threading
from typing import Optional

from .coap import Messenger
from .models import Light
from .registry import DeviceRegistry
from .session import SecureSession
from .transport import COAPS_PORT, IO_TIMEOUT_S


class TradfriClient:
    """
    Client for a lighting gateway over one persistent DTLS session.

    All operations take the same lock, so exactly one CoAP exchange is in
    flight no matter how many handles or threads use the client.

    Usage:
        client = TradfriClient.connect("192.168.1.100", "identity", "psk")
        for light in client.list_lights():
            client.set_power(light.id, False)
    """

    def __init__(self, registry: DeviceRegistry, lock: Optional[threading.Lock] = None):
        self._registry = registry
        self._lock = lock or threading.Lock()

    @classmethod
    def connect(
        cls,
        host: str,
        identity: str,
        psk: str,
        *,
        port: int = COAPS_PORT,
        timeout: float = IO_TIMEOUT_S,
    ) -> TradfriClient:
        """
        Connect to the gateway.

        Raises:
            ConnectError: If the gateway address is invalid or the handshake fails
        """
        messenger = Messenger(
            functools.partial(
                SecureSession.connect, host, identity, psk, port=port, timeout=timeout
            )
        )
        messenger.open()
        return cls(DeviceRegistry(messenger))

    def clone(self) -> TradfriClient:
        """Return another handle to the same session and lock."""
        return TradfriClient(self._registry, self._lock)

    @property
    def connected(self) -> bool:
        return self._registry.messenger.connected

    def close(self) -> None:
        with self._lock:
            self._registry.messenger.close()

    def __enter__(self) -> TradfriClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def list_lights(self) -> list[Light]:
        with self._lock:
            return self._registry.list_lights()

    def set_power(self, light_id: int, on: bool) -> None:
        with self._lock:
            self._registry.set_power(light_id, on)

    def set_brightness(self, light_id: int, brightness: int) -> None:
        with self._lock:
            self._registry.set_brightness(light_id, brightness)

    def set_color(self, light_id: int, color: str) -> None:
        with self._lock:
            self._registry.set_color(light_id, color)

    def apply_scene_to_light(self, light_id: int, on: bool, brightness: int, color: str) -> None:
        with self._lock:
            self._registry.apply_scene_to_light(light_id, on, brightness, color)
