"""Device listing and light update commands on top of the messenger."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .coap import Messenger
from .errors import DeviceDecodeError, ProtocolError, TransportError
from .models import (
    COLOR_HEX,
    DIMMER,
    LIGHT_CONTROL,
    ON_OFF,
    DeviceResource,
    Light,
    clamp_brightness,
)

logger = logging.getLogger(__name__)

DEVICES_PATH = "15001"


def device_path(device_id: int) -> str:
    return f"{DEVICES_PATH}/{device_id}"


def light_update(
    on: Optional[bool] = None,
    brightness: Optional[int] = None,
    color: Optional[str] = None,
) -> dict[str, Any]:
    """
    Build a light-control update touching only the given fields.

    Examples:
        >>> light_update(on=False)
        {'3311': [{'5850': 0}]}
    """
    control: dict[str, Any] = {}
    if on is not None:
        control[ON_OFF] = 1 if on else 0
    if brightness is not None:
        control[DIMMER] = clamp_brightness(brightness)
    if color is not None:
        control[COLOR_HEX] = color
    return {LIGHT_CONTROL: [control]}


def encode_payload(update: dict[str, Any]) -> bytes:
    return json.dumps(update, separators=(",", ":")).encode("utf-8")


class DeviceRegistry:
    """Translates between gateway resources and Light objects."""

    def __init__(self, messenger: Messenger):
        self.messenger = messenger

    def device_ids(self) -> list[int]:
        payload = self.messenger.get(DEVICES_PATH)
        try:
            ids = json.loads(payload)
        except ValueError as e:
            raise ProtocolError(f"Failed to parse device id list: {e}") from e
        if not isinstance(ids, list) or not all(isinstance(i, int) for i in ids):
            raise ProtocolError(f"Unexpected device id list: {ids!r}")
        return ids

    def get_device(self, device_id: int) -> DeviceResource:
        payload = self.messenger.get(device_path(device_id))
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise DeviceDecodeError(f"Device {device_id} payload is not JSON: {e}") from e
        return DeviceResource.from_dict(data)

    def list_lights(self) -> list[Light]:
        """
        Fetch every device and return the ones that are lights.

        A device that fails for any reason is skipped so the rest are still
        listed. Only a failure to fetch the id list propagates.
        """
        lights = []
        for device_id in self.device_ids():
            try:
                device = self.get_device(device_id)
            except (DeviceDecodeError, ProtocolError, TransportError) as e:
                logger.warning("Skipping device %s: %s", device_id, e)
                continue
            if not device.is_light:
                logger.debug("Device %s (%s) is not a light", device.id, device.name)
                continue
            lights.append(device.to_light())
        logger.debug("Listed %d lights", len(lights))
        return lights

    def update_light(self, device_id: int, update: dict[str, Any]) -> None:
        logger.debug("PUT %s %s", device_path(device_id), update)
        self.messenger.put(device_path(device_id), encode_payload(update))

    def set_power(self, device_id: int, on: bool) -> None:
        self.update_light(device_id, light_update(on=on))

    def set_brightness(self, device_id: int, brightness: int) -> None:
        """Set brightness (0-254); a non-zero level also turns the light on."""
        brightness = clamp_brightness(brightness)
        self.update_light(device_id, light_update(on=brightness > 0, brightness=brightness))

    def set_color(self, device_id: int, color: str) -> None:
        self.update_light(device_id, light_update(color=color))

    def apply_scene_to_light(self, device_id: int, on: bool, brightness: int, color: str) -> None:
        self.update_light(device_id, light_update(on=on, brightness=brightness, color=color))
