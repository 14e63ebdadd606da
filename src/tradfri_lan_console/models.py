"""Light model and the decode step from gateway device resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import DeviceDecodeError

# Gateway resource keys (IPSO object/resource numbers)
LIGHT_CONTROL = "3311"
COLOR_HEX = "5706"
ON_OFF = "5850"
DIMMER = "5851"
NAME = "9001"
INSTANCE_ID = "9003"
REACHABLE = "9019"

MIN_BRIGHTNESS = 0
MAX_BRIGHTNESS = 254

COLOR_COLD = "f5faf6"
COLOR_NEUTRAL = "f1e0b5"
COLOR_WARM = "efd275"


def clamp_brightness(value: int) -> int:
    return max(MIN_BRIGHTNESS, min(MAX_BRIGHTNESS, int(value)))


@dataclass
class Light:
    """A controllable light as shown to callers."""

    id: int
    name: str
    on: bool
    brightness: int
    color: Optional[str] = None
    reachable: bool = True

    def __post_init__(self) -> None:
        self.brightness = clamp_brightness(self.brightness)

    @property
    def brightness_percent(self) -> int:
        """Brightness as a 0-100 percentage."""
        return round(self.brightness / MAX_BRIGHTNESS * 100)

    @property
    def color_temp_label(self) -> str:
        """Rough color temperature name for the hex color."""
        if self.color is None:
            return ""
        if self.color == COLOR_COLD or self.color.startswith("f5"):
            return "cold"
        if self.color == COLOR_WARM or self.color.startswith("efd"):
            return "warm"
        return "neutral"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display or serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "on": self.on,
            "brightness": self.brightness,
            "color": self.color,
            "reachable": self.reachable,
        }


@dataclass
class LightControl:
    """One entry of a device's light-control list."""

    on: bool = False
    brightness: int = 0
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> LightControl:
        if not isinstance(data, dict):
            raise DeviceDecodeError(f"Light control entry is not an object: {data!r}")
        on = data.get(ON_OFF, 0)
        brightness = data.get(DIMMER, 0)
        color = data.get(COLOR_HEX)
        if not isinstance(on, int) or not isinstance(brightness, int):
            raise DeviceDecodeError(f"Malformed light control entry: {data!r}")
        if color is not None and not isinstance(color, str):
            raise DeviceDecodeError(f"Malformed color value: {color!r}")
        return cls(on=on == 1, brightness=clamp_brightness(brightness), color=color)


@dataclass
class DeviceResource:
    """A device as the gateway describes it, keyed by resource number."""

    id: int
    name: str
    reachable: bool = False
    lights: list[LightControl] = field(default_factory=list)

    @property
    def is_light(self) -> bool:
        return bool(self.lights)

    @classmethod
    def from_dict(cls, data: Any) -> DeviceResource:
        """
        Decode a device payload.

        Raises:
            DeviceDecodeError: If required keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise DeviceDecodeError(f"Device resource is not an object: {type(data).__name__}")

        device_id = data.get(INSTANCE_ID)
        name = data.get(NAME)
        if not isinstance(device_id, int) or isinstance(device_id, bool):
            raise DeviceDecodeError(f"Device resource without a valid id: {device_id!r}")
        if not isinstance(name, str):
            raise DeviceDecodeError(f"Device {device_id} has no name")

        controls = data.get(LIGHT_CONTROL) or []
        if not isinstance(controls, list):
            raise DeviceDecodeError(f"Device {device_id} has a malformed light list")

        return cls(
            id=device_id,
            name=name,
            reachable=data.get(REACHABLE, 0) == 1,
            lights=[LightControl.from_dict(entry) for entry in controls],
        )

    def to_light(self) -> Light:
        """
        Build the Light from the first light-control entry.

        Raises:
            DeviceDecodeError: If the device has no light-control entry
        """
        if not self.lights:
            raise DeviceDecodeError(f"Device {self.id} ({self.name}) is not a light")
        control = self.lights[0]
        return Light(
            id=self.id,
            name=self.name,
            on=control.on,
            brightness=control.brightness,
            color=control.color,
            reachable=self.reachable,
        )
