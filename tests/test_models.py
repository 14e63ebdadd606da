"""Tests for the Light model and device resource decoding."""

import pytest

from tradfri_lan_console.errors import DeviceDecodeError
from tradfri_lan_console.models import DeviceResource, Light, clamp_brightness


@pytest.mark.parametrize(
    "start, delta, expected",
    [
        (200, 100, 254),
        (10, -25, 0),
        (0, -64, 0),
        (254, 64, 254),
        (100, 25, 125),
    ],
)
def test_brightness_deltas_stay_in_range(start, delta, expected):
    """Applying a delta never leaves 0..254."""
    assert clamp_brightness(start + delta) == expected


def test_light_clamps_brightness():
    """Out of range brightness is clamped on construction."""
    assert Light(1, "a", True, 300).brightness == 254
    assert Light(1, "a", True, -5).brightness == 0


def test_brightness_percent():
    assert Light(1, "a", True, 254).brightness_percent == 100
    assert Light(1, "a", True, 127).brightness_percent == 50
    assert Light(1, "a", False, 0).brightness_percent == 0


@pytest.mark.parametrize(
    "color, label",
    [
        ("f5faf6", "cold"),
        ("f5e0b5", "cold"),
        ("f1e0b5", "neutral"),
        ("efd275", "warm"),
        ("efd000", "warm"),
        ("ffffff", "neutral"),
        (None, ""),
    ],
)
def test_color_temp_label(color, label):
    assert Light(1, "a", True, 1, color=color).color_temp_label == label


def test_decode_light_device():
    """A device with a light-control entry becomes a Light."""
    device = DeviceResource.from_dict(
        {
            "9001": "Kitchen",
            "9003": 1,
            "9019": 1,
            "3311": [{"5850": 1, "5851": 200, "5706": "f1e0b5"}],
        }
    )
    assert device.is_light
    assert device.to_light() == Light(
        id=1, name="Kitchen", on=True, brightness=200, color="f1e0b5", reachable=True
    )


def test_decode_unreachable_light():
    """Reachability 0 is kept as reachable=False."""
    device = DeviceResource.from_dict(
        {"9001": "Hall", "9003": 2, "9019": 0, "3311": [{"5850": 1, "5851": 10}]}
    )
    light = device.to_light()
    assert light.reachable is False
    assert light.color is None


def test_missing_fields_default_to_off():
    """Absent on/off, brightness and reachability decode as off/0/unreachable."""
    light = DeviceResource.from_dict({"9001": "x", "9003": 3, "3311": [{}]}).to_light()
    assert (light.on, light.brightness, light.reachable) == (False, 0, False)


def test_device_without_light_control_is_not_a_light():
    device = DeviceResource.from_dict({"9001": "Remote", "9003": 4, "9019": 1})
    assert not device.is_light
    with pytest.raises(DeviceDecodeError):
        device.to_light()


def test_empty_light_list_is_not_a_light():
    device = DeviceResource.from_dict({"9001": "Odd", "9003": 5, "3311": []})
    assert not device.is_light


@pytest.mark.parametrize(
    "data",
    [
        [],
        "device",
        {"9001": "no id"},
        {"9003": "7", "9001": "string id"},
        {"9003": 7},
        {"9003": 7, "9001": "x", "3311": {"5850": 1}},
        {"9003": 7, "9001": "x", "3311": ["on"]},
        {"9003": 7, "9001": "x", "3311": [{"5851": "high"}]},
        {"9003": 7, "9001": "x", "3311": [{"5706": 12}]},
    ],
)
def test_malformed_devices_raise(data):
    with pytest.raises(DeviceDecodeError):
        DeviceResource.from_dict(data)


def test_only_first_light_control_is_used():
    device = DeviceResource.from_dict(
        {"9001": "Pair", "9003": 8, "3311": [{"5850": 1, "5851": 5}, {"5850": 0, "5851": 99}]}
    )
    assert device.to_light().brightness == 5
