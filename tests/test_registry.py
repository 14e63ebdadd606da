"""Tests for device listing and light update payloads."""

import json

import pytest
from aiocoap.numbers.codes import Code

from mock_gateway import FakeGateway, SessionFactory
from tradfri_lan_console.coap import Messenger
from tradfri_lan_console.errors import ProtocolError, TransportError
from tradfri_lan_console.models import DeviceResource, Light
from tradfri_lan_console.registry import DeviceRegistry, encode_payload, light_update


def make_registry(devices) -> tuple[DeviceRegistry, FakeGateway]:
    gateway = FakeGateway(devices)
    return DeviceRegistry(Messenger(SessionFactory(gateway))), gateway


def test_list_lights_end_to_end():
    """Only devices with a light-control entry are listed."""
    registry, _ = make_registry(
        {
            1: {
                "9001": "Kitchen",
                "9003": 1,
                "9019": 1,
                "3311": [{"5850": 1, "5851": 200, "5706": "f1e0b5"}],
            },
            2: {"9001": "Remote", "9003": 2, "9019": 1},
        }
    )

    assert registry.list_lights() == [
        Light(id=1, name="Kitchen", on=True, brightness=200, color="f1e0b5", reachable=True)
    ]


def test_list_lights_with_default_table(registry):
    lights = {light.name: light for light in registry.list_lights()}
    assert set(lights) == {"Kitchen", "Bedroom"}
    assert lights["Bedroom"].reachable is False
    assert lights["Bedroom"].on is False


def test_bad_devices_are_skipped():
    """One broken device never blocks the rest."""
    registry, gateway = make_registry(
        {
            1: b"not json",
            2: {"9001": "no id"},
            3: {"9001": "Ok", "9003": 3, "3311": [{"5850": 1, "5851": 1}]},
            4: {"9001": "Forbidden", "9003": 4, "3311": [{}]},
        }
    )
    gateway.errors["15001/4"] = Code.FORBIDDEN

    assert [light.name for light in registry.list_lights()] == ["Ok"]


def test_malformed_id_list_is_a_protocol_error():
    registry, gateway = make_registry({})
    gateway._get = lambda path: b'{"not": "a list"}'

    with pytest.raises(ProtocolError):
        registry.list_lights()


def test_id_list_rejection_propagates():
    registry, gateway = make_registry({})
    gateway.errors["15001"] = Code.UNAUTHORIZED
    with pytest.raises(ProtocolError):
        registry.list_lights()


def test_id_list_transport_failure_propagates():
    """Without the id list there is nothing to skip to."""
    gateway = FakeGateway()
    gateway.silent.add("15001")
    registry = DeviceRegistry(Messenger(SessionFactory(gateway)))
    with pytest.raises(TransportError):
        registry.list_lights()


def test_unresponsive_device_is_skipped(gateway):
    """A device that times out twice does not hide the devices after it."""
    gateway.silent.add("15001/65537")
    factory = SessionFactory(gateway)
    registry = DeviceRegistry(Messenger(factory))

    assert [light.name for light in registry.list_lights()] == ["Bedroom"]
    assert factory.sessions[0].closed
    assert len(factory.sessions) == 3


def test_set_power_touches_only_on_off(registry, gateway):
    """Turning a light off writes 5850=0 and nothing else."""
    registry.set_power(1, False)
    assert gateway.puts == [("15001/1", {"3311": [{"5850": 0}]})]


def test_set_brightness_zero_turns_off(registry, gateway):
    registry.set_brightness(65537, 0)
    path, payload = gateway.puts[-1]
    assert payload == {"3311": [{"5850": 0, "5851": 0}]}

    gateway.devices[65537] = {"9001": "Kitchen", "9003": 65537, "9019": 1, **payload}
    assert registry.get_device(65537).to_light().on is False


def test_set_brightness_nonzero_turns_on(registry, gateway):
    registry.set_brightness(65537, 200)
    _, payload = gateway.puts[-1]
    assert payload == {"3311": [{"5850": 1, "5851": 200}]}

    light = DeviceResource.from_dict({"9001": "K", "9003": 65537, **payload}).to_light()
    assert light.on is True
    assert light.brightness == 200


def test_set_brightness_is_clamped(registry, gateway):
    registry.set_brightness(65537, 999)
    assert gateway.puts[-1][1] == {"3311": [{"5850": 1, "5851": 254}]}


def test_set_color(registry, gateway):
    registry.set_color(65537, "efd275")
    assert gateway.puts == [("15001/65537", {"3311": [{"5706": "efd275"}]})]


def test_apply_scene_to_light(registry, gateway):
    registry.apply_scene_to_light(65537, True, 30, "f1e0b5")
    assert gateway.puts == [
        ("15001/65537", {"3311": [{"5850": 1, "5851": 30, "5706": "f1e0b5"}]})
    ]


def test_payload_encoding_is_compact():
    assert encode_payload(light_update(on=True)) == b'{"3311":[{"5850":1}]}'
    assert json.loads(encode_payload(light_update())) == {"3311": [{}]}
