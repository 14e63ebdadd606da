"""Pytest configuration and fixtures for tradfri_lan_console tests."""

from __future__ import annotations

import pytest

from mock_gateway import FakeGateway, SessionFactory
from tradfri_lan_console.client import TradfriClient
from tradfri_lan_console.coap import Messenger
from tradfri_lan_console.registry import DeviceRegistry


@pytest.fixture
def gateway() -> FakeGateway:
    """Create a mock gateway with the default device table."""
    return FakeGateway()


@pytest.fixture
def factory(gateway: FakeGateway) -> SessionFactory:
    """Session factory whose sessions never fail."""
    return SessionFactory(gateway)


@pytest.fixture
def messenger(factory: SessionFactory) -> Messenger:
    """Messenger with an open fake session."""
    messenger = Messenger(factory)
    messenger.open()
    return messenger


@pytest.fixture
def registry(messenger: Messenger) -> DeviceRegistry:
    return DeviceRegistry(messenger)


@pytest.fixture
def client(registry: DeviceRegistry) -> TradfriClient:
    return TradfriClient(registry)
