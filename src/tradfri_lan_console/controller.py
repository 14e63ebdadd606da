"""
Console state and actions, independent of any rendering.

This module contains the LightController, which owns the local light
snapshots and turns user actions into gateway commands:
- Local state is updated first so the UI reacts instantly
- Commands go through the CommandDispatcher; the calling thread never waits
- Dispatcher results are drained on poll() and shown as status messages
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from typing import Callable, Optional

from .client import TradfriClient
from .config import ScenesConfig
from .dispatch import CommandDispatcher
from .models import (
    COLOR_COLD,
    COLOR_NEUTRAL,
    COLOR_WARM,
    Light,
    clamp_brightness,
)
from .scenes import Scene

logger = logging.getLogger(__name__)

COLOR_TEMPS = (COLOR_COLD, COLOR_NEUTRAL, COLOR_WARM)
COLOR_TEMP_LABELS = ("cold", "neutral", "warm")

STATUS_TTL_S = 3.0
REFRESH_LABEL = "refresh"


class LightController:
    """Application state for the interactive console."""

    def __init__(
        self,
        client: TradfriClient,
        dispatcher: CommandDispatcher,
        scenes: Optional[ScenesConfig] = None,
        refresh_interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.dispatcher = dispatcher
        self.scenes = scenes or ScenesConfig()
        self.refresh_interval = refresh_interval
        self._clock = clock

        self.lights: list[Light] = []
        self.selected = 0
        self.last_refresh: Optional[float] = None
        self._status: Optional[tuple[str, float]] = None
        self._refresh_future: Optional[Future] = None

    # Status line

    def set_status(self, message: str) -> None:
        self._status = (message, self._clock())

    @property
    def status(self) -> Optional[str]:
        if self._status is None:
            return None
        message, at = self._status
        if self._clock() - at < STATUS_TTL_S:
            return message
        return None

    # Selection

    @property
    def selected_light(self) -> Optional[Light]:
        if 0 <= self.selected < len(self.lights):
            return self.lights[self.selected]
        return None

    def select_next(self) -> None:
        if self.lights:
            self.selected = min(self.selected + 1, len(self.lights) - 1)

    def select_prev(self) -> None:
        self.selected = max(self.selected - 1, 0)

    @property
    def lights_on(self) -> int:
        return sum(1 for light in self.lights if light.on)

    @property
    def lights_off(self) -> int:
        return sum(1 for light in self.lights if not light.on)

    # Refresh

    def refresh(self) -> None:
        """Fetch lights on the calling thread. Errors propagate."""
        self._set_lights(self.client.list_lights())

    def start_background_refresh(self) -> None:
        if self._refresh_future is not None and not self._refresh_future.done():
            return
        self._refresh_future = self.dispatcher.submit(REFRESH_LABEL, self.client.clone().list_lights)

    def refresh_due(self) -> bool:
        if self.last_refresh is None:
            return True
        return self._clock() - self.last_refresh >= self.refresh_interval

    def poll(self) -> None:
        """Apply finished background work; start a refresh when one is due."""
        for result in self.dispatcher.drain_results():
            if result.label == REFRESH_LABEL:
                if result.ok:
                    self._set_lights(result.value)
                else:
                    self.last_refresh = self._clock()
                    self.set_status(f"Refresh failed: {result.error}")
            elif not result.ok:
                self.set_status(f"Failed: {result.label}: {result.error}")
        if self.refresh_due():
            self.start_background_refresh()

    def _set_lights(self, lights: list[Light]) -> None:
        self.lights = sorted(lights, key=lambda light: light.name)
        if self.selected >= len(self.lights):
            self.selected = max(len(self.lights) - 1, 0)
        self.last_refresh = self._clock()

    # Actions

    def toggle_selected(self) -> None:
        light = self.selected_light
        if light is None:
            return
        light.on = not light.on
        self.set_status(f"{light.name}: {'ON' if light.on else 'OFF'}")
        self.dispatcher.submit(
            f"{light.name} power", self.client.clone().set_power, light.id, light.on
        )

    def dim_selected(self, delta: int) -> None:
        light = self.selected_light
        if light is None:
            return
        light.brightness = clamp_brightness(light.brightness + delta)
        light.on = light.brightness > 0
        self.set_status(f"{light.name}: {light.brightness_percent}%")
        self.dispatcher.submit(
            f"{light.name} brightness",
            self.client.clone().set_brightness,
            light.id,
            light.brightness,
        )

    def cycle_color_temp(self, warmer: bool) -> None:
        light = self.selected_light
        if light is None:
            return
        if light.color in COLOR_TEMPS:
            index = COLOR_TEMPS.index(light.color)
            index = min(index + 1, len(COLOR_TEMPS) - 1) if warmer else max(index - 1, 0)
        else:
            index = len(COLOR_TEMPS) - 1 if warmer else 0
        light.color = COLOR_TEMPS[index]
        self.set_status(f"{light.name}: {COLOR_TEMP_LABELS[index]}")
        self.dispatcher.submit(
            f"{light.name} color", self.client.clone().set_color, light.id, light.color
        )

    def apply_scene(self, scene: Scene) -> None:
        on, brightness, color = scene.settings
        targets = [light for light in self.lights if not self.scenes.is_excluded(scene, light.name)]
        for light in targets:
            light.on = on
            if on:
                light.brightness = brightness
                light.color = color
        self.set_status(f"Scene: {scene.label}")
        self.dispatcher.submit_scene(
            self.client.clone(),
            f"Scene {scene.label}",
            [light.id for light in targets],
            on,
            brightness,
            color,
        )
