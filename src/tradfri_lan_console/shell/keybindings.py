"""Key bindings configuration for the tradfri console.

This module maps keyboard shortcuts to LightController actions. Every
handler returns immediately; gateway commands run on the dispatcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prompt_toolkit.filters import Condition, Filter
from prompt_toolkit.key_binding import KeyBindings

from ..errors import TradfriError
from ..scenes import Scene

if TYPE_CHECKING:
    from .core import LightShell

SMALL_STEP = 25
LARGE_STEP = 64

DIM_KEYS = {
    "h": -SMALL_STEP,
    "left": -SMALL_STEP,
    "l": SMALL_STEP,
    "right": SMALL_STEP,
    "pagedown": -LARGE_STEP,
    "pageup": LARGE_STEP,
}

SCENE_KEYS = {
    "a": Scene.ALL_ON,
    "o": Scene.ALL_OFF,
    "m": Scene.MOVIE,
    "b": Scene.BRIGHT,
    "c": Scene.COZY,
    "n": Scene.NIGHT,
    "e": Scene.EVENING,
    "r": Scene.READING,
    "g": Scene.GOOD_MORNING,
}


class KeyBindingManager:
    """Manages key bindings for the shell."""

    def __init__(self, shell: LightShell):
        """
        Initialize the key binding manager.

        Args:
            shell: Reference to the LightShell instance
        """
        self.shell = shell

    def create_key_bindings(self) -> KeyBindings:
        """
        Create and configure all key bindings for the shell.

        Returns:
            Configured KeyBindings instance
        """
        kb = KeyBindings()
        controller = self.shell.controller
        help_open = Condition(lambda: self.shell.show_help)
        normal = ~help_open

        # Help popup swallows everything except its close keys
        @kb.add("?", filter=help_open)
        @kb.add("escape", filter=help_open)
        @kb.add("enter", filter=help_open)
        def _(event):
            """Close help."""
            self.shell.show_help = False

        @kb.add("?", filter=normal)
        def _(event):
            """Open help."""
            self.shell.show_help = True

        @kb.add("c-c")
        @kb.add("q", filter=normal)
        @kb.add("escape", filter=normal)
        def _(event):
            """Quit the console."""
            event.app.exit(result=True)

        @kb.add("j", filter=normal)
        @kb.add("down", filter=normal)
        def _(event):
            controller.select_next()

        @kb.add("k", filter=normal)
        @kb.add("up", filter=normal)
        def _(event):
            controller.select_prev()

        @kb.add(" ", filter=normal)
        def _(event):
            controller.toggle_selected()

        for key, delta in DIM_KEYS.items():
            self._add_dim(kb, key, delta, normal)

        @kb.add("+", filter=normal)
        @kb.add("=", filter=normal)
        def _(event):
            controller.cycle_color_temp(warmer=True)

        @kb.add("-", filter=normal)
        def _(event):
            controller.cycle_color_temp(warmer=False)

        for key, scene in SCENE_KEYS.items():
            self._add_scene(kb, key, scene, normal)

        @kb.add("R", filter=normal)
        def _(event):
            """Force a blocking refresh."""
            try:
                controller.refresh()
            except TradfriError as e:
                controller.set_status(f"Refresh failed: {e}")
            else:
                controller.set_status("Refreshed")

        return kb

    def _add_dim(self, kb: KeyBindings, key: str, delta: int, filter: Filter) -> None:
        @kb.add(key, filter=filter)
        def _(event):
            self.shell.controller.dim_selected(delta)

    def _add_scene(self, kb: KeyBindings, key: str, scene: Scene, filter: Filter) -> None:
        @kb.add(key, filter=filter)
        def _(event):
            self.shell.controller.apply_scene(scene)
