"""Full-screen light console built on prompt_toolkit."""

from __future__ import annotations

from typing import Any

from prompt_toolkit import Application
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from ..controller import LightController
from ..errors import TradfriError
from ..models import Light
from .keybindings import KeyBindingManager
from .toolbar import ToolbarManager

SHELL_VERSION = "1.0.0"

NAME_WIDTH = 25
REDRAW_INTERVAL_S = 0.5

THEMES = {
    "dark": Style.from_dict({
        "title": "bold #88c0d0",
        "light": "#d8dee9",
        "selected": "reverse bold",
        "state-on": "#a3be8c",
        "state-off": "#bf616a",
        "state-unreachable": "bold #bf616a",
        "bar": "#81a1c1",
        "temp-warm": "#ebcb8b",
        "temp-cold": "#88c0d0",
        "help": "#d8dee9",
        "bottom-toolbar": "bg:#2e3440 #d8dee9",
        "status-connected": "#a3be8c",
        "status-disconnected": "#bf616a",
        "status-message": "bold #ebcb8b",
        "light-on": "#a3be8c",
        "light-off": "#bf616a",
        "key": "#81a1c1",
    }),
    "light": Style.from_dict({
        "title": "bold #005f87",
        "light": "#1c1c1c",
        "selected": "reverse bold",
        "state-on": "#2e7d32",
        "state-off": "#c62828",
        "state-unreachable": "bold #c62828",
        "bar": "#1565c0",
        "temp-warm": "#b26a00",
        "temp-cold": "#00838f",
        "help": "#1c1c1c",
        "bottom-toolbar": "bg:#eceff4 #1c1c1c",
        "status-connected": "#2e7d32",
        "status-disconnected": "#c62828",
        "status-message": "bold #b26a00",
        "light-on": "#2e7d32",
        "light-off": "#c62828",
        "key": "#1565c0",
    }),
}

HELP_TEXT = """\
 Navigation     j/k or up/down
 Toggle         space
 Dim            h/l or left/right (page up/down for big steps)
 Color temp     + warmer, - colder
 Scenes         a on   o off   m movie   b bright   c cozy
                n night   e evening   r reading   g morning
 Refresh        R
 Help           ? (close with ?, esc or enter)
 Quit           q or esc
"""


def brightness_bar(light: Light, segments: int = 10) -> str:
    filled = min(light.brightness_percent * segments // 100, segments)
    return "█" * filled + "░" * (segments - filled)


def light_line(light: Light, selected: bool) -> list[tuple[str, str]]:
    """Formatted fragments for one row of the light list."""
    if not light.reachable:
        icon, state, state_style = "!", "UNR ", "class:state-unreachable"
    elif light.on:
        icon, state, state_style = "*", " ON ", "class:state-on"
    else:
        icon, state, state_style = ".", "OFF ", "class:state-off"

    name = light.name
    if len(name) > NAME_WIDTH:
        name = name[: NAME_WIDTH - 3] + "..."

    temp = light.color_temp_label
    marker = {"warm": ("class:temp-warm", "●"), "cold": ("class:temp-cold", "○")}.get(
        temp, ("", " ")
    )

    return [
        (state_style, f" {icon} "),
        ("class:selected" if selected else "class:light", f"{name:<{NAME_WIDTH}}"),
        ("", "  "),
        (state_style, state),
        ("class:bar", brightness_bar(light)),
        ("class:light", f" {light.brightness_percent:>3}%"),
        ("", "  "),
        marker,
        ("", "\n"),
    ]


class LightShell:
    """Interactive console over a LightController."""

    def __init__(self, controller: LightController, host: str, theme: str = "dark"):
        """
        Initialize the shell.

        Args:
            controller: Console state and actions
            host: Gateway address shown in the toolbar
            theme: Resolved theme name, "light" or "dark"
        """
        self.controller = controller
        self.host = host
        self.show_help = False
        self.toolbar = ToolbarManager(self)
        self.keybindings = KeyBindingManager(self)

        body = Window(FormattedTextControl(self._body_fragments), wrap_lines=False)
        toolbar = Window(
            FormattedTextControl(self.toolbar.get_toolbar_fragments),
            height=2,
            style="class:bottom-toolbar",
        )
        self.app: Application[Any] = Application(
            layout=Layout(HSplit([body, toolbar])),
            key_bindings=self.keybindings.create_key_bindings(),
            style=THEMES.get(theme, THEMES["dark"]),
            full_screen=True,
            refresh_interval=REDRAW_INTERVAL_S,
            before_render=self._before_render,
        )

    def _before_render(self, app: Application[Any]) -> None:
        self.controller.poll()

    def _body_fragments(self) -> list[tuple[str, str]]:
        fragments: list[tuple[str, str]] = [("class:title", " Lights\n\n")]
        if self.show_help:
            fragments.append(("class:help", HELP_TEXT))
            return fragments
        if not self.controller.lights:
            fragments.append(("class:light", " No lights found.\n"))
        for index, light in enumerate(self.controller.lights):
            fragments.extend(light_line(light, index == self.controller.selected))
        return fragments

    def run(self) -> None:
        self.controller.set_status("Connecting to gateway...")
        try:
            self.controller.refresh()
        except TradfriError as e:
            self.controller.set_status(f"Connection failed: {e}")
        self.app.run()


def run_shell(controller: LightController, host: str, theme: str = "dark") -> None:
    """Run the interactive console until the user quits."""
    LightShell(controller, host, theme).run()
