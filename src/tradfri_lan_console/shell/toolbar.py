"""Toolbar management for the tradfri console.

This module handles the bottom toolbar display: gateway connection state,
light counts, and the transient status message from the controller.
"""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

from prompt_toolkit.utils import get_cwidth

if TYPE_CHECKING:
    from .core import LightShell

BASE = "class:bottom-toolbar"


def S(cls: str) -> str:
    """Apply style class with base toolbar class."""
    return f"{BASE} class:{cls}"


def fit_line(fragments: list[tuple[str, str]], target_width: int) -> list[tuple[str, str]]:
    """Fit line to terminal width with ellipsis if needed."""
    out: list[tuple[str, str]] = []
    used = 0

    def add(style: str, text: str) -> None:
        nonlocal used
        if not text or used >= target_width:
            return
        remaining = target_width - used
        w = get_cwidth(text)
        if w <= remaining:
            out.append((style, text))
            used += w
            return

        ell = "…"
        ell_w = get_cwidth(ell)
        keep = remaining - ell_w if remaining > ell_w else remaining

        t = text
        while t and get_cwidth(t) > keep:
            t = t[:-1]

        if keep > 0 and remaining > ell_w:
            out.append((style, t + ell))
        elif keep > 0:
            out.append((style, t))
        used = target_width

    for s, t in fragments:
        add(s, t)

    if used < target_width:
        out.append((S("toolbar"), " " * (target_width - used)))

    return out


class ToolbarManager:
    """Manages the bottom toolbar display."""

    def __init__(self, shell: LightShell):
        """
        Initialize the toolbar manager.

        Args:
            shell: Reference to the LightShell instance
        """
        self.shell = shell

    def get_toolbar_fragments(self, width: int = 0) -> list[tuple[str, str]]:
        """
        Get formatted toolbar fragments for display.

        Returns:
            List of (style, text) tuples for prompt_toolkit formatted text
        """
        if width <= 0:
            width = shutil.get_terminal_size(fallback=(80, 24)).columns

        controller = self.shell.controller
        parts: list[tuple[str, str]] = []

        line1: list[tuple[str, str]] = []
        if controller.client.connected:
            line1.append((S("status-connected"), "● Gateway "))
        else:
            line1.append((S("status-disconnected"), "○ Gateway "))
        line1.extend([
            (S("toolbar-info"), self.shell.host),
            (S("toolbar-info"), " │ Lights: On "),
            (S("light-on"), str(controller.lights_on)),
            (S("toolbar-info"), " | Off "),
            (S("light-off"), str(controller.lights_off)),
            (S("toolbar-info"), " | Total "),
            (S("toolbar-info"), str(len(controller.lights))),
        ])
        parts.extend(fit_line(line1, width))
        parts.append((S("toolbar"), "\n"))

        status = controller.status
        if status:
            line2 = [(S("status-message"), status)]
        else:
            line2 = [
                (S("key"), "j/k"), (S("toolbar-info"), " nav  "),
                (S("key"), "space"), (S("toolbar-info"), " toggle  "),
                (S("key"), "h/l"), (S("toolbar-info"), " dim  "),
                (S("key"), "+/-"), (S("toolbar-info"), " color  "),
                (S("key"), "?"), (S("toolbar-info"), " help  "),
                (S("key"), "q"), (S("toolbar-info"), " quit"),
            ]
        parts.extend(fit_line(line2, width))
        return parts
