"""Named lighting scenes and their settings."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .models import COLOR_COLD, COLOR_NEUTRAL


class Scene(Enum):
    """Lighting scenes. Values are the config/CLI keys."""

    ALL_ON = "on"
    ALL_OFF = "off"
    MOVIE = "movie"
    BRIGHT = "bright"
    COZY = "cozy"
    NIGHT = "night"
    EVENING = "evening"
    READING = "reading"
    GOOD_MORNING = "morning"

    @property
    def key(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def settings(self) -> tuple[bool, int, str]:
        """(on, brightness 0-254, color hex)"""
        return _SETTINGS[self]

    @classmethod
    def parse(cls, name: str) -> Optional[Scene]:
        return _ALIASES.get(name.strip().lower())

    @classmethod
    def names(cls) -> list[str]:
        return [scene.key for scene in cls]


_LABELS = {
    Scene.ALL_ON: "All On",
    Scene.ALL_OFF: "All Off",
    Scene.MOVIE: "Movie",
    Scene.BRIGHT: "Bright",
    Scene.COZY: "Cozy",
    Scene.NIGHT: "Night",
    Scene.EVENING: "Evening",
    Scene.READING: "Reading",
    Scene.GOOD_MORNING: "Good Morning",
}

_SETTINGS = {
    Scene.ALL_ON: (True, 254, COLOR_COLD),
    Scene.ALL_OFF: (False, 0, COLOR_COLD),
    Scene.MOVIE: (True, 30, COLOR_NEUTRAL),
    Scene.BRIGHT: (True, 254, COLOR_COLD),
    Scene.COZY: (True, 127, COLOR_NEUTRAL),
    Scene.NIGHT: (True, 15, COLOR_NEUTRAL),
    Scene.EVENING: (True, 150, COLOR_NEUTRAL),
    Scene.READING: (True, 200, COLOR_COLD),
    Scene.GOOD_MORNING: (True, 180, COLOR_COLD),
}

_ALIASES = {
    "on": Scene.ALL_ON,
    "allon": Scene.ALL_ON,
    "all-on": Scene.ALL_ON,
    "off": Scene.ALL_OFF,
    "alloff": Scene.ALL_OFF,
    "all-off": Scene.ALL_OFF,
    "movie": Scene.MOVIE,
    "film": Scene.MOVIE,
    "bright": Scene.BRIGHT,
    "ljus": Scene.BRIGHT,
    "cozy": Scene.COZY,
    "mysig": Scene.COZY,
    "night": Scene.NIGHT,
    "natt": Scene.NIGHT,
    "evening": Scene.EVENING,
    "kväll": Scene.EVENING,
    "kvall": Scene.EVENING,
    "reading": Scene.READING,
    "läsning": Scene.READING,
    "lasning": Scene.READING,
    "morning": Scene.GOOD_MORNING,
    "good-morning": Scene.GOOD_MORNING,
    "morgon": Scene.GOOD_MORNING,
}
