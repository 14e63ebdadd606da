"""Configuration management for tradfri-console."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .scenes import Scene
from .transport import COAPS_PORT, IO_TIMEOUT_S

logger = logging.getLogger(__name__)

APP_NAME = "tradfri-console"


def default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


DEFAULT_CONFIG_FILE = default_config_dir() / "config.yaml"

THEMES = ("auto", "light", "dark")


@dataclass
class GatewayConfig:
    """Gateway address and PSK credentials."""

    host: str = "192.168.1.100"
    identity: str = ""
    psk: str = ""
    port: int = COAPS_PORT
    timeout: float = IO_TIMEOUT_S

    @property
    def has_credentials(self) -> bool:
        return bool(self.identity and self.psk)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "host": self.host,
            "identity": self.identity,
            "psk": self.psk,
            "port": self.port,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GatewayConfig:
        """Create from dictionary."""
        return cls(
            host=str(data.get("host", "192.168.1.100")),
            identity=str(data.get("identity") or ""),
            psk=str(data.get("psk") or ""),
            port=int(data.get("port", COAPS_PORT)),
            timeout=float(data.get("timeout", IO_TIMEOUT_S)),
        )


@dataclass
class UiConfig:
    """Console UI preferences."""

    theme: str = "auto"
    refresh_interval: float = 5.0

    def resolve_theme(self, environ: Optional[dict[str, str]] = None) -> str:
        """
        Resolve the configured theme to "light" or "dark".

        "auto" looks at COLORFGBG (set by many terminals as "fg;bg"); a
        background of 7 or 15 means a light terminal. Call once at startup.
        """
        theme = self.theme.lower()
        if theme in ("light", "dark"):
            return theme
        env = os.environ if environ is None else environ
        background = env.get("COLORFGBG", "").split(";")[-1]
        return "light" if background in ("7", "15") else "dark"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"theme": self.theme, "refresh_interval": self.refresh_interval}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UiConfig:
        """Create from dictionary."""
        theme = str(data.get("theme", "auto")).lower()
        if theme not in THEMES:
            logger.warning("Unknown theme %r, using auto", theme)
            theme = "auto"
        return cls(theme=theme, refresh_interval=float(data.get("refresh_interval", 5.0)))


@dataclass
class ScenesConfig:
    """Lights left alone by scenes, globally or per scene key."""

    exclude: list[str] = field(default_factory=list)
    exclude_by_scene: dict[str, list[str]] = field(default_factory=dict)

    def is_excluded(self, scene: Scene, light_name: str) -> bool:
        name = light_name.casefold()
        if any(e.casefold() == name for e in self.exclude):
            return True
        return any(
            key.casefold() == scene.key and any(e.casefold() == name for e in names)
            for key, names in self.exclude_by_scene.items()
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"exclude": self.exclude, "exclude_by_scene": self.exclude_by_scene}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScenesConfig:
        """Create from dictionary."""
        return cls(
            exclude=[str(name) for name in data.get("exclude") or []],
            exclude_by_scene={
                str(key): [str(name) for name in names or []]
                for key, names in (data.get("exclude_by_scene") or {}).items()
            },
        )


@dataclass
class ConsoleConfig:
    """Main configuration for tradfri-console."""

    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    scenes: ScenesConfig = field(default_factory=ScenesConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "gateway": self.gateway.to_dict(),
            "ui": self.ui.to_dict(),
            "scenes": self.scenes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConsoleConfig:
        """Create from dictionary."""
        return cls(
            gateway=GatewayConfig.from_dict(data.get("gateway") or {}),
            ui=UiConfig.from_dict(data.get("ui") or {}),
            scenes=ScenesConfig.from_dict(data.get("scenes") or {}),
        )

    @classmethod
    def load(cls, config_file: Path = DEFAULT_CONFIG_FILE) -> ConsoleConfig:
        """Load configuration from file, writing a default one if it is missing."""
        if not config_file.exists():
            config = cls()
            try:
                config.save(config_file)
                logger.info("Generated default config at %s", config_file)
            except OSError as e:
                logger.warning("Could not write default config to %s: %s", config_file, e)
            return config.with_env_overrides()

        try:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
            config = cls.from_dict(data)
        except (OSError, yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to load config from %s: %s", config_file, e)
            config = cls()
        return config.with_env_overrides()

    def save(self, config_file: Path = DEFAULT_CONFIG_FILE) -> None:
        """Save configuration to file."""
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, default_flow_style=False)

    def with_env_overrides(self) -> ConsoleConfig:
        """Apply TRADFRI_IDENTITY / TRADFRI_PSK from the environment, if set."""
        identity = os.environ.get("TRADFRI_IDENTITY")
        psk = os.environ.get("TRADFRI_PSK")
        if identity:
            self.gateway.identity = identity
        if psk:
            self.gateway.psk = psk
        return self
