"""Command line entry point for tradfri-console."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .client import TradfriClient
from .config import APP_NAME, DEFAULT_CONFIG_FILE, ConsoleConfig
from .controller import LightController
from .dispatch import CommandDispatcher
from .errors import ConnectError, TradfriError
from .models import Light
from .scenes import Scene

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def default_log_file() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / APP_NAME / f"{APP_NAME}.log"


def setup_logging(level: Optional[str], console: bool, log_file: Optional[Path] = None) -> None:
    """
    Configure root logging.

    The interactive console owns the terminal, so it logs to a file in the
    cache directory. Headless commands log to stderr through rich.
    """
    name = (level or os.environ.get("TRADFRI_LOG_LEVEL") or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, name, logging.INFO))

    if console:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        path = log_file or default_log_file()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Terminal controller for gateway-connected smart lights.",
        epilog=f"Scenes: {', '.join(Scene.names())}",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-s", "--scene", metavar="NAME", help="apply a scene and exit (no console)")
    mode.add_argument("--list", action="store_true", help="print all lights and exit")
    parser.add_argument("--json", action="store_true", help="with --list, print JSON instead of a table")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_FILE,
        help=f"config file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def render_lights(lights: list[Light]) -> Table:
    table = Table(title="Lights", box=box.SIMPLE_HEAVY)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("State")
    table.add_column("Brightness", justify="right")
    table.add_column("Color")

    for light in sorted(lights, key=lambda light: light.name):
        if not light.reachable:
            state = "[red]unreachable[/]"
        elif light.on:
            state = "[green]on[/]"
        else:
            state = "[dim]off[/]"
        color = f"{light.color} ({light.color_temp_label})" if light.color else ""
        table.add_row(str(light.id), light.name, state, f"{light.brightness_percent}%", color)
    return table


def apply_scene(client: TradfriClient, config: ConsoleConfig, scene: Scene) -> list[tuple[Light, TradfriError]]:
    """Apply a scene to every non-excluded light, continuing past failures."""
    on, brightness, color = scene.settings
    failures = []
    for light in client.list_lights():
        if config.scenes.is_excluded(scene, light.name):
            logger.info("Skipping excluded light %s", light.name)
            continue
        try:
            client.apply_scene_to_light(light.id, on, brightness, color)
        except TradfriError as e:
            logger.warning("Scene %s failed for %s: %s", scene.label, light.name, e)
            failures.append((light, e))
    return failures


def connect(config: ConsoleConfig, config_file: Path, out: Console) -> Optional[TradfriClient]:
    gateway = config.gateway
    if not gateway.has_credentials:
        out.print("[red]Error: gateway credentials not configured.[/]")
        out.print(f"Edit {config_file} and set gateway.identity and gateway.psk,")
        out.print("or export TRADFRI_IDENTITY and TRADFRI_PSK.")
        return None
    try:
        return TradfriClient.connect(
            gateway.host,
            gateway.identity,
            gateway.psk,
            port=gateway.port,
            timeout=gateway.timeout,
        )
    except ConnectError as e:
        out.print(f"[red]Could not connect to the gateway at {gateway.host}: {e}[/]")
        out.print(f"Check the gateway address, identity and psk in {config_file}.")
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.json and not args.list:
        parser.error("--json requires --list")
    headless = bool(args.scene or args.list)
    setup_logging(args.log_level, console=headless)
    out = Console(stderr=not headless)

    scene: Optional[Scene] = None
    if args.scene:
        scene = Scene.parse(args.scene)
        if scene is None:
            out.print(f"[red]Unknown scene: {args.scene!r}[/]")
            out.print(f"Available scenes: {', '.join(Scene.names())}")
            return 2

    config = ConsoleConfig.load(args.config)
    client = connect(config, args.config, out)
    if client is None:
        return 1

    with client:
        try:
            if args.list:
                lights = sorted(client.list_lights(), key=lambda light: light.name)
                if args.json:
                    out.print_json(data=[light.to_dict() for light in lights])
                else:
                    out.print(render_lights(lights))
                return 0
            if scene is not None:
                failures = apply_scene(client, config, scene)
                if failures:
                    out.print(f"[yellow]{scene.label} applied, {len(failures)} light(s) failed[/]")
                    return 1
                out.print(f"[green]{scene.label} applied[/]")
                return 0
        except TradfriError as e:
            out.print(f"[red]Error: {e}[/]")
            return 1

        return run_console(client, config)


def run_console(client: TradfriClient, config: ConsoleConfig) -> int:
    from .shell import run_shell

    dispatcher = CommandDispatcher()
    controller = LightController(
        client,
        dispatcher,
        scenes=config.scenes,
        refresh_interval=config.ui.refresh_interval,
    )
    try:
        run_shell(controller, config.gateway.host, theme=config.ui.resolve_theme())
    finally:
        dispatcher.shutdown(wait=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
