"""Background command dispatch with an observable result channel."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .client import TradfriClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one dispatched command."""

    label: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None


class CommandDispatcher:
    """
    Runs gateway commands off the calling thread.

    Callers never wait on the network: ``submit`` returns at once, and every
    outcome is published to a queue that the UI drains when it redraws.
    """

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tradfri-cmd")
        self._results: queue.Queue[CommandResult] = queue.Queue()

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: self._publish(label, f))
        return future

    def submit_scene(
        self,
        client: TradfriClient,
        label: str,
        targets: Iterable[int],
        on: bool,
        brightness: int,
        color: str,
    ) -> Future:
        """Apply one scene setting to each target, continuing past failures."""
        ids = list(targets)
        return self._executor.submit(self._run_scene, client, label, ids, on, brightness, color)

    def drain_results(self) -> list[CommandResult]:
        results = []
        while True:
            try:
                results.append(self._results.get_nowait())
            except queue.Empty:
                return results

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run_scene(
        self,
        client: TradfriClient,
        label: str,
        ids: list[int],
        on: bool,
        brightness: int,
        color: str,
    ) -> int:
        failures = 0
        for light_id in ids:
            try:
                client.apply_scene_to_light(light_id, on, brightness, color)
            except Exception as e:
                failures += 1
                logger.warning("%s: light %s failed: %s", label, light_id, e)
                self._results.put(CommandResult(f"{label} (light {light_id})", False, error=e))
        self._results.put(CommandResult(label, failures == 0, value=len(ids) - failures))
        return failures

    def _publish(self, label: str, future: Future) -> None:
        error = future.exception()
        if error is None:
            self._results.put(CommandResult(label, True, value=future.result()))
            return
        logger.warning("%s failed: %s", label, error)
        self._results.put(CommandResult(label, False, error=error))
