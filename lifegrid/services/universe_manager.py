"""Shared universe service: serialized mutations, background runner and frame fan-out."""

import asyncio
import base64
import logging
import threading
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional, Set, Tuple

from lifegrid.config.omegaconf_settings import SettingsStore
from lifegrid.engine import Cell, Universe
from lifegrid.exceptions import InvalidRequest
from lifegrid.models.settings import LifegridConfig, validate_config
from lifegrid.models.universe import SeedPattern

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TICK_RATE_HZ = 10.0
MAX_TICK_RATE_HZ = 120.0
DEFAULT_MAX_STEPS = 1000
MAX_DIMENSION = 1024


@dataclass(frozen=True)
class Frame:
    """Immutable snapshot of the universe published to API callers and subscribers."""
    width: int
    height: int
    generation: int
    population: int
    cells: bytes
    running: bool
    tick_rate_hz: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for API responses (cells base64-encoded)."""
        return {
            "width": self.width,
            "height": self.height,
            "generation": self.generation,
            "population": self.population,
            "running": self.running,
            "tick_rate_hz": self.tick_rate_hz,
            "cells": base64.b64encode(self.cells).decode("ascii"),
        }


def make_universe(
    pattern: str,
    width: int,
    height: int,
    seed: Optional[int] = None,
) -> Universe:
    """Build a freshly seeded universe for a pattern name."""
    try:
        pattern = SeedPattern(pattern)
    except ValueError:
        raise InvalidRequest(f"Unknown seed pattern: {pattern!r}")

    if not (1 <= width <= MAX_DIMENSION and 1 <= height <= MAX_DIMENSION):
        raise InvalidRequest(
            f"Universe size must be between 1 and {MAX_DIMENSION} on each axis, got {width}x{height}"
        )

    if pattern is SeedPattern.BLANK:
        return Universe.blank(width, height)
    if pattern is SeedPattern.RANDOM:
        return Universe.random(width, height, seed=seed)
    return Universe.default(width, height)


class UniverseManager:
    """
    Owns the single universe of the process.

    All mutations run under one asyncio.Lock. Generations are computed on a
    copy in a worker thread and swapped in before the lock is released, so a
    cancelled tick leaves the universe untouched. While playing, a background
    task ticks at ``tick_rate_hz`` and publishes a Frame after every change.
    Subscribers hold a one-slot queue: a slow reader only ever sees the
    newest frame.
    """

    def __init__(
        self,
        universe: Universe,
        tick_rate_hz: float = DEFAULT_TICK_RATE_HZ,
        max_steps_per_request: int = DEFAULT_MAX_STEPS,
    ):
        self._universe = universe
        self._tick_rate_hz = self._validate_rate(tick_rate_hz)
        self.max_steps_per_request = max_steps_per_request

        self._lock = asyncio.Lock()
        self._play_event = asyncio.Event()
        self._runner: Optional[asyncio.Task] = None
        self._subscribers: Set[asyncio.Queue] = set()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background runner (idle until play())."""
        if self._runner is None or self._runner.done():
            self._runner = asyncio.create_task(self._run(), name="lifegrid-runner")
            logger.info("Universe runner started")

    async def stop(self) -> None:
        """Stop the runner and disconnect subscribers."""
        self._play_event.clear()
        if self._runner is not None:
            self._runner.cancel()
            try:
                await self._runner
            except asyncio.CancelledError:
                pass
            self._runner = None

        for queue in list(self._subscribers):
            self._offer(queue, None)
        logger.info("Universe runner stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await self._play_event.wait()
            started = loop.time()
            try:
                async with self._lock:
                    # pause() may have landed while waiting for the lock
                    if self._play_event.is_set():
                        self._universe = await self._advance(self._universe.copy(), 1)
                        self._publish()
            except Exception as e:
                logger.error(f"Error in universe runner: {e}")
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, 1.0 / self._tick_rate_hz - elapsed))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._play_event.is_set()

    @property
    def tick_rate_hz(self) -> float:
        return self._tick_rate_hz

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def snapshot(self) -> Frame:
        async with self._lock:
            return self._frame()

    async def render(self) -> str:
        async with self._lock:
            return self._universe.render()

    async def alive_cells(self):
        async with self._lock:
            return self._universe.generation, self._universe.alive_cells()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def tick(self, steps: int = 1) -> Frame:
        """Advance ``steps`` generations off the event loop."""
        if steps < 1 or steps > self.max_steps_per_request:
            raise InvalidRequest(
                f"steps must be between 1 and {self.max_steps_per_request}, got {steps}"
            )
        async with self._lock:
            self._universe = await self._advance(self._universe.copy(), steps)
            return self._publish()

    @staticmethod
    async def _advance(universe: Universe, steps: int) -> Universe:
        """Tick a private universe in a worker thread and return it."""
        cancelled = threading.Event()

        def tick_many():
            for _ in range(steps):
                if cancelled.is_set():
                    return
                universe.tick()

        try:
            await asyncio.to_thread(tick_many)
        except asyncio.CancelledError:
            # The thread only sees the copy; stop it at the next generation
            cancelled.set()
            raise
        return universe

    async def toggle(self, row: int, column: int) -> Tuple[Cell, Frame]:
        """Flip one cell; returns its new state and the frame published with it."""
        async with self._lock:
            state = self._universe.toggle_cell(row, column)
            frame = self._publish()
        logger.debug(f"Toggled ({row}, {column}) -> {state.name}")
        return state, frame

    async def add_glider(self, row: int, column: int) -> Frame:
        async with self._lock:
            self._universe.add_glider(row, column)
            return self._publish()

    async def reset(
        self,
        pattern: str = SeedPattern.DEFAULT.value,
        width: Optional[int] = None,
        height: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> Frame:
        async with self._lock:
            universe = make_universe(
                pattern,
                width if width is not None else self._universe.width,
                height if height is not None else self._universe.height,
                seed=seed,
            )
            self._universe = universe
            logger.info(f"Universe reset: pattern={pattern} size={universe.width}x{universe.height}")
            return self._publish()

    async def play(self) -> Frame:
        async with self._lock:
            self._play_event.set()
            return self._publish()

    async def pause(self) -> Frame:
        async with self._lock:
            self._play_event.clear()
            return self._publish()

    async def set_tick_rate(self, tick_rate_hz: float) -> Frame:
        rate = self._validate_rate(tick_rate_hz)
        async with self._lock:
            self._tick_rate_hz = rate
            return self._publish()

    # -------------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------------

    async def subscribe(self) -> AsyncIterator[Frame]:
        """Yield the current frame, then every published frame until stop()."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        try:
            yield await self.snapshot()
            while True:
                frame = await queue.get()
                if frame is None:
                    return
                yield frame
        finally:
            self._subscribers.discard(queue)

    def _frame(self) -> Frame:
        universe = self._universe
        return Frame(
            width=universe.width,
            height=universe.height,
            generation=universe.generation,
            population=universe.population(),
            cells=universe.cells,
            running=self.running,
            tick_rate_hz=self._tick_rate_hz,
        )

    def _publish(self) -> Frame:
        frame = self._frame()
        for queue in self._subscribers:
            self._offer(queue, frame)
        return frame

    @staticmethod
    def _offer(queue: asyncio.Queue, item: Optional[Frame]) -> None:
        # Drop the stale frame so the newest one always fits
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(item)

    @staticmethod
    def _validate_rate(tick_rate_hz: float) -> float:
        if not 0 < tick_rate_hz <= MAX_TICK_RATE_HZ:
            raise InvalidRequest(
                f"tick_rate_hz must be in (0, {MAX_TICK_RATE_HZ}], got {tick_rate_hz}"
            )
        return float(tick_rate_hz)


# Global instance (initialized on startup)
_universe_manager: Optional[UniverseManager] = None


def universe_manager_ready() -> bool:
    return _universe_manager is not None


async def get_universe_manager() -> UniverseManager:
    """Get the global UniverseManager instance."""
    if _universe_manager is None:
        raise RuntimeError("UniverseManager not initialized. Call init_universe_manager first.")
    return _universe_manager


async def load_simulation_config(settings_store: SettingsStore) -> LifegridConfig:
    """Merged YAML config, validated and typed."""
    return validate_config(await settings_store.get_config_as_dict())


async def init_universe_manager(settings_store: SettingsStore) -> UniverseManager:
    """Initialize the global UniverseManager from the YAML settings."""
    global _universe_manager

    config = await load_simulation_config(settings_store)
    universe = make_universe(
        config.universe.pattern.value,
        config.universe.width,
        config.universe.height,
        seed=config.universe.seed,
    )
    _universe_manager = UniverseManager(
        universe,
        tick_rate_hz=config.simulation.tick_rate_hz,
        max_steps_per_request=config.simulation.max_steps_per_request,
    )
    await _universe_manager.start()
    if config.simulation.autoplay:
        await _universe_manager.play()
    return _universe_manager


async def shutdown_universe_manager() -> None:
    """Stop and drop the global UniverseManager."""
    global _universe_manager
    if _universe_manager is not None:
        await _universe_manager.stop()
        _universe_manager = None
