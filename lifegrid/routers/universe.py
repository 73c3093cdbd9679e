"""
Universe API - the shared Game of Life grid.

Endpoints:
- GET  /universe          - Full state (cells base64-encoded)
- GET  /universe/cells    - Raw cell bytes
- GET  /universe/render   - Text rendering
- GET  /universe/alive    - Live cell coordinates
- POST /universe/tick     - Advance N generations
- POST /universe/toggle   - Flip one cell
- POST /universe/glider   - Stamp a glider
- POST /universe/reset    - Reseed
- POST /universe/play     - Start the runner
- POST /universe/pause    - Stop the runner
- PUT  /universe/speed    - Change tick rate
- GET  /universe/events   - Server-Sent Events frame stream
"""

import asyncio
import contextlib
import json
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from sse_starlette.sse import EventSourceResponse

from lifegrid.config.omegaconf_settings import get_settings_store
from lifegrid.models.universe import (
    AliveCells,
    CellPosition,
    ResetRequest,
    RunState,
    SpeedRequest,
    TickRequest,
    ToggleResponse,
    UniverseState,
)
from lifegrid.services.universe_manager import (
    Frame,
    UniverseManager,
    get_universe_manager,
    load_simulation_config,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _run_state(frame: Frame) -> RunState:
    return RunState(
        running=frame.running,
        tick_rate_hz=frame.tick_rate_hz,
        generation=frame.generation,
    )


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=UniverseState)
async def get_universe(manager: UniverseManager = Depends(get_universe_manager)):
    """Get the current universe state."""
    frame = await manager.snapshot()
    return UniverseState(**frame.to_dict())


@router.get("/cells")
async def get_cells(manager: UniverseManager = Depends(get_universe_manager)) -> Response:
    """Raw row-major cell buffer, one byte per cell."""
    frame = await manager.snapshot()
    return Response(
        content=frame.cells,
        media_type="application/octet-stream",
        headers={
            "X-Universe-Width": str(frame.width),
            "X-Universe-Height": str(frame.height),
            "X-Universe-Generation": str(frame.generation),
        },
    )


@router.get("/render", response_class=PlainTextResponse)
async def render_universe(manager: UniverseManager = Depends(get_universe_manager)):
    return await manager.render()


@router.get("/alive", response_model=AliveCells)
async def get_alive_cells(manager: UniverseManager = Depends(get_universe_manager)):
    generation, cells = await manager.alive_cells()
    return AliveCells(
        generation=generation,
        cells=[CellPosition(row=row, column=column) for row, column in cells],
    )


# =============================================================================
# Mutations
# =============================================================================

@router.post("/tick", response_model=UniverseState)
async def tick_universe(
    request: Optional[TickRequest] = None,
    manager: UniverseManager = Depends(get_universe_manager),
):
    """Advance the universe by ``steps`` generations (default 1)."""
    steps = request.steps if request else 1
    frame = await manager.tick(steps)
    return UniverseState(**frame.to_dict())


@router.post("/toggle", response_model=ToggleResponse)
async def toggle_cell(
    position: CellPosition,
    manager: UniverseManager = Depends(get_universe_manager),
):
    """Flip a single cell."""
    state, frame = await manager.toggle(position.row, position.column)
    return ToggleResponse(
        row=position.row,
        column=position.column,
        alive=bool(state),
        generation=frame.generation,
    )


@router.post("/glider", response_model=UniverseState)
async def add_glider(
    position: CellPosition,
    manager: UniverseManager = Depends(get_universe_manager),
):
    """Stamp a glider centred on (row, column); coordinates wrap."""
    frame = await manager.add_glider(position.row, position.column)
    return UniverseState(**frame.to_dict())


@router.post("/reset", response_model=UniverseState)
async def reset_universe(
    request: Optional[ResetRequest] = None,
    manager: UniverseManager = Depends(get_universe_manager),
):
    """Reseed the universe. Omitted fields come from the configured universe settings."""
    request = request or ResetRequest()
    configured = (await load_simulation_config(get_settings_store())).universe
    pattern = request.pattern or configured.pattern
    frame = await manager.reset(
        pattern=pattern.value,
        width=request.width if request.width is not None else configured.width,
        height=request.height if request.height is not None else configured.height,
        seed=request.seed if request.seed is not None else configured.seed,
    )
    return UniverseState(**frame.to_dict())


@router.post("/play", response_model=RunState)
async def play(manager: UniverseManager = Depends(get_universe_manager)):
    frame = await manager.play()
    logger.info("Simulation playing")
    return _run_state(frame)


@router.post("/pause", response_model=RunState)
async def pause(manager: UniverseManager = Depends(get_universe_manager)):
    frame = await manager.pause()
    logger.info("Simulation paused")
    return _run_state(frame)


@router.put("/speed", response_model=RunState)
async def set_speed(
    request: SpeedRequest,
    manager: UniverseManager = Depends(get_universe_manager),
):
    frame = await manager.set_tick_rate(request.tick_rate_hz)
    return _run_state(frame)


# =============================================================================
# Streaming
# =============================================================================

@router.get("/events")
async def universe_events_stream(
    request: Request,
    manager: UniverseManager = Depends(get_universe_manager),
) -> EventSourceResponse:
    """
    Stream universe frames via Server-Sent Events.

    Sends a ``connected`` event, then a ``frame`` event with the current
    state followed by one per published change. Frames a slow client
    cannot keep up with are skipped.
    """

    async def event_generator():
        logger.info(f"SSE client connected ({manager.subscriber_count + 1} subscribers)")
        yield {
            "event": "connected",
            "data": json.dumps({
                "message": "Universe stream connected",
                "timestamp": datetime.now().isoformat(),
            }),
        }

        try:
            async with contextlib.aclosing(manager.subscribe()) as frames:
                async for frame in frames:
                    if await request.is_disconnected():
                        logger.info("SSE client disconnected")
                        break
                    yield {
                        "event": "frame",
                        "id": str(frame.generation),
                        "data": json.dumps(frame.to_dict()),
                    }
        except asyncio.CancelledError:
            logger.info("SSE client disconnected")
            raise

    return EventSourceResponse(event_generator())
