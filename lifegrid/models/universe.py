"""Universe API models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SeedPattern(str, Enum):
    """Starting pattern for a fresh universe."""
    DEFAULT = "default"   # House-shaped seed
    BLANK = "blank"
    RANDOM = "random"


class CellPosition(BaseModel):
    """A row/column pair."""
    row: int = Field(..., ge=0)
    column: int = Field(..., ge=0)


class TickRequest(BaseModel):
    """Advance the simulation by a number of generations."""
    steps: int = Field(1, ge=1)


class ResetRequest(BaseModel):
    """Replace the universe with a freshly seeded one.

    Omitted fields fall back to the configured ``universe.*`` settings.
    """
    pattern: Optional[SeedPattern] = None
    width: Optional[int] = Field(None, ge=1, le=1024)
    height: Optional[int] = Field(None, ge=1, le=1024)
    seed: Optional[int] = None


class SpeedRequest(BaseModel):
    """Change the runner's tick rate."""
    tick_rate_hz: float = Field(..., gt=0, le=120)


class UniverseState(BaseModel):
    """Full universe snapshot for API responses."""
    width: int
    height: int
    generation: int
    population: int
    running: bool
    tick_rate_hz: float
    cells: str = Field(..., description="Base64 row-major cell bytes (0 dead, 1 alive)")


class ToggleResponse(BaseModel):
    """Result of flipping a single cell."""
    row: int
    column: int
    alive: bool
    generation: int


class RunState(BaseModel):
    """Runner state after play/pause/speed changes."""
    running: bool
    tick_rate_hz: float
    generation: int


class AliveCells(BaseModel):
    """Coordinates of live cells."""
    generation: int
    cells: List[CellPosition] = Field(default_factory=list)
