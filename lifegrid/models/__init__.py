"""Data models"""

from .universe import (
    SeedPattern,
    CellPosition,
    TickRequest,
    ResetRequest,
    SpeedRequest,
    UniverseState,
    ToggleResponse,
    RunState,
    AliveCells,
)
from .settings import (
    UniverseConfig,
    SimulationConfig,
    SecurityConfig,
    LifegridConfig,
    validate_config,
)

__all__ = [
    "SeedPattern", "CellPosition", "TickRequest", "ResetRequest", "SpeedRequest",
    "UniverseState", "ToggleResponse", "RunState", "AliveCells",
    "UniverseConfig", "SimulationConfig", "SecurityConfig", "LifegridConfig",
    "validate_config",
]
