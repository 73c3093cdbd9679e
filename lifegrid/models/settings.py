"""Simulation configuration models.

The merged YAML config is validated against ``LifegridConfig`` before it is
persisted and again when it is used to build a universe.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lifegrid.exceptions import InvalidRequest
from lifegrid.models.universe import SeedPattern


class UniverseConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    width: int = Field(64, ge=1, le=1024)
    height: int = Field(64, ge=1, le=1024)
    pattern: SeedPattern = SeedPattern.DEFAULT
    seed: Optional[int] = None


class SimulationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick_rate_hz: float = Field(10.0, gt=0, le=120)
    autoplay: bool = False
    max_steps_per_request: int = Field(1000, ge=1)


class SecurityConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cors_origins: str = ""


class LifegridConfig(BaseModel):
    """Every key the settings store understands."""
    model_config = ConfigDict(extra="forbid")

    universe: UniverseConfig = Field(default_factory=UniverseConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)


def validate_config(data: Dict[str, Any]) -> LifegridConfig:
    """Validate a merged config dict, raising InvalidRequest on bad values."""
    try:
        return LifegridConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise InvalidRequest(f"Invalid configuration: {problems}")
