"""Deterministic simulation core for the Hearthfront settlement RTS.

The package exposes the time step scheduler that turns a speed multiplier
into fixed sub-steps and the world whose workers walk to building sites and
raise houses on them. Rendering and input live elsewhere; they read
:meth:`World.snapshot` and call :func:`set_speed` or the world commands.
"""

from .clock import (
    SIM_CLOCK,
    SimulationClock,
    SpeedButton,
    StepSegments,
    apply_speed,
    calculate_step_segments,
    get_speed,
    set_speed,
)
from .config import SimulationConfig
from .models import House, Resource, ResourceLedger, Site, Team, TownCenter, UnitState, Vector2
from .units import Unit
from .world import World

__all__ = [
    "House",
    "Resource",
    "ResourceLedger",
    "SIM_CLOCK",
    "SimulationClock",
    "SimulationConfig",
    "Site",
    "SpeedButton",
    "StepSegments",
    "Team",
    "TownCenter",
    "Unit",
    "UnitState",
    "Vector2",
    "World",
    "apply_speed",
    "calculate_step_segments",
    "get_speed",
    "set_speed",
]
