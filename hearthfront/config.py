"""Configuration constants for the Hearthfront simulation.

The values control pacing of a match: how fast builders walk, how long a
house takes to raise and how the speed selector is laid out. Everything the
world reads at runtime is also bundled into :class:`SimulationConfig` so a
room can run with its own tuning.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

GAME_NAME = "Hearthfront"

FRAME_RATE = 30  # Rendered frames per second driven by the room loop.
DEFAULT_SPEED = 1
SPEED_CHOICES: Tuple[float, ...] = (0, 1, 2, 5)

MAP_WIDTH = 1200
MAP_HEIGHT = 800

# Construction tuning. Progress is measured in full-speed ticks.
HOUSE_TIME = 240.0
BUILD_RATE = 1.0  # Progress added per tick at a sub-step weight of 1.

UNIT_SPEED = 1.5  # Distance per tick.
UNIT_RADIUS = 6.0
SITE_RADIUS = 16.0
TC_RADIUS = 25.0

STARTING_RESOURCES: Dict[str, int] = {
    "FOOD": 200,
    "WOOD": 200,
    "STONE": 100,
    "IRON": 0,
}

HOUSE_COST: Dict[str, int] = {"WOOD": 50}

TOWN_CENTER_POSITIONS = {
    "RED": (150.0, MAP_HEIGHT / 2),
    "BLUE": (MAP_WIDTH - 150.0, MAP_HEIGHT / 2),
}

EVENT_LOG_SIZE = 50


@dataclass(frozen=True)
class SimulationConfig:
    """Tunables read by a :class:`~hearthfront.world.World`.

    Attributes
    ----------
    house_time:
        Progress a site needs before it turns into a house.
    build_rate:
        Progress a builder adds per tick at full sub-step weight.
    unit_speed:
        Distance a unit covers per tick at full sub-step weight.
    unit_radius, site_radius, tc_radius:
        Contact radii used by arrival checks.
    speed_choices:
        Values offered by the speed selector, in display order.
    frame_rate:
        Frames per second the room loop drives.
    """

    house_time: float = HOUSE_TIME
    build_rate: float = BUILD_RATE
    unit_speed: float = UNIT_SPEED
    unit_radius: float = UNIT_RADIUS
    site_radius: float = SITE_RADIUS
    tc_radius: float = TC_RADIUS
    speed_choices: Tuple[float, ...] = SPEED_CHOICES
    frame_rate: int = FRAME_RATE

    def validate(self) -> None:
        if self.house_time <= 0:
            raise ValueError("house_time must be positive")
        if self.build_rate <= 0:
            raise ValueError("build_rate must be positive")
        if self.unit_speed < 0:
            raise ValueError("unit_speed cannot be negative")
        if min(self.unit_radius, self.site_radius, self.tc_radius) < 0:
            raise ValueError("Radii cannot be negative")
        if not self.speed_choices or any(choice < 0 for choice in self.speed_choices):
            raise ValueError("speed_choices must be non-empty and non-negative")
        if len(set(self.speed_choices)) != len(self.speed_choices):
            raise ValueError("speed_choices must be unique")
        if self.frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
