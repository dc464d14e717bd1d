"""Simulation clock and speed control.

A rendered frame advances the world by ``speed`` ticks of simulated time.
Rather than feeding a fractional ``dt`` to the behaviour code, the frame is
cut into a whole number of equally weighted sub-steps so per-tick logic stays
agnostic of the speed multiplier. Only the number of sub-steps and their
weight change with the selected speed.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple, Optional

from . import config

logger = logging.getLogger(__name__)

ACTIVE_CLASS = "active"


class StepSegments(NamedTuple):
    """Whole number of sub-steps for one frame plus the weight of each."""

    iterations: int
    sub_step: float

    @property
    def total(self) -> float:
        return self.iterations * self.sub_step


def calculate_step_segments(speed: float) -> StepSegments:
    """Split ``speed`` into ``ceil(speed)`` sub-steps of equal weight.

    ``iterations * sub_step`` equals ``speed``, so the same amount of simulated
    time passes per frame however it is subdivided. A speed of zero pauses the
    simulation. ``speed`` must not be negative.
    """
    if speed == 0:
        return StepSegments(0, 0.0)
    iterations = math.ceil(speed)
    return StepSegments(iterations, speed / iterations)


@dataclass
class SpeedButton:
    """Speed selector element as seen by the UI layer."""

    value: float
    class_name: str = ""

    @property
    def active(self) -> bool:
        return self.class_name == ACTIVE_CLASS

    def serialise(self) -> dict:
        return {"value": self.value, "className": self.class_name}


class SimulationClock:
    """Process-wide simulation time state.

    Holds the selected speed multiplier together with counters of frames
    driven, sub-steps executed and simulated time elapsed.
    """

    def __init__(self, speed: float = config.DEFAULT_SPEED) -> None:
        self.speed = speed
        self.frame = 0
        self.tick = 0
        self.elapsed = 0.0

    def segments(self) -> StepSegments:
        return calculate_step_segments(self.speed)

    def record_frame(self, segments: StepSegments) -> None:
        self.frame += 1
        self.tick += segments.iterations
        self.elapsed += segments.total

    @property
    def paused(self) -> bool:
        return self.speed == 0

    def __repr__(self) -> str:
        return f"SimulationClock(speed={self.speed!r}, frame={self.frame}, tick={self.tick})"


SIM_CLOCK = SimulationClock()

ButtonProvider = Callable[[], Optional[Iterable[SpeedButton]]]


def get_speed(clock: Optional[SimulationClock] = None) -> float:
    return (clock or SIM_CLOCK).speed


def apply_speed(
    new_speed: float,
    buttons: Iterable[SpeedButton],
    clock: Optional[SimulationClock] = None,
) -> None:
    """Select ``new_speed`` and mark the matching button as the active one."""
    clock = clock or SIM_CLOCK
    clock.speed = new_speed
    matched = 0
    for button in buttons:
        if button.value == new_speed:
            button.class_name = ACTIVE_CLASS
            matched += 1
        else:
            button.class_name = ""
    logger.debug("Speed set to %s (%d active button(s))", new_speed, matched)


def set_speed(
    new_speed: float,
    button_provider: Optional[ButtonProvider] = None,
    clock: Optional[SimulationClock] = None,
) -> None:
    """Select ``new_speed``, updating buttons only when a provider yields them."""
    buttons = button_provider() if button_provider is not None else None
    if buttons is None:
        clock = clock or SIM_CLOCK
        clock.speed = new_speed
        logger.debug("Speed set to %s without a speed selector", new_speed)
        return
    apply_speed(new_speed, buttons, clock)


__all__ = [
    "ACTIVE_CLASS",
    "SIM_CLOCK",
    "SimulationClock",
    "SpeedButton",
    "StepSegments",
    "apply_speed",
    "calculate_step_segments",
    "get_speed",
    "set_speed",
]
