"""Units and their behaviour state machine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Optional, Union

from . import config
from .construction import advance_construction
from .models import EntityKind, Site, Team, TownCenter, UnitState, Vector2, new_entity_id

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from .world import World

logger = logging.getLogger(__name__)

Target = Union[Site, TownCenter, "Unit"]


@dataclass(eq=False)
class Unit:
    """A worker that walks to a target and raises houses on friendly sites."""

    kind: ClassVar[EntityKind] = EntityKind.UNIT

    position: Vector2
    team: Team
    state: UnitState = UnitState.IDLE
    target: Optional[Target] = None
    radius: float = config.UNIT_RADIUS
    speed: float = config.UNIT_SPEED
    id: str = field(default_factory=lambda: new_entity_id("unit"))

    def reset_orders(self) -> None:
        self.state = UnitState.IDLE
        self.target = None

    def assign(self, target: Target) -> None:
        """Send the unit towards ``target``. Issued by player commands."""
        self.target = target
        self.state = UnitState.MOVE

    def has_arrived(self, target: Target) -> bool:
        return self.position.distance_to(target.position) <= self.radius + target.radius

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------
    def update(self, world: "World") -> None:
        """Run one sub-step of the behaviour state machine."""
        if self.state is UnitState.MOVE:
            self._update_move(world)
        elif self.state is UnitState.BUILD:
            self.build(world)

    def build(self, world: "World") -> None:
        advance_construction(self, world)

    def _update_move(self, world: "World") -> None:
        target = self.target
        if target is None:
            return
        if self.has_arrived(target):
            if target.kind is EntityKind.SITE and target.team is self.team:
                self.state = UnitState.BUILD
                logger.debug("Unit %s started building site %s", self.id, target.id)
            return
        self.position = self.position.step_towards(target.position, self.speed * world.sub_step)


__all__ = ["Target", "Unit"]
