"""Construction pipeline run by builders standing on a site."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import EntityKind, Site

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from .units import Unit
    from .world import World

logger = logging.getLogger(__name__)


def advance_construction(unit: "Unit", world: "World") -> None:
    """Add one sub-step of work to the site ``unit`` is building.

    When the site reaches the house threshold it is latched dead, exactly one
    house is added to the world and the builder returns to idle. A builder
    whose site is gone (finished by someone else, or never a site of its own
    team) is sent back to idle without touching the world.
    """
    site = unit.target
    if site is None or site.kind is not EntityKind.SITE:
        unit.reset_orders()
        return
    if site.dead:
        unit.reset_orders()
        return
    if site.team is not unit.team:
        logger.warning("Unit %s refused to build foreign site %s", unit.id, site.id)
        unit.reset_orders()
        return

    house_time = world.config.house_time
    site.progress = min(house_time, site.progress + world.config.build_rate * world.sub_step)
    if site.progress >= house_time:
        _complete_site(unit, site, world)


def _complete_site(unit: "Unit", site: Site, world: "World") -> None:
    site.dead = True
    house = world.add_house(site.position.x, site.position.y, site.team)
    unit.reset_orders()
    logger.info("%s house %s completed at (%.1f, %.1f)", site.team.value, house.id, house.x, house.y)
    world.fx("house_complete", site.position)
    world.notify_house_completed(site, house)


__all__ = ["advance_construction"]
