"""Resource bookkeeping layered on top of the simulation core.

Construction never touches a ledger by itself. Costs are an economic policy
registered on the world, see :class:`HouseCostPolicy`.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Union

from . import config
from .errors import InsufficientResourcesError
from .models import House, Resource, ResourceLedger, Site

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from .world import World

logger = logging.getLogger(__name__)

Cost = Mapping[Union[Resource, str], float]


def normalise_cost(cost: Cost) -> Dict[Resource, float]:
    """Resolve resource names and reject negative amounts."""
    normalised: Dict[Resource, float] = {}
    for key, amount in cost.items():
        if amount < 0:
            raise ValueError(f"negative amount for {key}: {amount}")
        resource = Resource.parse(key)
        normalised[resource] = normalised.get(resource, 0) + amount
    return normalised


def deposit(ledger: ResourceLedger, resource: Union[Resource, str], amount: float) -> float:
    """Add ``amount`` of ``resource`` and return the new balance."""
    if amount < 0:
        raise ValueError("deposit amount cannot be negative")
    ledger[resource] = ledger[resource] + amount
    return ledger[resource]


def can_afford(ledger: ResourceLedger, cost: Cost) -> bool:
    return all(ledger[resource] >= amount for resource, amount in normalise_cost(cost).items())


def spend(ledger: ResourceLedger, cost: Cost) -> None:
    """Deduct ``cost`` from ``ledger`` atomically.

    Raises :class:`InsufficientResourcesError` without touching the ledger
    when any resource falls short.
    """
    normalised = normalise_cost(cost)
    missing = {
        resource.value: amount - ledger[resource]
        for resource, amount in normalised.items()
        if ledger[resource] < amount
    }
    if missing:
        raise InsufficientResourcesError(f"missing resources: {missing}")
    for resource, amount in normalised.items():
        ledger[resource] = ledger[resource] - amount


class HouseCostPolicy:
    """Charges the owning town center when a house is completed.

    Register it with :meth:`World.on_house_completed`. A team that cannot pay
    keeps its house; the shortfall is only reported as a world event.
    """

    def __init__(self, cost: Cost = config.HOUSE_COST) -> None:
        self.cost = normalise_cost(cost)

    def __call__(self, world: "World", site: Site, house: House) -> None:
        town_center = world.town_center(site.team)
        if town_center is None or town_center.dead:
            return
        try:
            spend(town_center.resources, self.cost)
        except InsufficientResourcesError as exc:
            logger.warning("%s could not pay for house %s: %s", site.team.value, house.id, exc)
            world.add_event(f"{site.team.value} could not pay for a house")
            return
        world.add_event(f"{site.team.value} paid for a house")


__all__ = ["HouseCostPolicy", "can_afford", "deposit", "normalise_cost", "spend"]
