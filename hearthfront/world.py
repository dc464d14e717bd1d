"""Shared world state and the frame driver that advances it."""
from __future__ import annotations

import itertools
import logging
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional

from . import config
from .clock import SimulationClock, SpeedButton, StepSegments
from .config import SimulationConfig
from .errors import InvalidCommandError, UnknownEntityError
from .models import GameSnapshot, House, ResourceLedger, Site, Team, TownCenter, Vector2
from .units import Target, Unit

logger = logging.getLogger(__name__)

HouseListener = Callable[["World", Site, House], None]
FxHook = Callable[[str, Vector2], None]


class World:
    """Entities of a single match plus the clock that drives them.

    Units are advanced in insertion order, one sub-step at a time. During a
    sub-step :attr:`sub_step` holds its weight; outside the frame driver it
    is ``1.0`` so a direct ``unit.update(world)`` behaves as one full tick.
    """

    def __init__(
        self,
        red_tc: Optional[TownCenter] = None,
        blue_tc: Optional[TownCenter] = None,
        clock: Optional[SimulationClock] = None,
        sim_config: Optional[SimulationConfig] = None,
    ) -> None:
        self.config = sim_config or SimulationConfig()
        self.config.validate()
        self.clock = clock or SimulationClock()
        self.units: List[Unit] = []
        self.sites: List[Site] = []
        self.houses: List[House] = []
        self.red_tc = red_tc
        self.blue_tc = blue_tc
        self.sub_step: float = 1.0
        self.events: Deque[str] = deque(maxlen=config.EVENT_LOG_SIZE)
        self.fx_hook: Optional[FxHook] = None
        self._house_listeners: List[HouseListener] = []

    @classmethod
    def new_match(
        cls,
        workers_per_team: int = 2,
        clock: Optional[SimulationClock] = None,
        sim_config: Optional[SimulationConfig] = None,
    ) -> "World":
        """Create a world with both town centers and their starting workers."""
        world = cls(clock=clock, sim_config=sim_config)
        for team in Team:
            x, y = config.TOWN_CENTER_POSITIONS[team.value]
            town_center = TownCenter(
                team=team,
                position=Vector2(x, y),
                radius=world.config.tc_radius,
                resources=ResourceLedger.from_mapping(config.STARTING_RESOURCES),
            )
            world.set_town_center(town_center)
            offset = town_center.radius + world.config.unit_radius * 2
            for index in range(workers_per_team):
                world.add_unit(Vector2(x + offset, y + (index - workers_per_team / 2) * offset), team)
        world.add_event("A new settlement season begins.")
        return world

    # ------------------------------------------------------------------
    # Entity management
    # ------------------------------------------------------------------
    def set_town_center(self, town_center: TownCenter) -> None:
        if town_center.team is Team.RED:
            self.red_tc = town_center
        else:
            self.blue_tc = town_center

    def town_center(self, team: Team) -> Optional[TownCenter]:
        return self.red_tc if team is Team.RED else self.blue_tc

    def town_centers(self) -> List[TownCenter]:
        return [tc for tc in (self.red_tc, self.blue_tc) if tc is not None]

    def add_unit(self, position: Vector2, team: Team) -> Unit:
        unit = Unit(
            position=position,
            team=team,
            radius=self.config.unit_radius,
            speed=self.config.unit_speed,
        )
        self.units.append(unit)
        return unit

    def add_site(self, x: float, y: float, team: Team) -> Site:
        site = Site(position=Vector2(x, y), team=team, radius=self.config.site_radius)
        self.sites.append(site)
        self.add_event(f"{team.value} laid out a building site.")
        return site

    def add_house(self, x: float, y: float, team: Team) -> House:
        """Materialise a completed house. Called by the construction pipeline."""
        house = House(x=x, y=y, team=team)
        self.houses.append(house)
        self.add_event(f"{team.value} completed a house.")
        return house

    def find_entity(self, entity_id: str) -> Target:
        candidates: Iterable[Target] = itertools.chain(self.units, self.sites, self.town_centers())
        for entity in candidates:
            if entity.id == entity_id:
                return entity
        raise UnknownEntityError(f"no entity with id {entity_id!r}")

    def find_unit(self, unit_id: str) -> Unit:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        raise UnknownEntityError(f"no unit with id {unit_id!r}")

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def fx(self, name: str, position: Vector2) -> None:
        """Cosmetic effect request. Purely observational."""
        if self.fx_hook is not None:
            self.fx_hook(name, position)

    def on_house_completed(self, listener: HouseListener) -> HouseListener:
        self._house_listeners.append(listener)
        return listener

    def notify_house_completed(self, site: Site, house: House) -> None:
        for listener in list(self._house_listeners):
            listener(self, site, house)

    def add_event(self, message: str) -> None:
        self.events.append(message)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def command_move(self, unit: Unit, target: Target) -> None:
        """Player order: walk ``unit`` to ``target``."""
        if target is unit:
            raise InvalidCommandError("a unit cannot target itself")
        unit.assign(target)
        logger.debug("Unit %s ordered towards %s %s", unit.id, target.kind.value, target.id)

    # ------------------------------------------------------------------
    # Update loop
    # ------------------------------------------------------------------
    def step(self, sub_step: Optional[float] = None) -> None:
        """Advance every unit by a single sub-step."""
        if sub_step is not None:
            self.sub_step = sub_step
        for unit in list(self.units):
            unit.update(self)
        self.sites = [site for site in self.sites if not site.dead]

    def advance_frame(self) -> StepSegments:
        """Run all sub-steps the current speed calls for in one frame."""
        segments = self.clock.segments()
        try:
            for _ in range(segments.iterations):
                self.step(segments.sub_step)
        finally:
            self.sub_step = 1.0
        self.clock.record_frame(segments)
        return segments

    # ------------------------------------------------------------------
    # Snapshotting
    # ------------------------------------------------------------------
    def snapshot(self, speed_buttons: Optional[Iterable[SpeedButton]] = None) -> GameSnapshot:
        units_data = [
            {
                "id": unit.id,
                "team": unit.team.value,
                "position": unit.position.to_tuple(),
                "state": unit.state.value,
                "target": unit.target.id if unit.target is not None else None,
            }
            for unit in self.units
        ]
        sites_data = [
            {
                "id": site.id,
                "team": site.team.value,
                "position": site.position.to_tuple(),
                "progress": site.progress,
                "house_time": self.config.house_time,
            }
            for site in self.sites
        ]
        houses_data = [
            {"id": house.id, "team": house.team.value, "x": house.x, "y": house.y}
            for house in self.houses
            if not house.dead
        ]
        town_centers: Dict[str, Dict] = {
            tc.team.value: {
                "id": tc.id,
                "position": tc.position.to_tuple(),
                "dead": tc.dead,
                "resources": tc.resources.as_dict(),
            }
            for tc in self.town_centers()
        }
        snapshot = GameSnapshot(
            frame=self.clock.frame,
            tick=self.clock.tick,
            elapsed=self.clock.elapsed,
            speed=self.clock.speed,
            map_size=(config.MAP_WIDTH, config.MAP_HEIGHT),
            units=units_data,
            sites=sites_data,
            houses=houses_data,
            town_centers=town_centers,
            events=list(self.events),
            speed_buttons=[button.serialise() for button in speed_buttons] if speed_buttons else None,
        )
        self.events.clear()
        return snapshot


__all__ = ["World"]
