"""Core data structures used by the Hearthfront simulation."""
from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from . import config
from .errors import UnknownResourceError


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D point with helpers for movement calculations."""

    x: float
    y: float

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vector2":
        return Vector2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def add(self, other: "Vector2") -> "Vector2":
        return self + other

    def sub(self, other: "Vector2") -> "Vector2":
        return self - other

    def scale(self, factor: float) -> "Vector2":
        return self * factor

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Vector2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def step_towards(self, destination: "Vector2", max_distance: float) -> "Vector2":
        """Return a point moved towards ``destination`` by up to ``max_distance``."""
        offset = destination - self
        distance = offset.length()
        if distance == 0 or max_distance <= 0:
            return self
        if distance <= max_distance:
            return destination
        return self + offset * (max_distance / distance)

    def copy(self) -> "Vector2":
        return Vector2(self.x, self.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def add(a: Vector2, b: Vector2) -> Vector2:
    return a + b


def sub(a: Vector2, b: Vector2) -> Vector2:
    return a - b


def scale(v: Vector2, k: float) -> Vector2:
    return v * k


def distance(a: Vector2, b: Vector2) -> float:
    return a.distance_to(b)


class Team(str, Enum):
    """Sides taking part in a match."""

    RED = "RED"
    BLUE = "BLUE"

    @property
    def opponent(self) -> "Team":
        return Team.BLUE if self is Team.RED else Team.RED


class UnitState(str, Enum):
    """Lifecycle states of a unit's behaviour state machine."""

    IDLE = "idle"
    MOVE = "move"
    BUILD = "build"


class EntityKind(str, Enum):
    """Tag carried by every entity so targets can be told apart."""

    UNIT = "unit"
    SITE = "site"
    TOWN_CENTER = "town_center"
    HOUSE = "house"


class Resource(str, Enum):
    """Closed set of resource kinds held by a town center."""

    FOOD = "FOOD"
    WOOD = "WOOD"
    STONE = "STONE"
    IRON = "IRON"

    @classmethod
    def parse(cls, value: Union["Resource", str]) -> "Resource":
        if isinstance(value, Resource):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise UnknownResourceError(f"unknown resource {value!r}") from None


@dataclass(slots=True)
class ResourceLedger:
    """Quantity of every resource kind held by a town center.

    The ledger has one slot per :class:`Resource` and nothing else, so the
    key set cannot grow or shrink whatever the economy does to it.
    """

    food: float = 0
    wood: float = 0
    stone: float = 0
    iron: float = 0

    @classmethod
    def from_mapping(cls, amounts: Mapping[str, float]) -> "ResourceLedger":
        ledger = cls()
        for key, amount in amounts.items():
            ledger[key] = amount
        return ledger

    def __getitem__(self, key: Union[Resource, str]) -> float:
        return getattr(self, Resource.parse(key).name.lower())

    def __setitem__(self, key: Union[Resource, str], amount: float) -> None:
        setattr(self, Resource.parse(key).name.lower(), amount)

    def __contains__(self, key: object) -> bool:
        try:
            Resource.parse(key)  # type: ignore[arg-type]
        except UnknownResourceError:
            return False
        return True

    def __iter__(self):
        return iter(resource.value for resource in Resource)

    def keys(self) -> List[str]:
        return [resource.value for resource in Resource]

    def as_dict(self) -> Dict[str, float]:
        return {resource.value: self[resource] for resource in Resource}


def new_entity_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


@dataclass(eq=False)
class Site:
    """A house under construction."""

    kind: ClassVar[EntityKind] = EntityKind.SITE

    position: Vector2
    team: Team
    progress: float = 0.0
    dead: bool = False
    radius: float = config.SITE_RADIUS
    id: str = field(default_factory=lambda: new_entity_id("site"))


@dataclass(eq=False)
class House:
    """A completed building. Only created when a site finishes."""

    kind: ClassVar[EntityKind] = EntityKind.HOUSE

    x: float
    y: float
    team: Team
    dead: bool = False
    id: str = field(default_factory=lambda: new_entity_id("house"))

    @property
    def position(self) -> Vector2:
        return Vector2(self.x, self.y)


@dataclass(eq=False)
class TownCenter:
    """Per-team base holding the resource ledger."""

    kind: ClassVar[EntityKind] = EntityKind.TOWN_CENTER

    team: Team
    position: Vector2
    dead: bool = False
    radius: float = config.TC_RADIUS
    resources: ResourceLedger = field(default_factory=ResourceLedger)
    id: str = field(default_factory=lambda: new_entity_id("tc"))


@dataclass
class GameSnapshot:
    """Serializable representation of the world state sent to renderers."""

    frame: int
    tick: int
    elapsed: float
    speed: float
    map_size: Tuple[int, int]
    units: List[Dict]
    sites: List[Dict]
    houses: List[Dict]
    town_centers: Dict[str, Dict]
    events: List[str]
    speed_buttons: Optional[List[Dict]] = None
