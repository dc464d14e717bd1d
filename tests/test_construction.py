"""Tests for the construction pipeline."""
from __future__ import annotations

import pytest

from hearthfront import config
from hearthfront.config import SimulationConfig
from hearthfront.models import ResourceLedger, Site, Team, TownCenter, UnitState, Vector2
from hearthfront.units import Unit
from hearthfront.world import World

KNOWN_KEYS = {"FOOD", "WOOD", "STONE", "IRON"}


@pytest.fixture()
def world() -> World:
    return World(
        red_tc=TownCenter(team=Team.RED, position=Vector2(1000, 1000), resources=ResourceLedger()),
        blue_tc=TownCenter(team=Team.BLUE, position=Vector2(1000, 1000), resources=ResourceLedger()),
    )


def make_builder(world: World, site: Site) -> Unit:
    builder = Unit(position=site.position, team=site.team, state=UnitState.BUILD, target=site)
    world.units.append(builder)
    return builder


def test_build_completes_and_adds_house(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.RED)
    world.sites.append(site)
    builder = make_builder(world, site)

    last_progress = site.progress
    iterations = 0
    while not site.dead and iterations < config.HOUSE_TIME * 2 + 10:
        builder.build(world)
        assert site.progress >= last_progress
        assert site.progress <= world.config.house_time
        last_progress = site.progress
        iterations += 1

    assert site.dead
    assert site.progress == world.config.house_time
    assert len(world.houses) == 1
    house = world.houses[0]
    assert (house.x, house.y, house.team) == (0, 0, Team.RED)
    assert not house.dead
    assert builder.state is UnitState.IDLE
    assert builder.target is None
    assert set(world.red_tc.resources.as_dict()) == KNOWN_KEYS


def test_progress_per_call_scales_with_sub_step(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.RED)
    builder = make_builder(world, site)
    world.sub_step = 0.5
    builder.build(world)
    assert site.progress == pytest.approx(world.config.build_rate * 0.5)


def test_progress_is_capped_at_house_time() -> None:
    world = World(sim_config=SimulationConfig(house_time=10, build_rate=4))
    site = Site(position=Vector2(0, 0), team=Team.BLUE)
    builder = make_builder(world, site)
    progress = []
    while not site.dead:
        builder.build(world)
        progress.append(site.progress)
    assert progress == [4, 8, 10]
    assert len(world.houses) == 1


def test_build_after_completion_is_a_noop(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.RED, progress=world.config.house_time - 1)
    builder = make_builder(world, site)
    builder.build(world)
    assert site.dead
    builder.state = UnitState.BUILD
    builder.target = site
    builder.build(world)
    builder.build(world)
    assert len(world.houses) == 1
    assert site.progress == world.config.house_time
    assert builder.state is UnitState.IDLE
    assert builder.target is None


def test_second_builder_on_finished_site_goes_idle_without_house(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.RED, progress=world.config.house_time - 0.5)
    world.sites.append(site)
    first = make_builder(world, site)
    second = make_builder(world, site)
    world.step()
    assert site.dead
    assert len(world.houses) == 1
    assert first.state is second.state is UnitState.IDLE
    assert first.target is None and second.target is None
    assert site not in world.sites


def test_two_builders_share_the_work(world: World) -> None:
    site = world.add_site(0, 0, Team.RED)
    builders = [make_builder(world, site) for _ in range(2)]
    steps = 0
    while not site.dead:
        world.step()
        steps += 1
    assert steps == int(world.config.house_time / (2 * world.config.build_rate))
    assert len(world.houses) == 1
    finisher, lingering = builders[1], builders[0]
    assert finisher.state is UnitState.IDLE
    assert lingering.state is UnitState.BUILD
    world.step()
    assert len(world.houses) == 1
    assert all(builder.state is UnitState.IDLE for builder in builders)
    assert all(builder.target is None for builder in builders)


def test_foreign_site_is_not_built(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.BLUE)
    builder = Unit(position=Vector2(0, 0), team=Team.RED, state=UnitState.BUILD, target=site)
    builder.build(world)
    assert site.progress == 0
    assert not site.dead
    assert world.houses == []
    assert builder.state is UnitState.IDLE


def test_build_without_site_target_returns_to_idle(world: World) -> None:
    builder = Unit(position=Vector2(0, 0), team=Team.RED, state=UnitState.BUILD)
    builder.build(world)
    assert builder.state is UnitState.IDLE
    builder.state = UnitState.BUILD
    builder.target = world.red_tc
    builder.update(world)
    assert builder.state is UnitState.IDLE
    assert builder.target is None
    assert world.houses == []


def test_completion_fires_fx_and_listeners_once(world: World) -> None:
    effects = []
    completed = []
    world.fx_hook = lambda name, position: effects.append((name, position))
    world.on_house_completed(lambda w, site, house: completed.append((site, house)))
    site = Site(position=Vector2(3, 4), team=Team.BLUE, progress=world.config.house_time - 1)
    builder = make_builder(world, site)
    builder.build(world)
    builder.build(world)
    assert effects == [("house_complete", Vector2(3, 4))]
    assert len(completed) == 1
    assert completed[0][0] is site
    assert completed[0][1] is world.houses[0]


def test_construction_never_touches_ledgers(world: World) -> None:
    world.red_tc.resources = ResourceLedger(food=10, wood=20, stone=30, iron=40)
    site = Site(position=Vector2(0, 0), team=Team.RED)
    builder = make_builder(world, site)
    while not site.dead:
        builder.build(world)
    assert world.red_tc.resources.as_dict() == {"FOOD": 10, "WOOD": 20, "STONE": 30, "IRON": 40}
    assert set(world.blue_tc.resources.keys()) == KNOWN_KEYS


def test_fx_only_forwards_to_the_hook(world: World) -> None:
    world.fx("house_complete", Vector2(1, 1))
    assert list(world.events) == []
    effects = []
    world.fx_hook = lambda name, position: effects.append(name)
    world.fx("house_complete", Vector2(1, 1))
    assert effects == ["house_complete"]
    assert list(world.events) == []
