"""Tests for the unit behaviour state machine."""
from __future__ import annotations

import pytest

from hearthfront.models import Site, Team, TownCenter, UnitState, Vector2
from hearthfront.units import Unit
from hearthfront.world import World


@pytest.fixture()
def world() -> World:
    return World(
        red_tc=TownCenter(team=Team.RED, position=Vector2(1000, 1000)),
        blue_tc=TownCenter(team=Team.BLUE, position=Vector2(1000, 1000)),
    )


def test_unit_switches_to_build_when_reaching_site(world: World) -> None:
    builder = Unit(position=Vector2(0, 0), team=Team.RED)
    site = Site(position=Vector2(0, 0), team=Team.RED)
    world.units.append(builder)
    world.sites.append(site)
    builder.state = UnitState.MOVE
    builder.target = site
    builder.update(world)
    assert builder.state is UnitState.BUILD
    assert builder.target is site
    assert site.progress == 0


def test_arrival_is_measured_against_both_radii(world: World) -> None:
    site = Site(position=Vector2(0, 0), team=Team.RED, radius=10)
    inside = Unit(position=Vector2(15, 0), team=Team.RED, radius=5)
    outside = Unit(position=Vector2(15.5, 0), team=Team.RED, radius=5, speed=0)
    for unit in (inside, outside):
        unit.assign(site)
        unit.update(world)
    assert inside.state is UnitState.BUILD
    assert outside.state is UnitState.MOVE


def test_unit_walks_towards_distant_site_before_building(world: World) -> None:
    site = world.add_site(100, 0, Team.RED)
    builder = world.add_unit(Vector2(0, 0), Team.RED)
    world.command_move(builder, site)

    builder.update(world)
    assert builder.state is UnitState.MOVE
    assert builder.position.x == pytest.approx(world.config.unit_speed)
    assert builder.position.y == 0

    updates = 1
    while builder.state is UnitState.MOVE:
        before = builder.position.distance_to(site.position)
        builder.update(world)
        updates += 1
        if builder.state is UnitState.MOVE:
            assert builder.position.distance_to(site.position) < before
        assert updates < 1000
    assert builder.state is UnitState.BUILD
    assert builder.has_arrived(site)


def test_transition_happens_on_the_update_after_arrival(world: World) -> None:
    site = Site(position=Vector2(10, 0), team=Team.RED, radius=1)
    builder = Unit(position=Vector2(0, 0), team=Team.RED, radius=1, speed=20)
    builder.assign(site)
    builder.update(world)
    assert builder.position == site.position
    assert builder.state is UnitState.MOVE
    builder.update(world)
    assert builder.state is UnitState.BUILD


def test_movement_scales_with_sub_step(world: World) -> None:
    site = Site(position=Vector2(100, 0), team=Team.RED)
    builder = Unit(position=Vector2(0, 0), team=Team.RED, speed=2)
    builder.assign(site)
    world.sub_step = 0.5
    builder.update(world)
    assert builder.position == Vector2(1.0, 0)


def test_foreign_site_never_triggers_build(world: World) -> None:
    builder = Unit(position=Vector2(0, 0), team=Team.RED)
    site = Site(position=Vector2(0, 0), team=Team.BLUE)
    builder.assign(site)
    for _ in range(5):
        builder.update(world)
    assert builder.state is UnitState.MOVE
    assert builder.position == Vector2(0, 0)
    assert site.progress == 0
    assert world.houses == []


def test_arriving_at_town_center_holds_position(world: World) -> None:
    builder = Unit(position=Vector2(1000, 990), team=Team.RED)
    builder.assign(world.red_tc)
    builder.update(world)
    assert builder.state is UnitState.MOVE
    assert builder.position == Vector2(1000, 990)


def test_idle_unit_does_nothing(world: World) -> None:
    builder = Unit(position=Vector2(5, 5), team=Team.RED)
    builder.update(world)
    assert builder.state is UnitState.IDLE
    assert builder.target is None
    assert builder.position == Vector2(5, 5)


def test_move_without_target_holds_position(world: World) -> None:
    builder = Unit(position=Vector2(5, 5), team=Team.RED, state=UnitState.MOVE)
    builder.update(world)
    assert builder.state is UnitState.MOVE
    assert builder.position == Vector2(5, 5)


def test_unit_can_follow_another_unit(world: World) -> None:
    leader = world.add_unit(Vector2(50, 0), Team.BLUE)
    follower = world.add_unit(Vector2(0, 0), Team.RED)
    world.command_move(follower, leader)
    follower.update(world)
    assert follower.state is UnitState.MOVE
    assert follower.position.x > 0


def test_states_stay_within_the_three_state_machine(world: World) -> None:
    site = world.add_site(40, 0, Team.RED)
    builders = [world.add_unit(Vector2(0, float(i)), Team.RED) for i in range(3)]
    for builder in builders:
        world.command_move(builder, site)
    seen = set()
    for _ in range(400):
        world.step()
        seen.update(builder.state for builder in builders)
    assert seen <= set(UnitState)
    assert all(builder.state is UnitState.IDLE for builder in builders)
