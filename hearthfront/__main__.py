"""Headless driver showcasing a short settlement match."""

from __future__ import annotations

import argparse
import logging

from .economy import HouseCostPolicy
from .models import Team
from .world import World


def run_demo(speed: float, frames: int, workers: int) -> World:
    world = World.new_match(workers_per_team=workers)
    world.clock.speed = speed
    world.on_house_completed(HouseCostPolicy())
    for team in Team:
        town_center = world.town_center(team)
        direction = 1 if team is Team.RED else -1
        site = world.add_site(town_center.position.x + 120 * direction, town_center.position.y, team)
        for unit in (u for u in world.units if u.team is team):
            world.command_move(unit, site)
    print(f"[Setup] {len(world.units)} workers heading to {len(world.sites)} sites at {speed:g}x.")
    for _ in range(frames):
        world.advance_frame()
    print(f"[Clock] {world.clock.frame} frames, {world.clock.tick} sub-steps, {world.clock.elapsed:.1f} ticks simulated.")
    for town_center in world.town_centers():
        houses = sum(1 for house in world.houses if house.team is town_center.team)
        print(f"- {town_center.team.value}: houses={houses}, resources={town_center.resources.as_dict()}")
    return world


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--speed", type=float, default=2.5, help="speed multiplier (default: 2.5)")
    parser.add_argument("--frames", type=int, default=600, help="frames to simulate (default: 600)")
    parser.add_argument("--workers", type=int, default=2, help="workers per team (default: 2)")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    args = parser.parse_args(argv)
    if args.speed < 0:
        parser.error("--speed cannot be negative")
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_demo(args.speed, args.frames, args.workers)


if __name__ == "__main__":
    main()
