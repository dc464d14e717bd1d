"""Room and connection management for the Hearthfront server."""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from .clock import SimulationClock, SpeedButton, set_speed
from .config import SimulationConfig
from .errors import HearthfrontError, InvalidCommandError
from .models import Team
from .world import World

logger = logging.getLogger(__name__)


class RoomError(HearthfrontError):
    """Base class for room related failures."""


class RoomNotFound(RoomError):
    """Raised when a client asks for a room that does not exist."""


class GameRoom:
    """Holds one world, its clock, the speed selector and live connections."""

    def __init__(self, room_id: str, sim_config: Optional[SimulationConfig] = None):
        self.room_id = room_id
        self.sim_config = sim_config or SimulationConfig()
        self.clock = SimulationClock()
        self.world = World.new_match(clock=self.clock, sim_config=self.sim_config)
        self.speed_buttons: List[SpeedButton] = [
            SpeedButton(value=value) for value in self.sim_config.speed_choices
        ]
        self.connections: Dict[str, WebSocket] = {}
        self.loop_task: Optional[asyncio.Task] = None
        self.lock = asyncio.Lock()
        self.frame_interval = 1.0 / self.sim_config.frame_rate
        set_speed(self.clock.speed, lambda: self.speed_buttons, clock=self.clock)

    # ------------------------------------------------------------------
    # Simulation access
    # ------------------------------------------------------------------
    def state(self) -> Dict[str, Any]:
        return asdict(self.world.snapshot(self.speed_buttons))

    def change_speed(self, speed: float) -> None:
        if not math.isfinite(speed):
            raise InvalidCommandError("speed must be a finite number")
        if speed < 0:
            raise InvalidCommandError("speed cannot be negative")
        set_speed(speed, lambda: self.speed_buttons, clock=self.clock)
        self.world.add_event(f"Speed set to {speed:g}x")

    def advance(self, frames: int = 1) -> int:
        """Drive ``frames`` frames and return the number of sub-steps run."""
        return sum(self.world.advance_frame().iterations for _ in range(frames))

    def apply_command(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a player command and return an acknowledgement payload."""
        if not isinstance(command, dict):
            raise InvalidCommandError("command must be a JSON object")
        action = command.get("action")
        if action == "move":
            unit = self.world.find_unit(str(command.get("unit_id")))
            target = self.world.find_entity(str(command.get("target_id")))
            self.world.command_move(unit, target)
            return {"type": "order", "unit_id": unit.id, "target_id": target.id}
        if action == "place_site":
            team = self._parse_team(command.get("team"))
            try:
                x = float(command["x"])
                y = float(command["y"])
            except (KeyError, TypeError, ValueError):
                raise InvalidCommandError("place_site needs numeric x and y") from None
            site = self.world.add_site(x, y, team)
            return {"type": "site", "site_id": site.id}
        raise InvalidCommandError(f"unknown command {action!r}")

    @staticmethod
    def _parse_team(value: Any) -> Team:
        try:
            return Team(str(value).upper())
        except ValueError:
            raise InvalidCommandError(f"unknown team {value!r}") from None

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------
    async def join(self, connection_id: str, websocket: WebSocket) -> None:
        async with self.lock:
            self.connections[connection_id] = websocket
            if not self.loop_task or self.loop_task.done():
                self.loop_task = asyncio.create_task(self._run_loop())
        await websocket.send_json(
            {"type": "welcome", "room_id": self.room_id, "connection_id": connection_id}
        )

    async def leave(self, connection_id: str) -> None:
        async with self.lock:
            self.connections.pop(connection_id, None)

    async def dispatch(self, connection_id: str, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Handle a websocket message, returning a direct reply if any."""
        if connection_id not in self.connections:
            raise RoomError("connection not registered")
        if not isinstance(message, dict):
            raise InvalidCommandError("message must be a JSON object")
        msg_type = message.get("type")
        if msg_type == "ping":
            return {"type": "pong"}
        async with self.lock:
            if msg_type == "set_speed":
                try:
                    speed = float(message.get("speed"))
                except (TypeError, ValueError):
                    raise InvalidCommandError("set_speed needs a numeric speed") from None
                self.change_speed(speed)
                return None
            if msg_type == "command":
                return self.apply_command(message.get("command") or {})
        raise InvalidCommandError(f"unknown message type {msg_type!r}")

    async def _run_loop(self) -> None:
        while self.connections:
            await asyncio.sleep(self.frame_interval)
            async with self.lock:
                self.world.advance_frame()
                snapshot = self.state()
            await self.broadcast({"type": "state", "state": snapshot})

    async def broadcast(self, message: Dict[str, Any]) -> None:
        """Send a JSON message to every connected client."""
        stale: List[str] = []
        for connection_id, ws in list(self.connections.items()):
            try:
                await ws.send_json(message)
            except Exception:
                logger.warning("Dropping stale connection %s in room %s", connection_id, self.room_id)
                stale.append(connection_id)
        for connection_id in stale:
            self.connections.pop(connection_id, None)


class RoomManager:
    """Registry that lazily instantiates rooms on demand."""

    def __init__(self, sim_config: Optional[SimulationConfig] = None):
        self.sim_config = sim_config
        self.rooms: Dict[str, GameRoom] = {}
        self.lock = asyncio.Lock()

    async def get_room(self, room_id: str) -> GameRoom:
        async with self.lock:
            room = self.rooms.get(room_id)
            if not room:
                room = GameRoom(room_id, self.sim_config)
                self.rooms[room_id] = room
                logger.info("Created room %s", room_id)
            return room

    def existing_room(self, room_id: str) -> GameRoom:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound(f"room {room_id!r} does not exist")
        return room

    async def remove_room_if_empty(self, room_id: str) -> None:
        async with self.lock:
            room = self.rooms.get(room_id)
            if room and not room.connections:
                self.rooms.pop(room_id, None)
                logger.info("Removed empty room %s", room_id)


__all__ = ["GameRoom", "RoomError", "RoomManager", "RoomNotFound"]
