"""FastAPI application that exposes Hearthfront rooms over HTTP and WebSockets."""
from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from starlette.websockets import WebSocketState

from . import config
from .config import SimulationConfig
from .errors import HearthfrontError, InvalidCommandError, UnknownEntityError
from .rooms import GameRoom, RoomManager, RoomNotFound

MAX_FRAMES_PER_REQUEST = 10_000


def create_app(sim_config: Optional[SimulationConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title=config.GAME_NAME, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.room_manager = RoomManager(sim_config)

    async def get_manager() -> RoomManager:
        return app.state.room_manager

    def existing_room(room_id: str, manager: RoomManager) -> GameRoom:
        try:
            return manager.existing_room(room_id)
        except RoomNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/health")
    async def healthcheck(manager: RoomManager = Depends(get_manager)) -> Dict[str, Any]:
        return {"status": "ok", "rooms": len(manager.rooms)}

    @app.post("/rooms/{room_id}")
    async def open_room(room_id: str, manager: RoomManager = Depends(get_manager)) -> Dict[str, Any]:
        room = await manager.get_room(room_id)
        async with room.lock:
            return room.state()

    @app.get("/rooms/{room_id}/state")
    async def room_state(room_id: str, manager: RoomManager = Depends(get_manager)) -> Dict[str, Any]:
        room = existing_room(room_id, manager)
        async with room.lock:
            return room.state()

    @app.post("/rooms/{room_id}/speed")
    async def room_speed(
        room_id: str,
        speed: float = Body(..., embed=True, ge=0, allow_inf_nan=False),
        manager: RoomManager = Depends(get_manager),
    ) -> Dict[str, Any]:
        room = existing_room(room_id, manager)
        async with room.lock:
            try:
                room.change_speed(speed)
            except InvalidCommandError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            return {
                "speed": room.clock.speed,
                "buttons": [button.serialise() for button in room.speed_buttons],
            }

    @app.post("/rooms/{room_id}/commands")
    async def room_command(
        room_id: str,
        command: Dict[str, Any] = Body(...),
        manager: RoomManager = Depends(get_manager),
    ) -> Dict[str, Any]:
        room = existing_room(room_id, manager)
        async with room.lock:
            try:
                return room.apply_command(command)
            except UnknownEntityError as exc:
                raise HTTPException(status_code=404, detail=str(exc)) from exc
            except InvalidCommandError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.post("/rooms/{room_id}/frames")
    async def room_frames(
        room_id: str,
        count: int = Body(1, embed=True, ge=1, le=MAX_FRAMES_PER_REQUEST),
        manager: RoomManager = Depends(get_manager),
    ) -> Dict[str, Any]:
        room = existing_room(room_id, manager)
        async with room.lock:
            sub_steps = room.advance(count)
            return {"frames": count, "sub_steps": sub_steps, "state": room.state()}

    @app.websocket("/ws/{room_id}")
    async def websocket_endpoint(
        websocket: WebSocket, room_id: str, manager: RoomManager = Depends(get_manager)
    ) -> None:
        await websocket.accept()
        room = await manager.get_room(room_id)
        connection_id = uuid.uuid4().hex
        await room.join(connection_id, websocket)
        try:
            while True:
                message = await websocket.receive_json()
                try:
                    reply = await room.dispatch(connection_id, message)
                except HearthfrontError as exc:
                    reply = {"type": "error", "message": str(exc)}
                if reply is not None:
                    await websocket.send_json(reply)
        except WebSocketDisconnect:
            pass
        finally:
            await room.leave(connection_id)
            await manager.remove_room_if_empty(room_id)
            if websocket.application_state == WebSocketState.CONNECTED:
                await websocket.close()

    return app


app = create_app()


__all__ = ["app", "create_app"]
