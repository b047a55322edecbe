# Standard library imports
import json
from typing import Any

# Third-party imports
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from decisiondeck.api.internal.utils.permissions import resolve_user_from_token, websocket_token
from decisiondeck.core.db import run_with_new_session
from decisiondeck.core.monitoring.logging import get_contextual_logger
from decisiondeck.core.realtime import ANALYTICS_ROOM, RoomManager, vote_room
from decisiondeck.dependancies.common import get_room_manager, get_session_factory
from decisiondeck.services.analytics.analytics_services import realtime_snapshot

router = APIRouter(tags=["Realtime"])

MAX_POSITION_LENGTH = 100


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


def _position_from(data: Any) -> str | None:
    if isinstance(data, dict):
        data = data.get("position")
    if not isinstance(data, str):
        return None
    data = data.strip()
    if not data or len(data) > MAX_POSITION_LENGTH:
        return None
    return data


async def handle_client_event(
    websocket: WebSocket,
    rooms: RoomManager,
    message: Any,
    sessions: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """Apply one ``{"event": ..., "data": ...}`` frame from a client."""
    if not isinstance(message, dict) or not isinstance(message.get("event"), str):
        await _send_error(websocket, "Frames must be objects with an 'event' name")
        return

    event = message["event"]
    data = message.get("data")

    if event in ("join-vote-room", "leave-vote-room"):
        position = _position_from(data)
        if position is None:
            await _send_error(websocket, f"{event} needs a position")
            return
        room = vote_room(position)
        if event == "join-vote-room":
            rooms.join(websocket, room)
            await websocket.send_json({"event": "room-joined", "data": {"room": room}})
        else:
            rooms.leave(websocket, room)
            await websocket.send_json({"event": "room-left", "data": {"room": room}})
    elif event == "join-analytics-room":
        rooms.join(websocket, ANALYTICS_ROOM)
        await websocket.send_json({"event": "room-joined", "data": {"room": ANALYTICS_ROOM}})
    elif event == "leave-analytics-room":
        rooms.leave(websocket, ANALYTICS_ROOM)
        await websocket.send_json({"event": "room-left", "data": {"room": ANALYTICS_ROOM}})
    elif event == "request-analytics":
        snapshot = await run_with_new_session(realtime_snapshot, session_factory=sessions)
        await websocket.send_json({"event": "analytics-updated", "data": snapshot.model_dump(mode="json", by_alias=True)})
    elif event == "ping":
        await websocket.send_json({"event": "pong", "data": None})
    else:
        await _send_error(websocket, f"Unknown event {event!r}")


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    rooms: RoomManager = Depends(get_room_manager),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    Realtime channel. Authenticate with ``?token=`` or ``Authorization: Bearer``,
    then join rooms to receive ``vote-updated`` and ``analytics-updated`` events.
    """
    token = websocket_token(websocket)
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication required")
        return
    try:
        user = await run_with_new_session(resolve_user_from_token, token, session_factory=sessions)
    except HTTPException as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e.detail))
        return

    logger = get_contextual_logger(__name__, user_id=user.id)
    await websocket.accept()
    rooms.register(websocket)
    logger.debug("Realtime client connected")
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(websocket, "Frames must be JSON")
                continue
            await handle_client_event(websocket, rooms, message, sessions)
    except WebSocketDisconnect:
        logger.debug("Realtime client disconnected")
    finally:
        rooms.unregister(websocket)
