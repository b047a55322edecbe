# Standard library imports
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

# Local application imports
from decisiondeck.core.monitoring.logging import get_logger

logger = get_logger(__name__)

ANALYTICS_ROOM = "analytics-room"


class Subscriber(Protocol):
    async def send_json(self, data: Any, mode: str = "text") -> None: ...


def vote_room(position: str) -> str:
    return f"vote-{position.strip()}"


class RoomManager:
    """
    Process-local registry of realtime subscribers grouped into named rooms.

    Delivery is best effort: a subscriber whose send fails is dropped from
    every room and must reconnect and re-fetch a snapshot.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[Subscriber]] = defaultdict(set)
        self._memberships: dict[Subscriber, set[str]] = {}

    @property
    def connection_count(self) -> int:
        return len(self._memberships)

    def register(self, subscriber: Subscriber) -> None:
        self._memberships.setdefault(subscriber, set())

    def unregister(self, subscriber: Subscriber) -> None:
        for room in self._memberships.pop(subscriber, set()):
            members = self._rooms.get(room)
            if members is None:
                continue
            members.discard(subscriber)
            if not members:
                del self._rooms[room]

    def join(self, subscriber: Subscriber, room: str) -> None:
        self._memberships.setdefault(subscriber, set()).add(room)
        self._rooms[room].add(subscriber)

    def leave(self, subscriber: Subscriber, room: str) -> None:
        self._memberships.get(subscriber, set()).discard(room)
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(subscriber)
        if not members:
            del self._rooms[room]

    def rooms_of(self, subscriber: Subscriber) -> set[str]:
        return set(self._memberships.get(subscriber, set()))

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    def clear(self) -> None:
        self._rooms.clear()
        self._memberships.clear()

    async def emit(self, room: str, event: str, data: Any) -> int:
        """Send ``{event, data}`` to every member of ``room``; returns the delivered count."""
        message = {"event": event, "data": data}
        delivered = 0
        # Copy: failed subscribers are removed while iterating
        for subscriber in list(self._rooms.get(room, ())):
            try:
                await subscriber.send_json(message)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Dropping realtime subscriber in {room}: {e}")
                self.unregister(subscriber)
                continue
            delivered += 1
        return delivered

    async def emit_vote_updated(self, position: str, candidate_id: UUID, vote_count: int) -> int:
        payload = {"position": position, "candidateId": str(candidate_id), "voteCount": vote_count}
        delivered = await self.emit(vote_room(position), "vote-updated", payload)
        await self.emit(
            ANALYTICS_ROOM,
            "analytics-updated",
            {**payload, "type": "vote", "timestamp": datetime.now(UTC).isoformat()},
        )
        return delivered
