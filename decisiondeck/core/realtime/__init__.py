# Local application imports
from decisiondeck.core.realtime.room_manager import ANALYTICS_ROOM, RoomManager, Subscriber, vote_room

__all__ = ["ANALYTICS_ROOM", "RoomManager", "Subscriber", "vote_room"]
