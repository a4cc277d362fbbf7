"""Chat read side — room history and the admin room list."""

from datetime import datetime

from shared.clock import as_naive_utc
from shared.queries import fetch_all
from support.message.message import ChatMessage
from support.room.room import ChatRoom, RoomStatus

_EPOCH = datetime(1970, 1, 1)


def recent_messages(room_id, limit: int = 50) -> list[dict]:
    """The last ``limit`` messages of a room, oldest first."""
    messages = sorted(
        fetch_all(ChatMessage, room_id=str(room_id)),
        key=lambda m: as_naive_utc(m.sent_at) or _EPOCH,
    )
    return [message.to_dict() for message in messages[-limit:]] if limit else []


def recent_senders(room_id, limit: int = 5) -> list[str]:
    """Senders of the last ``limit`` messages, newest first."""
    messages = sorted(
        fetch_all(ChatMessage, room_id=str(room_id)),
        key=lambda m: as_naive_utc(m.sent_at) or _EPOCH,
        reverse=True,
    )
    return [message.sender for message in messages[:limit]]


def active_rooms() -> list[dict]:
    rooms = sorted(
        fetch_all(ChatRoom, status=RoomStatus.ACTIVE.value),
        key=lambda r: as_naive_utc(r.last_message_at or r.created_at) or _EPOCH,
        reverse=True,
    )
    return [room.to_dict() for room in rooms]
