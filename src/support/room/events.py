"""Domain events for the ChatRoom aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from support.domain import support


@support.event(part_of="ChatRoom")
class ChatRoomOpened:
    """A participant started chatting and got a fresh room."""

    __version__ = 1

    room_id = Identifier(required=True)
    participant_id = String(required=True)
    participant_type = String(required=True)
    user_name = String(required=True)
    opened_at = DateTime(required=True)


@support.event(part_of="ChatRoom")
class ChatRoomRead:
    __version__ = 1

    room_id = Identifier(required=True)
    messages_marked = Integer(required=True)


@support.event(part_of="ChatRoom")
class ChatRoomClosed:
    __version__ = 1

    room_id = Identifier(required=True)
    participant_id = String(required=True)
    reason = String()
    closed_at = DateTime(required=True)
