"""Domain events for the ChatMessage aggregate."""

from protean.fields import DateTime, Identifier, String

from support.domain import support


@support.event(part_of="ChatMessage")
class MessageSent:
    __version__ = 1

    message_id = Identifier(required=True)
    room_id = Identifier(required=True)
    sender = String(required=True)
    sent_at = DateTime(required=True)
