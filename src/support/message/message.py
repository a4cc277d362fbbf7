"""ChatMessage aggregate — a single line of a chat, from the user, an admin or the bot."""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from support.domain import support
from support.message.events import MessageSent

MAX_MESSAGE_LENGTH = 2000


class Sender(Enum):
    USER = "user"
    ADMIN = "admin"
    BOT = "bot"


@support.aggregate
class ChatMessage:
    room_id = Identifier(required=True)
    sender = String(required=True, choices=Sender)
    sender_name = String(max_length=150)
    content = Text(required=True)
    sent_at = DateTime()
    read = Boolean(default=False)

    @classmethod
    def compose(cls, room_id, sender, sender_name, content):
        content = (content or "").strip()
        if not content:
            raise ValidationError({"content": ["Message cannot be empty"]})
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError({"content": [f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters"]})

        now = datetime.now(UTC)
        message = cls(
            room_id=room_id,
            sender=sender,
            sender_name=sender_name,
            content=content,
            sent_at=now,
            read=sender != Sender.USER.value,
        )
        message.raise_(
            MessageSent(
                message_id=str(message.id),
                room_id=str(room_id),
                sender=sender,
                sent_at=now,
            )
        )
        return message

    def mark_read(self):
        self.read = True

    def move_to(self, room_id):
        self.room_id = room_id

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "room_id": str(self.room_id),
            "sender": self.sender,
            "sender_name": self.sender_name,
            "content": self.content,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "read": bool(self.read),
        }
