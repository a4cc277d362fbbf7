"""ChatRoom aggregate — one conversation between a shopper and the shop.

A participant is either a signed-in user (keyed by user id) or a guest
(keyed by a random id the widget generates and keeps in local storage).
Each participant should have at most one active room.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from shared.clock import as_naive_utc
from support.domain import support
from support.room.events import ChatRoomClosed, ChatRoomOpened, ChatRoomRead

_EPOCH = datetime(1970, 1, 1)


class RoomStatus(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class ParticipantType(Enum):
    REGISTERED = "registered"
    GUEST = "guest"


@support.aggregate
class ChatRoom:
    participant_id = String(required=True, max_length=100)
    participant_type = String(choices=ParticipantType, default=ParticipantType.GUEST.value)
    user_name = String(required=True, max_length=150)
    user_email = String(max_length=254)
    status = String(choices=RoomStatus, default=RoomStatus.ACTIVE.value)
    last_message = String(max_length=2000)
    last_message_at = DateTime()
    last_active_at = DateTime()
    unread_count = Integer(default=0, min_value=0)
    created_at = DateTime()

    @classmethod
    def open(cls, participant_id, participant_type, user_name, user_email=None):
        now = datetime.now(UTC)
        room = cls(
            participant_id=str(participant_id),
            participant_type=participant_type,
            user_name=user_name or "Khách",
            user_email=user_email,
            status=RoomStatus.ACTIVE.value,
            unread_count=0,
            last_active_at=now,
            created_at=now,
        )
        room.raise_(
            ChatRoomOpened(
                room_id=str(room.id),
                participant_id=room.participant_id,
                participant_type=room.participant_type,
                user_name=room.user_name,
                opened_at=now,
            )
        )
        return room

    @property
    def is_active(self) -> bool:
        return self.status == RoomStatus.ACTIVE.value

    def touch(self):
        self.last_active_at = datetime.now(UTC)

    def record_message(self, sender, content):
        if not self.is_active:
            raise ValidationError({"room_id": ["Chat room is closed"]})

        now = datetime.now(UTC)
        self.last_message = content[:2000]
        self.last_message_at = now
        self.last_active_at = now
        if sender == "user":
            self.unread_count = (self.unread_count or 0) + 1

    def summarize(self, messages):
        """Recompute the last-message preview and unread count from the room's full history."""
        if not messages:
            return
        latest = max(messages, key=lambda m: as_naive_utc(m.sent_at) or _EPOCH)
        self.last_message = latest.content[:2000]
        self.last_message_at = latest.sent_at
        if (as_naive_utc(self.last_active_at) or _EPOCH) < (as_naive_utc(latest.sent_at) or _EPOCH):
            self.last_active_at = latest.sent_at
        self.unread_count = sum(1 for m in messages if m.sender == "user" and not m.read)

    def mark_read(self, messages_marked=0):
        self.unread_count = 0
        self.raise_(ChatRoomRead(room_id=str(self.id), messages_marked=messages_marked))

    def close(self, reason=None):
        if not self.is_active:
            return
        now = datetime.now(UTC)
        self.status = RoomStatus.CLOSED.value
        self.raise_(
            ChatRoomClosed(
                room_id=str(self.id),
                participant_id=self.participant_id,
                reason=reason,
                closed_at=now,
            )
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "participant_id": self.participant_id,
            "participant_type": self.participant_type,
            "user_name": self.user_name,
            "user_email": self.user_email,
            "status": self.status,
            "last_message": self.last_message,
            "last_message_at": self.last_message_at.isoformat() if self.last_message_at else None,
            "last_active_at": self.last_active_at.isoformat() if self.last_active_at else None,
            "unread_count": self.unread_count or 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
