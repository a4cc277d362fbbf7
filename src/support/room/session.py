"""Joining a chat — find or open the participant's single active room.

A participant reconnecting from several tabs, or after a crash, may have
left more than one active room behind. Joining keeps the most recently
active one and closes the rest.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from shared.clock import as_naive_utc
from shared.queries import fetch_all
from support.domain import support
from support.room.room import ChatRoom, ParticipantType, RoomStatus

logger = structlog.get_logger(__name__)


@support.command(part_of="ChatRoom")
class JoinChat:
    user_id = String(max_length=100)
    guest_id = String(max_length=100)
    user_name = String(max_length=150)
    user_email = String(max_length=254)


def _by_recent_activity(room):
    return as_naive_utc(room.last_active_at or room.created_at)


def active_rooms_of(participant_id) -> list[ChatRoom]:
    rooms = fetch_all(ChatRoom, participant_id=str(participant_id), status=RoomStatus.ACTIVE.value)
    return sorted(rooms, key=_by_recent_activity, reverse=True)


@support.command_handler(part_of=ChatRoom)
class ChatSessionHandler:
    @handle(JoinChat)
    def join_chat(self, command):
        participant_id = command.user_id or command.guest_id
        if not participant_id:
            raise ValidationError({"participant": ["A user id or guest id is required"]})
        participant_type = (
            ParticipantType.REGISTERED.value if command.user_id else ParticipantType.GUEST.value
        )

        repo = current_domain.repository_for(ChatRoom)
        rooms = active_rooms_of(participant_id)

        if rooms:
            room, duplicates = rooms[0], rooms[1:]
            for duplicate in duplicates:
                duplicate.close(reason="Superseded by a more recent room")
                repo.add(duplicate)
            if duplicates:
                logger.info(
                    "Closed duplicate active rooms",
                    participant_id=participant_id,
                    closed=len(duplicates),
                )

            room.touch()
            repo.add(room)
            return {"room_id": str(room.id), "created": False}

        room = ChatRoom.open(
            participant_id=participant_id,
            participant_type=participant_type,
            user_name=command.user_name,
            user_email=command.user_email,
        )
        repo.add(room)
        logger.info("Opened chat room", room_id=str(room.id), participant_type=participant_type)
        return {"room_id": str(room.id), "created": True}
