"""Chat room housekeeping — close idle rooms and merge duplicates.

Both commands run from the nightly job in ``scheduler`` and from
``manage.py clean-chat-rooms``.
"""

from collections import defaultdict
from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from shared.clock import as_naive_utc
from shared.queries import fetch_all
from support.domain import support
from support.message.message import ChatMessage
from support.room.room import ChatRoom, RoomStatus

logger = structlog.get_logger(__name__)

_EPOCH = datetime(1970, 1, 1)


@support.command(part_of="ChatRoom")
class CloseInactiveRooms:
    older_than_days = Integer(default=30, min_value=1)
    as_of = DateTime()  # Optional: defaults to now


@support.command(part_of="ChatRoom")
class MergeDuplicateRooms:
    """Collapse every participant's rooms into one.

    The kept room is an active one when the participant has any, otherwise
    the one with the most messages (newest on a tie).
    """


def _last_activity(room):
    return as_naive_utc(room.last_active_at or room.last_message_at or room.created_at) or _EPOCH


@support.command_handler(part_of=ChatRoom)
class RoomCleanupHandler:
    @handle(CloseInactiveRooms)
    def close_inactive_rooms(self, command):
        as_of = command.as_of or datetime.now(UTC)
        cutoff = as_naive_utc(as_of) - timedelta(days=command.older_than_days or 30)

        repo = current_domain.repository_for(ChatRoom)
        closed = 0
        for room in fetch_all(ChatRoom, status=RoomStatus.ACTIVE.value):
            if _last_activity(room) < cutoff:
                room.close(reason=f"Inactive for more than {command.older_than_days} days")
                repo.add(room)
                closed += 1

        logger.info("Closed inactive chat rooms", closed=closed, cutoff=cutoff.isoformat())
        return closed

    @handle(MergeDuplicateRooms)
    def merge_duplicate_rooms(self, command):
        by_participant = defaultdict(list)
        for room in fetch_all(ChatRoom):
            by_participant[room.participant_id].append(room)

        room_repo = current_domain.repository_for(ChatRoom)
        message_repo = current_domain.repository_for(ChatMessage)
        removed = 0

        for participant_id, rooms in by_participant.items():
            if len(rooms) < 2:
                continue

            messages = {str(room.id): fetch_all(ChatMessage, room_id=str(room.id)) for room in rooms}
            # Active rooms first, then the busiest, then the newest
            rooms.sort(
                key=lambda r: (
                    r.is_active,
                    len(messages[str(r.id)]),
                    as_naive_utc(r.created_at) or _EPOCH,
                ),
                reverse=True,
            )
            keeper, duplicates = rooms[0], rooms[1:]
            history = list(messages[str(keeper.id)])

            for duplicate in duplicates:
                for message in messages[str(duplicate.id)]:
                    message.move_to(keeper.id)
                    message_repo.add(message)
                    history.append(message)
                room_repo._dao.delete(duplicate)
                removed += 1

            keeper.summarize(history)
            room_repo.add(keeper)

            logger.info(
                "Merged duplicate chat rooms",
                participant_id=participant_id,
                kept=str(keeper.id),
                kept_status=keeper.status,
                removed=len(duplicates),
            )

        logger.info("Duplicate room merge complete", removed=removed)
        return removed
