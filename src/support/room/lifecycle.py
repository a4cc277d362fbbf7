"""Admin-side room actions: mark a room read, close it."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from support.domain import support
from support.message.message import ChatMessage, Sender
from support.room.room import ChatRoom


@support.command(part_of="ChatRoom")
class MarkRoomRead:
    room_id = Identifier(required=True)


@support.command(part_of="ChatRoom")
class CloseRoom:
    room_id = Identifier(required=True)
    reason = String(max_length=255)


@support.command_handler(part_of=ChatRoom)
class RoomLifecycleHandler:
    @handle(MarkRoomRead)
    def mark_room_read(self, command):
        room = current_domain.repository_for(ChatRoom).get(command.room_id)

        message_repo = current_domain.repository_for(ChatMessage)
        unread = fetch_all(ChatMessage, room_id=str(room.id), sender=Sender.USER.value, read=False)
        for message in unread:
            message.mark_read()
            message_repo.add(message)

        room.mark_read(messages_marked=len(unread))
        current_domain.repository_for(ChatRoom).add(room)
        return len(unread)

    @handle(CloseRoom)
    def close_room(self, command):
        repo = current_domain.repository_for(ChatRoom)
        room = repo.get(command.room_id)
        room.close(reason=command.reason)
        repo.add(room)
