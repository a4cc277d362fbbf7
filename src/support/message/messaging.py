"""Sending a chat message — persists the message and bumps its room."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from support.domain import support
from support.message.message import ChatMessage, Sender
from support.room.room import ChatRoom


@support.command(part_of="ChatMessage")
class SendMessage:
    room_id = Identifier(required=True)
    sender = String(required=True, choices=Sender)
    sender_name = String(max_length=150)
    content = Text(required=True)


@support.command_handler(part_of=ChatMessage)
class SendMessageHandler:
    @handle(SendMessage)
    def send_message(self, command):
        room_repo = current_domain.repository_for(ChatRoom)
        room = room_repo.get(command.room_id)

        message = ChatMessage.compose(
            room_id=room.id,
            sender=command.sender,
            sender_name=command.sender_name,
            content=command.content,
        )
        room.record_message(message.sender, message.content)

        current_domain.repository_for(ChatMessage).add(message)
        room_repo.add(room)
        return str(message.id)
