"""Socket.IO chat gateway.

Wire events (client → server):

- ``user:join`` ``{userId, guestId, userName, userEmail}``
- ``admin:join`` ``{token}`` (an admin access token)
- ``admin:join_room`` ``roomId``
- ``message:send`` ``{roomId, senderName, content}``; the sender is derived
  from how the socket joined, never taken from the payload
- ``typing:start`` ``{roomId, userName}`` / ``typing:stop`` ``{roomId}``

Server → client: ``chat:history``, ``room:new``, ``rooms:list``,
``message:new``, ``message:user_new``, ``typing:status`` and ``error``.

Every handler runs its domain work inside the support domain context.
"""

import asyncio

import socketio
import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from identity.auth.tokens import InvalidTokenError, decode_access_token
from support.bot.responder import BotResponder
from support.domain import support
from support.gateway.registry import SessionRegistry
from support.message.history import active_rooms, recent_messages
from support.message.message import ChatMessage, Sender
from support.message.messaging import SendMessage
from support.room.lifecycle import MarkRoomRead
from support.room.room import ChatRoom
from support.room.session import JoinChat

logger = structlog.get_logger(__name__)

ADMIN_ROOM = "admin_room"
HISTORY_LIMIT = 50


def room_channel(room_id) -> str:
    return f"room_{room_id}"


def user_channel(participant_id) -> str:
    return f"user_{participant_id}"


class ChatGateway:
    def __init__(self, sio, registry: SessionRegistry | None = None, bot: BotResponder | None = None):
        self.sio = sio
        self.registry = registry or SessionRegistry()
        self.bot = bot or BotResponder()

    def register(self):
        handlers = {
            "user:join": self.on_user_join,
            "admin:join": self.on_admin_join,
            "admin:join_room": self.on_admin_join_room,
            "message:send": self.on_message_send,
            "typing:start": self.on_typing_start,
            "typing:stop": self.on_typing_stop,
            "disconnect": self.on_disconnect,
        }
        for event, handler in handlers.items():
            self.sio.on(event, handler)
        return self

    async def _fail(self, sid, message, exc):
        logger.warning("Chat event failed", sid=sid, error=str(exc))
        await self.sio.emit("error", {"message": message}, to=sid)

    async def on_user_join(self, sid, data):
        data = data or {}
        try:
            with support.domain_context():
                joined = current_domain.process(
                    JoinChat(
                        user_id=data.get("userId"),
                        guest_id=data.get("guestId"),
                        user_name=data.get("userName"),
                        user_email=data.get("userEmail"),
                    ),
                    asynchronous=False,
                )
                room = current_domain.repository_for(ChatRoom).get(joined["room_id"])
                room_view = room.to_dict()
                history = recent_messages(room.id, limit=HISTORY_LIMIT)
        except (ValidationError, ObjectNotFoundError) as exc:
            await self._fail(sid, "Failed to join chat", exc)
            return

        self.registry.register_participant(sid, room_view["participant_id"], room_view["id"])
        await self.sio.enter_room(sid, user_channel(room_view["participant_id"]))
        await self.sio.enter_room(sid, room_channel(room_view["id"]))

        if joined["created"]:
            await self.sio.emit("room:new", room_view, room=ADMIN_ROOM)

        await self.sio.emit("chat:history", {"room": room_view, "messages": history}, to=sid)
        logger.info("Participant joined chat", room_id=room_view["id"], created=joined["created"])

    async def on_admin_join(self, sid, data=None):
        token = (data or {}).get("token") if isinstance(data, dict) else data
        try:
            claims = decode_access_token(token or "")
        except InvalidTokenError as exc:
            await self._fail(sid, "Admin access required", exc)
            return
        if not claims.is_admin:
            await self._fail(sid, "Admin access required", PermissionError(f"role {claims.role}"))
            return

        self.registry.register_admin(sid)
        await self.sio.enter_room(sid, ADMIN_ROOM)

        with support.domain_context():
            rooms = active_rooms()
        await self.sio.emit("rooms:list", rooms, to=sid)

    async def on_admin_join_room(self, sid, room_id):
        if isinstance(room_id, dict):
            room_id = room_id.get("roomId")
        if not self.registry.is_admin(sid):
            await self._fail(sid, "Admin access required", PermissionError("socket did not join as admin"))
            return
        try:
            with support.domain_context():
                history = recent_messages(room_id, limit=HISTORY_LIMIT)
                current_domain.process(MarkRoomRead(room_id=room_id), asynchronous=False)
        except (ValidationError, ObjectNotFoundError) as exc:
            await self._fail(sid, "Failed to open chat room", exc)
            return

        await self.sio.enter_room(sid, room_channel(room_id))
        await self.sio.emit("chat:history", {"messages": history}, to=sid)

    def _persist(self, room_id, sender, sender_name, content) -> dict:
        with support.domain_context():
            message_id = current_domain.process(
                SendMessage(room_id=room_id, sender=sender, sender_name=sender_name, content=content),
                asynchronous=False,
            )
            return current_domain.repository_for(ChatMessage).get(message_id).to_dict()

    def _sender_of(self, sid, room_id, claimed) -> str:
        """The sender a socket may post as; the client's own claim is only ever narrowed."""
        if claimed == Sender.BOT.value:
            raise PermissionError("Clients cannot post as the bot")
        if self.registry.is_admin(sid):
            return Sender.ADMIN.value
        if claimed == Sender.ADMIN.value:
            raise PermissionError("Only admin sockets can post as admin")

        participant = self.registry.participant(sid)
        if participant is None:
            raise PermissionError("Join the chat before sending messages")
        if str(participant.room_id) != str(room_id):
            raise PermissionError("Socket is not a member of this room")
        return Sender.USER.value

    async def on_message_send(self, sid, data):
        data = data or {}
        room_id = data.get("roomId")
        try:
            sender = self._sender_of(sid, room_id, data.get("sender"))
        except PermissionError as exc:
            await self._fail(sid, "Not allowed to send to this room", exc)
            return
        try:
            message = self._persist(room_id, sender, data.get("senderName"), data.get("content"))
        except (ValidationError, ObjectNotFoundError) as exc:
            await self._fail(sid, "Failed to send message", exc)
            return

        await self.sio.emit("message:new", message, room=room_channel(room_id))

        if sender == Sender.USER.value:
            await self.sio.emit(
                "message:user_new", {"roomId": room_id, "message": message}, room=ADMIN_ROOM
            )
            await self._run_bot(room_id, message["content"])

    async def _run_bot(self, room_id, text):
        with support.domain_context():
            reply = self.bot.reply(room_id, text, admins_online=self.registry.admins_online)
        if reply is None:
            return

        await asyncio.sleep(reply.delay_seconds)
        try:
            message = self._persist(room_id, reply.sender, reply.sender_name, reply.content)
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.warning("Bot reply dropped", room_id=str(room_id), error=str(exc))
            return
        await self.sio.emit("message:new", message, room=room_channel(room_id))

    async def on_typing_start(self, sid, data):
        data = data or {}
        await self.sio.emit(
            "typing:status",
            {"isTyping": True, "userName": data.get("userName")},
            room=room_channel(data.get("roomId")),
            skip_sid=sid,
        )

    async def on_typing_stop(self, sid, data):
        data = data or {}
        await self.sio.emit(
            "typing:status",
            {"isTyping": False},
            room=room_channel(data.get("roomId")),
            skip_sid=sid,
        )

    async def on_disconnect(self, sid, *args):
        self.registry.forget(sid)
        logger.debug("Chat socket disconnected", sid=sid)


def create_socket_server(cors_origins) -> tuple[socketio.AsyncServer, ChatGateway]:
    sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=cors_origins)
    gateway = ChatGateway(sio).register()
    return sio, gateway
