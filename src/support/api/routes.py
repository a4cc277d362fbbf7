"""FastAPI routes for the Support domain — the admin side of live chat.

Shoppers talk over the Socket.IO gateway; these endpoints let the back
office browse rooms and close them without a socket.
"""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from identity.auth.dependencies import require_admin
from support.api.schemas import ChatMessageResponse, ChatRoomResponse, CloseRoomRequest, StatusResponse
from support.message.history import active_rooms, recent_messages
from support.room.lifecycle import CloseRoom
from support.room.room import ChatRoom

router = APIRouter(prefix="/chat", tags=["chat"], dependencies=[Depends(require_admin)])


@router.get("/rooms", response_model=list[ChatRoomResponse])
async def list_active_rooms() -> list[dict]:
    return active_rooms()


@router.get("/rooms/{room_id}/messages", response_model=list[ChatMessageResponse])
async def room_history(room_id: str, limit: int = Query(default=50, ge=1, le=500)) -> list[dict]:
    # 404 for an unknown room
    current_domain.repository_for(ChatRoom).get(room_id)
    return recent_messages(room_id, limit=limit)


@router.post("/rooms/{room_id}/close", response_model=StatusResponse)
async def close_room(room_id: str, body: CloseRoomRequest | None = None) -> StatusResponse:
    reason = body.reason if body else None
    current_domain.process(CloseRoom(room_id=room_id, reason=reason), asynchronous=False)
    return StatusResponse()
