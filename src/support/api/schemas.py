"""Pydantic response models for the chat admin API."""

from pydantic import BaseModel


class ChatRoomResponse(BaseModel):
    id: str
    participant_id: str
    participant_type: str
    user_name: str
    user_email: str | None = None
    status: str
    last_message: str | None = None
    last_message_at: str | None = None
    last_active_at: str | None = None
    unread_count: int = 0
    created_at: str | None = None


class ChatMessageResponse(BaseModel):
    id: str
    room_id: str
    sender: str
    sender_name: str | None = None
    content: str
    sent_at: str | None = None
    read: bool = False


class CloseRoomRequest(BaseModel):
    reason: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
