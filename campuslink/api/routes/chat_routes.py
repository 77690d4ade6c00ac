"""
Chat Routes

GET /chats - Get my chats
GET /chats/{chat_id}/messages - Get messages in a chat
POST /chats/{chat_id}/messages - Send a message (AI-moderated)

Only the two participants of a chat can read or write it.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends, Query

from campuslink.core.auth import get_current_user
from campuslink.services.moderation_service import get_moderation_service, ContentRejectedError
from campuslink.services.mongo_service import ChatService, MessageService
from campuslink.schemas.schemas import (
    ChatResponse, ChatMessageCreate, ChatMessageResponse
)

router = APIRouter(prefix="/chats", tags=["Chats"])
logger = logging.getLogger(__name__)


def to_chat_response(doc: dict) -> ChatResponse:
    return ChatResponse(
        id=doc["id"],
        participants=doc["participants"],
        request_id=doc.get("request_id"),
        last_message=doc.get("last_message"),
        last_message_at=doc.get("last_message_at"),
        created_at=doc["created_at"]
    )


def _get_chat_for(chat_id: str, user_id: int) -> dict:
    chat = ChatService().get_by_id(chat_id)
    if not chat or user_id not in chat["participants"]:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


@router.get("", response_model=List[ChatResponse])
async def my_chats(user: dict = Depends(get_current_user)):
    """Get chats the current user takes part in, most recently active first."""
    return [to_chat_response(c) for c in ChatService().list_for_user(user["user_id"])]


@router.get("/{chat_id}/messages", response_model=List[ChatMessageResponse])
async def get_messages(
    chat_id: str,
    limit: int = Query(200, ge=1, le=500),
    user: dict = Depends(get_current_user)
):
    """Get messages in a chat, oldest first."""
    _get_chat_for(chat_id, user["user_id"])
    return [ChatMessageResponse(**m) for m in MessageService().list_for_chat(chat_id, limit)]


@router.post("/{chat_id}/messages", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    chat_id: str,
    data: ChatMessageCreate,
    user: dict = Depends(get_current_user)
):
    """Send a message. Unsafe messages are rejected with the moderator's reason."""
    _get_chat_for(chat_id, user["user_id"])

    text = data.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message cannot be empty")

    try:
        get_moderation_service().ensure_safe(text, "chat message")
    except ContentRejectedError as e:
        raise HTTPException(status_code=422, detail=f"Message blocked: {e.reason}")

    message = MessageService().insert(chat_id, user["user_id"], text)
    ChatService().touch(chat_id, text, message["created_at"])

    return ChatMessageResponse(**message)
