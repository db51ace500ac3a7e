"""
app/api/chat.py

Purpose: Chat endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.schemas.chat import ChatRoom, ChatRoomList, ChatRoomSummary, ChatMessage, CreateRoomRequest, MessageCreate
from app.schemas.response import ActionResult
from app.services import chat_service

router = APIRouter(prefix="/chats", tags=["Chat"])


@router.post("", response_model=ChatRoom)
async def create_chat_room(payload: CreateRoomRequest, session: AuthSession = Depends(get_session)):
    """Opens the caller's room for a listing, reusing an existing one."""
    room = await chat_service.create_chat_room(payload.listing_id, session.user_id)
    return ChatRoom(**to_public(room))


@router.get("", response_model=ChatRoomList)
async def get_chat_rooms(session: AuthSession = Depends(get_session)):
    snapshot = await chat_service.get_rooms_snapshot(session.user_id)
    return ChatRoomList(
        rooms=[ChatRoomSummary(**to_public(r)) for r in snapshot["rooms"]],
        unread_count=snapshot["unread_count"],
    )


@router.get("/{room_id}", response_model=ChatRoom)
async def get_chat_room(room_id: str, session: AuthSession = Depends(get_session)):
    return ChatRoom(**to_public(await chat_service.get_chat_room(room_id, session)))


@router.post("/{room_id}/messages", response_model=ChatMessage, status_code=201)
async def add_message(room_id: str, payload: MessageCreate, session: AuthSession = Depends(get_session)):
    message = await chat_service.add_message(room_id, session, payload.text, payload.image)
    return ChatMessage(**message)


@router.post("/{room_id}/seen", response_model=ActionResult)
async def mark_room_as_seen(room_id: str, session: AuthSession = Depends(get_session)):
    await chat_service.mark_room_as_seen(room_id, session)
    return ActionResult()
