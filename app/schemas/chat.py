"""
app/schemas/chat.py

Purpose: Chat room and message schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class ParticipantInfo(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None


class ChatMessage(BaseModel):
    id: str
    sender_id: str
    text: str = ""
    image: Optional[str] = None
    timestamp: datetime


class ChatRoomSummary(BaseModel):
    id: str
    listing_id: str
    listing_title: str
    listing_image: Optional[str] = None
    listing_price: int
    participant_ids: List[str]
    participants_data: Dict[str, ParticipantInfo] = Field(default_factory=dict)
    last_message: Optional[str] = None
    last_update: datetime
    seen_by: List[str] = Field(default_factory=list)


class ChatRoom(ChatRoomSummary):
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatRoomList(BaseModel):
    rooms: List[ChatRoomSummary]
    unread_count: int


class CreateRoomRequest(BaseModel):
    listing_id: str


class MessageCreate(BaseModel):
    text: str = Field("", max_length=2000)
    image: Optional[str] = Field(None, description="Image URL or base64 data URL")
