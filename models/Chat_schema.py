# models/Chat_schema.py
from typing import List

from pydantic import BaseModel


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    chat_id: str
    message: str


class ChatHistory(BaseModel):
    chat_id: str
    messages: List[str] = []


class ChatList(BaseModel):
    chats: List[str] = []
