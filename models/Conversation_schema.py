# models/Conversation_schema.py
from typing import List

from pydantic import BaseModel

from models.Message_schema import Message


class Conversation(BaseModel):
    chat_id: str
    messages: List[Message] = []

    def to_record(self) -> dict:
        """Plain dict as stored: {"chat_id": ..., "messages": [{"role", "content"}, ...]}."""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: dict) -> "Conversation":
        return cls(chat_id=record["chat_id"], messages=record.get("messages", []))
