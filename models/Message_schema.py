# models/Message_schema.py
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role
    content: str

    def to_openai(self) -> dict:
        return {"role": self.role, "content": self.content}


class NoReply:
    """Returned by the gateway when the provider sent back no choices."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NoReply()"

    def __bool__(self):
        return False


NO_REPLY = NoReply()
