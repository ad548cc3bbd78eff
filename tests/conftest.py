import asyncio
from typing import List, Optional

import pytest

from models import NO_REPLY, Conversation, Message, Role
from services.conversation_service import ConversationService
from services.conversation_store import (
    ConversationAlreadyExists,
    ConversationNotFound,
    ConversationStore,
)


class InMemoryConversationStore(ConversationStore):
    def __init__(self):
        self.records = {}
        self.writes = 0

    async def create(self, chat: Conversation) -> None:
        if chat.chat_id in self.records:
            raise ConversationAlreadyExists(chat.chat_id)
        self.records[chat.chat_id] = chat.to_record()
        self.writes += 1

    async def read(self, chat_id: str) -> Optional[Conversation]:
        record = self.records.get(chat_id)
        return Conversation.from_record(record) if record else None

    async def update(self, chat: Conversation) -> None:
        if chat.chat_id not in self.records:
            raise ConversationNotFound(chat.chat_id)
        self.records[chat.chat_id] = chat.to_record()
        self.writes += 1

    async def delete(self, chat_id: str) -> None:
        if self.records.pop(chat_id, None) is None:
            raise ConversationNotFound(chat_id)

    async def list_all(self) -> List[Conversation]:
        return [Conversation.from_record(r) for r in self.records.values()]


class ScriptedLLM:
    """Answers 'reply N' to the Nth call, or NO_REPLY when told to."""

    def __init__(self):
        self.calls = []
        self.no_reply = False
        self.error = None

    async def complete(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        if self.no_reply:
            return NO_REPLY
        return Message(role=Role.ASSISTANT, content=f"reply {len(self.calls)}")


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def service(store, llm):
    return ConversationService(store, llm, system_prompt="You are a test persona.")
