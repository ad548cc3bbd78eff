# services/conversation_service.py
import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

from models import (
    ChatHistory,
    ChatList,
    ChatResponse,
    Conversation,
    Message,
    NoReply,
    Role,
)
from services.conversation_store import ConversationStore, get_conversation_store
from services.llm_service import LLMService, get_llm_service
from utils.chat_id import generate_chat_id

load_dotenv()

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = os.getenv(
    "SYSTEM_PROMPT",
    "You are a helpful software engineer expert in Rust language and AWS Cloud Platform.",
)

NONE_CHAT_ID = "none"
NO_RESPONSE = "No response!"


class ConversationService:
    """
    Chat-history CRUD around the LLM gateway.

    Every operation is one linear pass: read the record, append, call the model,
    write the whole record back. Nothing is locked, so two concurrent
    continuations of the same chat race and the last write wins.
    """

    def __init__(self, store: ConversationStore, llm_service: LLMService, system_prompt: str = SYSTEM_PROMPT):
        self.store = store
        self.llm_service = llm_service
        self.system_prompt = system_prompt

    @staticmethod
    def _no_response() -> ChatResponse:
        return ChatResponse(chat_id=NONE_CHAT_ID, message=NO_RESPONSE)

    async def new_chat(self, message: str) -> ChatResponse:
        chat_id = generate_chat_id()
        messages = [
            Message(role=Role.SYSTEM, content=self.system_prompt),
            Message(role=Role.USER, content=message),
        ]

        reply = await self.llm_service.complete(messages)
        if isinstance(reply, NoReply):
            logger.warning("[ChatService] No reply for new chat, nothing stored")
            return self._no_response()

        messages.append(reply)
        await self.store.create(Conversation(chat_id=chat_id, messages=messages))
        logger.info("[ChatService] Created chat %s", chat_id)
        return ChatResponse(chat_id=chat_id, message=reply.content)

    async def continue_chat(self, chat_id: str, message: str) -> ChatResponse:
        chat = await self.store.read(chat_id)
        if chat is None:
            logger.warning("[ChatService] Chat %s not found", chat_id)
            return self._no_response()

        messages = list(chat.messages)
        messages.append(Message(role=Role.USER, content=message))

        reply = await self.llm_service.complete(messages)
        if isinstance(reply, NoReply):
            logger.warning("[ChatService] No reply for chat %s, nothing stored", chat_id)
            return self._no_response()

        messages.append(reply)
        await self.store.update(Conversation(chat_id=chat_id, messages=messages))
        logger.info("[ChatService] Chat %s now has %d messages", chat_id, len(messages))
        return ChatResponse(chat_id=chat_id, message=reply.content)

    async def get_chat(self, chat_id: str) -> ChatHistory:
        chat = await self.store.read(chat_id)
        if chat is None:
            return ChatHistory(chat_id=NONE_CHAT_ID, messages=[])
        # System preamble included
        return ChatHistory(chat_id=chat_id, messages=[m.content for m in chat.messages])

    async def list_chat(self) -> ChatList:
        chats = await self.store.list_all()
        return ChatList(chats=[c.chat_id for c in chats])

    async def delete_chat(self, chat_id: str) -> None:
        await self.store.delete(chat_id)
        logger.info("[ChatService] Deleted chat %s", chat_id)


@lru_cache(maxsize=1)
def get_conversation_service() -> ConversationService:
    """
    FastAPI dependency factory that returns a singleton ConversationService instance.
    """
    return ConversationService(get_conversation_store(), get_llm_service())
