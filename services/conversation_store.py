# services/conversation_store.py
import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from models import Conversation
from utils.mongodb_conn import get_mongodb_connection

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class ConversationNotFound(StoreError):
    def __init__(self, chat_id: str):
        super().__init__(f"Conversation {chat_id} not found")
        self.chat_id = chat_id


class ConversationAlreadyExists(StoreError):
    def __init__(self, chat_id: str):
        super().__init__(f"Conversation {chat_id} already exists")
        self.chat_id = chat_id


class ConversationStore(ABC):
    """
    Persistence contract for whole conversation records.
    No partial updates: update() replaces the full message list.
    """

    @abstractmethod
    async def create(self, chat: Conversation) -> None:
        ...

    @abstractmethod
    async def read(self, chat_id: str) -> Optional[Conversation]:
        ...

    @abstractmethod
    async def update(self, chat: Conversation) -> None:
        ...

    @abstractmethod
    async def delete(self, chat_id: str) -> None:
        ...

    @abstractmethod
    async def list_all(self) -> List[Conversation]:
        ...


class MongoConversationStore(ConversationStore):
    """Conversations in the `chat` collection, keyed by `_id` = chat_id."""

    def __init__(self, collection=None):
        if collection is None:
            db = get_mongodb_connection().get_database()
            self.collection = db.chat
        else:
            self.collection = collection

    @staticmethod
    def _to_document(chat: Conversation) -> dict:
        document = chat.to_record()
        document["_id"] = chat.chat_id
        return document

    async def create(self, chat: Conversation) -> None:
        try:
            await self.collection.insert_one(self._to_document(chat))
        except DuplicateKeyError:
            raise ConversationAlreadyExists(chat.chat_id)

    async def read(self, chat_id: str) -> Optional[Conversation]:
        document = await self.collection.find_one({"_id": chat_id})
        if document is None:
            return None
        return Conversation.from_record(document)

    async def update(self, chat: Conversation) -> None:
        result = await self.collection.replace_one({"_id": chat.chat_id}, self._to_document(chat))
        if result.matched_count == 0:
            raise ConversationNotFound(chat.chat_id)

    async def delete(self, chat_id: str) -> None:
        result = await self.collection.delete_one({"_id": chat_id})
        if result.deleted_count == 0:
            raise ConversationNotFound(chat_id)

    async def list_all(self) -> List[Conversation]:
        cursor = self.collection.find({})
        documents = await cursor.to_list(length=None)
        return [Conversation.from_record(doc) for doc in documents]


class JsonFileConversationStore(ConversationStore):
    """
    Local file store used by the terminal client.

    The whole file is one JSON object {chat_id: record}; every write rewrites it
    through a temp file so a crash never leaves a half-written store behind.
    File access runs in a worker thread so the event loop is not blocked.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            content = f.read()
        return json.loads(content) if content.strip() else {}

    def _save(self, records: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    async def create(self, chat: Conversation) -> None:
        records = await asyncio.to_thread(self._load)
        if chat.chat_id in records:
            raise ConversationAlreadyExists(chat.chat_id)
        records[chat.chat_id] = chat.to_record()
        await asyncio.to_thread(self._save, records)

    async def read(self, chat_id: str) -> Optional[Conversation]:
        records = await asyncio.to_thread(self._load)
        record = records.get(chat_id)
        if record is None:
            return None
        return Conversation.from_record(record)

    async def update(self, chat: Conversation) -> None:
        records = await asyncio.to_thread(self._load)
        if chat.chat_id not in records:
            raise ConversationNotFound(chat.chat_id)
        records[chat.chat_id] = chat.to_record()
        await asyncio.to_thread(self._save, records)

    async def delete(self, chat_id: str) -> None:
        records = await asyncio.to_thread(self._load)
        if records.pop(chat_id, None) is None:
            raise ConversationNotFound(chat_id)
        await asyncio.to_thread(self._save, records)

    async def list_all(self) -> List[Conversation]:
        records = await asyncio.to_thread(self._load)
        return [Conversation.from_record(record) for record in records.values()]


@lru_cache(maxsize=1)
def get_conversation_store() -> ConversationStore:
    logger.info("[Store] Using MongoDB conversation store")
    return MongoConversationStore()
