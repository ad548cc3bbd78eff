import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from models import Conversation, Message, Role
from services.conversation_store import (
    ConversationAlreadyExists,
    ConversationNotFound,
    JsonFileConversationStore,
    MongoConversationStore,
)

from conftest import run


def make_chat(chat_id="abc", *texts):
    messages = [Message(role=Role.SYSTEM, content="persona")]
    messages += [Message(role=Role.USER, content=t) for t in texts]
    return Conversation(chat_id=chat_id, messages=messages)


class TestJsonFileConversationStore:
    @pytest.fixture
    def file_store(self, tmp_path):
        return JsonFileConversationStore(tmp_path / "nested" / "chats.json")

    def test_create_and_read(self, file_store):
        chat = make_chat("abc", "hello")
        run(file_store.create(chat))

        assert run(file_store.read("abc")) == chat
        assert run(file_store.read("other")) is None

    def test_persists_across_instances(self, file_store):
        run(file_store.create(make_chat("abc", "hello")))

        reopened = JsonFileConversationStore(file_store.path)

        assert [c.chat_id for c in run(reopened.list_all())] == ["abc"]

    def test_create_rejects_existing_id(self, file_store):
        run(file_store.create(make_chat("abc")))
        with pytest.raises(ConversationAlreadyExists):
            run(file_store.create(make_chat("abc", "overwrite")))
        assert run(file_store.read("abc")).messages[-1].content == "persona"

    def test_update_replaces_whole_record(self, file_store):
        run(file_store.create(make_chat("abc", "one")))
        run(file_store.update(make_chat("abc", "one", "two")))

        assert [m.content for m in run(file_store.read("abc")).messages] == ["persona", "one", "two"]

    def test_update_and_delete_missing(self, file_store):
        with pytest.raises(ConversationNotFound):
            run(file_store.update(make_chat("missing")))
        with pytest.raises(ConversationNotFound):
            run(file_store.delete("missing"))

    def test_delete(self, file_store):
        run(file_store.create(make_chat("a")))
        run(file_store.create(make_chat("b")))
        run(file_store.delete("a"))

        assert [c.chat_id for c in run(file_store.list_all())] == ["b"]

    def test_empty_file_is_empty_store(self, tmp_path):
        path = tmp_path / "chats.json"
        path.write_text("")
        assert run(JsonFileConversationStore(path).list_all()) == []


class TestMongoConversationStore:
    @pytest.fixture
    def collection(self):
        collection = MagicMock()
        collection.insert_one = AsyncMock()
        collection.find_one = AsyncMock(return_value=None)
        collection.replace_one = AsyncMock(return_value=SimpleNamespace(matched_count=1))
        collection.delete_one = AsyncMock(return_value=SimpleNamespace(deleted_count=1))
        return collection

    @pytest.fixture
    def mongo_store(self, collection):
        return MongoConversationStore(collection=collection)

    def test_create_uses_chat_id_as_document_id(self, mongo_store, collection):
        run(mongo_store.create(make_chat("abc", "hello")))

        document = collection.insert_one.await_args.args[0]
        assert document["_id"] == "abc"
        assert document["chat_id"] == "abc"
        assert document["messages"][1] == {"role": "user", "content": "hello"}

    def test_duplicate_key_is_already_exists(self, mongo_store, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(ConversationAlreadyExists):
            run(mongo_store.create(make_chat("abc")))

    def test_read(self, mongo_store, collection):
        collection.find_one.return_value = {"_id": "abc", **make_chat("abc", "hi").to_record()}

        chat = run(mongo_store.read("abc"))

        collection.find_one.assert_awaited_once_with({"_id": "abc"})
        assert chat == make_chat("abc", "hi")

    def test_read_missing(self, mongo_store):
        assert run(mongo_store.read("abc")) is None

    def test_update_replaces_document(self, mongo_store, collection):
        run(mongo_store.update(make_chat("abc", "one", "two")))

        query, document = collection.replace_one.await_args.args
        assert query == {"_id": "abc"}
        assert len(document["messages"]) == 3

    def test_update_missing(self, mongo_store, collection):
        collection.replace_one.return_value = SimpleNamespace(matched_count=0)
        with pytest.raises(ConversationNotFound):
            run(mongo_store.update(make_chat("abc")))

    def test_delete_missing(self, mongo_store, collection):
        collection.delete_one.return_value = SimpleNamespace(deleted_count=0)
        with pytest.raises(ConversationNotFound):
            run(mongo_store.delete("abc"))

    def test_list_all(self, mongo_store, collection):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(
            return_value=[
                {"_id": "a", **make_chat("a").to_record()},
                {"_id": "b", **make_chat("b").to_record()},
            ]
        )
        collection.find.return_value = cursor

        chats = run(mongo_store.list_all())

        assert [c.chat_id for c in chats] == ["a", "b"]


def test_file_store_reads_in_worker_thread(tmp_path):
    file_store = JsonFileConversationStore(tmp_path / "chats.json")
    threads = []
    load = file_store._load

    def recording_load():
        threads.append(threading.current_thread())
        return load()

    file_store._load = recording_load
    run(file_store.read("abc"))

    assert threads and threads[0] is not threading.main_thread()
