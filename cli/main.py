# cli/main.py
import argparse
import asyncio
import logging
import os
import sys

from cli.config import API_KEY, STORAGE_PATH, CliConfig
from services.conversation_service import NONE_CHAT_ID, ConversationService
from services.conversation_store import JsonFileConversationStore
from services.llm_service import LLMService
from utils.logger import setup_logging

logger = logging.getLogger(__name__)

PROMPT = " ⌨ : "
BOT = "🤖 : "

HELP = """Commands:
  <text>          send a message (starts a chat if none is open)
  /new            close the current chat; the next message starts a new one
  /list           list stored chats
  /open <id>      switch to a stored chat
  /history [id]   show the messages of a chat
  /delete [id]    delete a chat
  /help           show this help
  exit            quit"""


class ChatShell:
    """Read-eval loop over ConversationService. One open chat at a time."""

    def __init__(self, service: ConversationService, read=None, write=None):
        self.service = service
        self.read = read or input
        self.write = write or print
        self.chat_id = None

    async def handle(self, line: str) -> bool:
        """Process one input line. Returns False when the loop should stop."""
        line = line.strip()
        if not line:
            return True
        if line in ("exit", "/exit"):
            return False

        command, _, arg = line.partition(" ")
        arg = arg.strip()

        if command == "/help":
            self.write(HELP)
        elif command == "/new":
            self.chat_id = None
            self.write("Started a new chat.")
        elif command == "/list":
            chats = await self.service.list_chat()
            self.write("\n".join(chats.chats) if chats.chats else "No chats.")
        elif command == "/open":
            await self._open(arg)
        elif command == "/history":
            history = await self.service.get_chat(arg or self.chat_id or NONE_CHAT_ID)
            self.write(f"[{history.chat_id}]")
            for text in history.messages:
                self.write(f"  - {text}")
        elif command == "/delete":
            await self._delete(arg or self.chat_id)
        else:
            await self._send(line)
        return True

    async def _open(self, chat_id: str):
        if not chat_id:
            self.write("Usage: /open <id>")
            return
        history = await self.service.get_chat(chat_id)
        if history.chat_id == NONE_CHAT_ID:
            self.write(f"No chat {chat_id}.")
            return
        self.chat_id = chat_id
        self.write(f"Opened chat {chat_id} ({len(history.messages)} messages).")

    async def _delete(self, chat_id):
        if not chat_id:
            self.write("Usage: /delete <id>")
            return
        await self.service.delete_chat(chat_id)
        if chat_id == self.chat_id:
            self.chat_id = None
        self.write(f"Deleted chat {chat_id}.")

    async def _send(self, text: str):
        if self.chat_id is None:
            response = await self.service.new_chat(text)
            if response.chat_id != NONE_CHAT_ID:
                self.chat_id = response.chat_id
        else:
            response = await self.service.continue_chat(self.chat_id, text)
        self.write(f"{BOT}{response.message}")

    async def run(self):
        self.write("This is a chat gpt CLI; type `exit` or Control-C to exit the prompt! Type /help for commands.")
        while True:
            try:
                line = await asyncio.to_thread(self.read, PROMPT)
            except (EOFError, KeyboardInterrupt):
                self.write("")
                break
            try:
                if not await self.handle(line):
                    break
            except Exception as e:
                logger.debug("Command failed", exc_info=True)
                self.write(f"Error: {e}")


class MissingApiKey(Exception):
    pass


def build_service(config: CliConfig, prompt=None) -> ConversationService:
    prompt = prompt or input
    api_key = config.api_key
    if not api_key and os.getenv("LLM_PROVIDER", "openai").lower() == "openai":
        api_key = prompt("OpenAI API key: ").strip()
        if not api_key:
            raise MissingApiKey(f"An OpenAI API key is required; set {API_KEY} or add it to {config.path}")
        config.save(API_KEY, api_key)
    if api_key:
        os.environ[API_KEY] = api_key
    if STORAGE_PATH not in config.values and not os.getenv(STORAGE_PATH):
        config.save(STORAGE_PATH, config.storage_path)

    store = JsonFileConversationStore(config.storage_path)
    return ConversationService(store, LLMService())


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Interactive chat client with local history")
    parser.add_argument("--config", help="path to the config file (default ~/.cgpt/config.env)")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "WARNING"))
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    config = CliConfig(args.config)
    try:
        shell = ChatShell(build_service(config))
    except MissingApiKey as e:
        print(e, file=sys.stderr)
        return 1
    try:
        asyncio.run(shell.run())
    except KeyboardInterrupt:
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
