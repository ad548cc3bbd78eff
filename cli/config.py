# cli/config.py
import os
from pathlib import Path

from dotenv import dotenv_values, set_key

DEFAULT_CONFIG_PATH = Path("~/.cgpt/config.env")
DEFAULT_STORAGE_PATH = "~/.cgpt/chats.json"

API_KEY = "OPENAI_API_KEY"
STORAGE_PATH = "CGPT_STORAGE_PATH"


class CliConfig:
    """
    Process-local settings file (dotenv format) holding the provider key and
    the path of the local conversation store. Environment variables win.
    """

    def __init__(self, path=None):
        self.path = Path(path or DEFAULT_CONFIG_PATH).expanduser()
        self.values = dotenv_values(self.path) if self.path.exists() else {}

    @property
    def api_key(self):
        return os.getenv(API_KEY) or self.values.get(API_KEY)

    @property
    def storage_path(self) -> str:
        return os.getenv(STORAGE_PATH) or self.values.get(STORAGE_PATH) or DEFAULT_STORAGE_PATH

    def save(self, key: str, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(mode=0o600, exist_ok=True)
        set_key(str(self.path), key, value)
        self.values[key] = value
