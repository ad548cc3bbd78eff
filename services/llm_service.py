# services/llm_service.py
import logging
import os
import time
from functools import lru_cache
from typing import List, Union

from dotenv import load_dotenv
from openai import AsyncOpenAI

from models import NO_REPLY, Message, NoReply

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 512
NO_CONTENT = "No content in response!"


class LLMService:
    """
    Chat-completion gateway (OpenAI, or Ollama through its OpenAI-compatible API).
    Configured from .env; model and max_tokens are fixed for every call.
    """

    def __init__(self, client=None):
        self.provider = os.getenv("LLM_PROVIDER", "openai").lower()
        self.model_name = os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self.api_key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY", "")
        self.base_url = os.getenv("LLM_BASE_URL", None)
        self.max_tokens = int(os.getenv("LLM_MAX_TOKENS", DEFAULT_MAX_TOKENS))

        if client is not None:
            self.client = client
        elif self.provider == "ollama":
            self.base_url = self.base_url or "http://localhost:11434/v1"
            if not self.base_url.endswith("/v1"):
                self.base_url = self.base_url.rstrip("/") + "/v1"
            self.api_key = "ollama"
            self.client = AsyncOpenAI(base_url=self.base_url, api_key=self.api_key)
        else:
            if not self.api_key:
                raise ValueError("LLM_API_KEY or OPENAI_API_KEY is required for OpenAI provider")
            self.base_url = self.base_url or "https://api.openai.com/v1"
            self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

        logger.info(
            "[LLM] Service initialized: provider=%s model=%s base_url=%s max_tokens=%d",
            self.provider,
            self.model_name,
            self.base_url,
            self.max_tokens,
        )

    async def complete(self, messages: List[Message]) -> Union[Message, NoReply]:
        """
        Send the whole conversation and return the first choice.

        Returns NO_REPLY when the provider sends back no choices. A choice without
        text content becomes a message with a placeholder body. Provider errors
        are not caught here.
        """
        logger.debug("[LLM] Sending %d messages to %s", len(messages), self.model_name)
        request_start = time.perf_counter()

        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[m.to_openai() for m in messages],
            max_tokens=self.max_tokens,
        )

        request_time = (time.perf_counter() - request_start) * 1000
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                "[LLM] %.2fms, tokens prompt=%s completion=%s total=%s",
                request_time,
                usage.prompt_tokens,
                usage.completion_tokens,
                usage.total_tokens,
            )
        else:
            logger.info("[LLM] %.2fms", request_time)

        if not response.choices:
            logger.warning("[LLM] Provider returned no choices")
            return NO_REPLY

        reply = response.choices[0].message
        content = reply.content if reply.content is not None else NO_CONTENT
        return Message(role=reply.role, content=content)


@lru_cache(maxsize=1)
def get_llm_service() -> LLMService:
    """
    FastAPI dependency factory that returns a singleton LLMService instance.
    """
    return LLMService()
