"""Completion client for the hosted text-generation service.

One request per call, no retries. Every failure surfaces as a single
``CompletionError`` so callers have exactly one thing to fall back on.
"""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from chronos_guru.core.constants import (
    COMPLETION_PROFILES,
    DEFAULT_MODEL,
    LARGE_PROMPT_WARN_BYTES,
    LONG_COMPLETION_WARN_SECONDS,
)
from chronos_guru.core.models import Message
from chronos_guru.utils.chat import ChatGroqEndpoint
from chronos_guru.utils.misc import byte_size_json, preview

ModelFactory = Callable[[float, int], BaseChatModel]
HistoryItem = Union[Message, Mapping[str, Any]]


class CompletionError(RuntimeError):
    """The completion service could not produce a reply."""


class ServiceNotConfiguredError(CompletionError):
    """A hosted service credential is missing."""


class CompletionClient:
    """Send persona prompts and histories to the completion service.

    Chat models are built lazily, one per sampling profile (see
    ``COMPLETION_PROFILES``), through ``model_factory``. The default factory
    targets Groq and requires ``GROQ_API_KEY``.
    """

    def __init__(
        self,
        model_factory: Optional[ModelFactory] = None,
        model: str = DEFAULT_MODEL,
    ) -> None:
        """Initialize the client."""
        self.model = model
        self._factory = model_factory or self._groq_factory
        self._models: Dict[str, BaseChatModel] = {}

    def _groq_factory(self, temperature: float, max_tokens: int) -> BaseChatModel:
        if not os.getenv("GROQ_API_KEY"):
            raise ServiceNotConfiguredError("GROQ_API_KEY is not set")
        return ChatGroqEndpoint(
            model=self.model, temperature=temperature, max_tokens=max_tokens
        )

    def model_for(self, profile: str) -> BaseChatModel:
        """Return (and cache) the chat model for a sampling profile."""
        if profile not in COMPLETION_PROFILES:
            raise ValueError(f"Unknown completion profile: {profile}")
        if profile not in self._models:
            temperature, max_tokens = COMPLETION_PROFILES[profile]
            logger.debug(
                f"Building chat model for profile '{profile}' "
                f"(temperature={temperature}, max_tokens={max_tokens})"
            )
            self._models[profile] = self._factory(temperature, max_tokens)
        return self._models[profile]

    @staticmethod
    def to_lc_messages(
        history: Sequence[HistoryItem], system: Optional[str] = None
    ) -> list[BaseMessage]:
        """Convert role/content history into LangChain messages."""
        out: list[BaseMessage] = []
        if system:
            out.append(SystemMessage(content=system))
        for item in history:
            if isinstance(item, Message):
                role, content = item.role, item.content
            else:
                role, content = str(item.get("role", "user")), str(item["content"])
            if role == "assistant":
                out.append(AIMessage(content=content))
            else:
                out.append(HumanMessage(content=content))
        return out

    def complete(
        self,
        history: Sequence[HistoryItem],
        system: Optional[str] = None,
        profile: str = "chat",
    ) -> str:
        """Return the reply text for ``history`` under an optional system prompt.

        Raises:
            CompletionError: On any failure, including missing credentials.
        """
        llm = self.model_for(profile)
        msgs = self.to_lc_messages(history, system)

        size = byte_size_json([m.content for m in msgs])
        if size > LARGE_PROMPT_WARN_BYTES:
            logger.warning(f"Prompt size large: {size / 1024:.1f} KB ({profile})")

        start = time.perf_counter()
        try:
            response = llm.invoke(msgs)
        except Exception as ex:
            logger.error(f"Completion request failed ({profile}): {ex}")
            raise CompletionError(f"Completion request failed: {ex}") from ex
        elapsed = time.perf_counter() - start
        if elapsed > LONG_COMPLETION_WARN_SECONDS:
            logger.warning(f"Completion ({profile}) took {elapsed:.3f}s")
        else:
            logger.debug(f"Completion ({profile}) took {elapsed:.3f}s")

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part if isinstance(part, str) else str(part.get("text", ""))
                for part in content
            )
        text = str(content)
        logger.debug(f"Completion ({profile}) reply: {preview(text)}")
        return text

    def ask(self, prompt: str, profile: str) -> str:
        """Send a single user prompt with no system instruction."""
        return self.complete([{"role": "user", "content": prompt}], profile=profile)
