"""ChatX classes that inherit from ChatOpenAI.

Groq serves an OpenAI compatible endpoint, so the stock ChatOpenAI client
only needs a different base URL and credential source.
"""

import os
from typing import Any

from dotenv import load_dotenv
from langchain_core.utils.utils import secret_from_env
from langchain_openai import ChatOpenAI
from loguru import logger
from pydantic import Field, SecretStr

from chronos_guru.core.constants import DEFAULT_MODEL, GROQ_BASE_URL

load_dotenv()  # Load environment variables from a .env file if present


class ChatGroqEndpoint(ChatOpenAI):
    """A wrapper around ChatOpenAI for Groq's OpenAI compatible API.

    Note: role conventions are the OpenAI ones
     - role = "system" -> persona and rules
     - role = "user" -> from the learner
     - role = "assistant" -> from the simulated figure
    """

    # SecretStr keeps the key out of reprs and logs
    openai_api_key: SecretStr | None = Field(
        alias="api_key",
        default_factory=secret_from_env("GROQ_API_KEY", default=None),
    )

    @property
    def lc_secrets(self) -> dict[str, str]:
        """Map the key field to the GROQ_API_KEY environment variable."""
        return {"openai_api_key": "GROQ_API_KEY"}

    def __init__(self, *, openai_api_key: str | None = None, **kwargs: Any) -> None:
        """Initialize the ChatGroqEndpoint model."""
        key = openai_api_key or os.getenv("GROQ_API_KEY")
        logger.debug("Initializing ChatGroqEndpoint with parameters: {}", kwargs)
        if "model" not in kwargs:
            kwargs["model"] = DEFAULT_MODEL
            logger.warning(f"No model specified, defaulting to {kwargs['model']}")
        super().__init__(
            base_url=GROQ_BASE_URL,
            api_key=SecretStr(key) if key else None,
            **kwargs,
        )
