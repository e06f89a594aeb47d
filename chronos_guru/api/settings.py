"""Runtime configuration for the API.

Uses Pydantic BaseSettings to read environment variables with the
`CHRONOS_API_` prefix.

Example:
    export CHRONOS_API_CORS_ALLOW_ALL=false
    export CHRONOS_API_PROGRESS_BACKEND=mongo
"""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

from chronos_guru.core.constants import DEFAULT_MODEL, PROGRESS_FPATH


class Settings(BaseSettings):
    """Application settings read from environment variables.

    Attributes:
        cors_allow_all (bool): Whether to allow all CORS origins. Useful in dev.
        model (str): Completion model name.
        progress_backend (str): "file" for a local JSON document, "mongo"
            for the MONGO_URI database.
        progress_path (Path): Location of the JSON document for the file backend.
    """

    cors_allow_all: bool = True
    model: str = DEFAULT_MODEL
    progress_backend: Literal["file", "mongo"] = "file"
    progress_path: Path = PROGRESS_FPATH

    class Config:
        """Pydantic config for environment variable prefix."""

        env_prefix = "CHRONOS_API_"


settings = Settings()
