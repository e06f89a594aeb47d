"""Dependency utilities for route handlers.

Provides reusable dependency functions for resolving shared services
(the completion client, the voice client, the progress store) and for
looking up a ChatSession by ID.
"""

from typing import Optional

from fastapi import Depends, HTTPException

from chronos_guru.api.services.registry import SessionRegistry, get_registry
from chronos_guru.api.settings import settings
from chronos_guru.core.completion import CompletionClient
from chronos_guru.core.progress import (
    FileProgressBackend,
    MongoProgressBackend,
    ProgressStore,
)
from chronos_guru.core.session_manager import ChatSession
from chronos_guru.utils.murf import MurfClient

_completion: Optional[CompletionClient] = None
_voice_client: Optional[MurfClient] = None
_progress: Optional[ProgressStore] = None


def get_completion() -> CompletionClient:
    """Shared completion client, built on first use."""
    global _completion
    if _completion is None:
        _completion = CompletionClient(model=settings.model)
    return _completion


def get_voice_client() -> MurfClient:
    """Shared hosted voice client. It may be unconfigured."""
    global _voice_client
    if _voice_client is None:
        _voice_client = MurfClient()
    return _voice_client


def get_progress_store() -> ProgressStore:
    """Shared progress store on the configured backend."""
    global _progress
    if _progress is None:
        if settings.progress_backend == "mongo":
            backend = MongoProgressBackend()
        else:
            backend = FileProgressBackend(settings.progress_path)
        _progress = ProgressStore(backend)
    return _progress


def get_session(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> ChatSession:
    """Resolve a ChatSession from the registry.

    Args:
        session_id (str): Identifier of a session in the registry.
        registry (SessionRegistry): The in-memory registry (injected).

    Returns:
        ChatSession: The session instance.

    Raises:
        HTTPException: If the session ID is not found in the registry.
    """
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session
