"""Simple in-memory registry for ChatSession instances.

This module encapsulates a minimal service layer for storing and
retrieving live `ChatSession` objects keyed by a generated ID.

Notes/Assumptions:
    - This is *not* persistent. A process restart clears the registry.
    - Not multiprocess-safe. Replace with a DB or shared cache if needed.
    - IDs are random UUID4 hex strings.
    - Each session gets its own `CuePlayer` so responses carry only the
      cues produced for that session.
"""

from __future__ import annotations

from typing import Dict, Optional
from uuid import uuid4

from chronos_guru.core.completion import CompletionClient
from chronos_guru.core.progress import ProgressStore
from chronos_guru.core.session_manager import ChatSession
from chronos_guru.core.speech import CuePlayer, SpeechController
from chronos_guru.utils.murf import MurfClient


class SessionRegistry:
    """In-memory registry of ChatSession instances.

    Attributes:
        _store (Dict[str, ChatSession]): Internal map of id -> session.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._store: Dict[str, ChatSession] = {}

    def create(
        self,
        figure: str,
        language: str,
        completion: CompletionClient,
        voice_client: Optional[MurfClient],
        progress: ProgressStore,
    ) -> tuple[str, ChatSession]:
        """Create and store a new ChatSession.

        Returns:
            tuple[str, ChatSession]: The generated session ID and the instance.
        """
        speech = SpeechController(CuePlayer(), voice_client=voice_client)
        session = ChatSession.create(
            figure=figure,
            completion=completion,
            speech=speech,
            progress=progress,
            language=language,
            source="api",
        )
        session_id = uuid4().hex
        self._store[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> Optional[ChatSession]:
        """Retrieve a ChatSession by ID, or None."""
        return self._store.get(session_id)

    def remove(self, session_id: str) -> None:
        """Remove a ChatSession by ID."""
        self._store.pop(session_id, None)


_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    """FastAPI dependency provider for the global registry.

    Returns:
        SessionRegistry: The singleton registry instance.
    """
    return _registry
