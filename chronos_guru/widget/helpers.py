"""Helper functions for widget."""

from typing import Any, Dict, List, Optional

import gradio as gr
from loguru import logger

from chronos_guru.core.completion import CompletionClient
from chronos_guru.core.constants import SYSTEM_SPEAKER
from chronos_guru.core.models import Message, Progress
from chronos_guru.core.progress import FileProgressBackend, ProgressStore
from chronos_guru.core.session_manager import ChatSession
from chronos_guru.core.speech import CuePlayer, SpeechController
from chronos_guru.utils.murf import MurfClient
from chronos_guru.widget.constants import USER_FRIENDLY_EXC
from chronos_guru.widget.session_state import SessionState

# Shared collaborators for every browser session; set by build_widget.
_services: Dict[str, Any] = {}


def configure_services(
    completion: Optional[CompletionClient] = None,
    voice_client: Optional[MurfClient] = None,
    progress: Optional[ProgressStore] = None,
) -> None:
    """Set the clients and store used by sessions created from the widget."""
    _services["completion"] = completion or CompletionClient()
    _services["voice_client"] = voice_client or MurfClient()
    _services["progress"] = progress or ProgressStore(FileProgressBackend())


def progress_store() -> ProgressStore:
    """The shared progress store."""
    if "progress" not in _services:
        configure_services()
    return _services["progress"]


def cleanup(state: SessionState) -> None:
    """Clean up resources associated with a session."""
    logger.debug("Cleaning up session resources")
    if not state or "session" not in state:
        logger.debug("No 'session' in session state to clean up")
        return
    state["session"].stop_audio()
    logger.debug("Session cleanup complete.")


def spacer(h: int = 24) -> None:
    """Create a vertical spacer of given height."""
    gr.HTML(f"<div style='height:{h}px'></div>")


def create_session(state: SessionState, figure: str, language: str) -> ChatSession:
    """Create a new ChatSession, store it in ``state`` and return it."""
    if "completion" not in _services:
        configure_services()
    player = CuePlayer()
    speech = SpeechController(player, voice_client=_services["voice_client"])
    try:
        session = ChatSession.create(
            figure=figure,
            completion=_services["completion"],
            speech=speech,
            progress=_services["progress"],
            language=language,
            source="widget",
        )
    except ValueError as e:
        raise gr.Error(str(e))
    except Exception as e:
        logger.error(f"Error creating ChatSession: {e}", exc_info=True)
        raise gr.Error(USER_FRIENDLY_EXC)
    state["session"] = session
    state["player"] = player
    state["show_english"] = False
    state["quiz_index"] = 0
    return session


def require_session(state: SessionState) -> ChatSession:
    """Return the active session or fail the event."""
    if "session" not in state:
        logger.error("Handler called without an active session in state.")
        raise gr.Error(USER_FRIENDLY_EXC)
    return state["session"]


def format(message: Message, show_english: bool = False) -> Dict[str, str]:
    """Format a transcript message as a gradio ``messages`` chatbot entry."""
    if message.role == "user":
        return {"role": "user", "content": message.content}
    if message.speaker == SYSTEM_SPEAKER:
        return {"role": "assistant", "content": f"*{message.content}*"}
    content = message.content
    if message.speaker:
        content = f"**{message.speaker}**\n\n{content}"
    if show_english and message.english_translation:
        content += f"\n\n> 🇬🇧 {message.english_translation}"
    return {"role": "assistant", "content": content}


def chatbot_value(state: SessionState) -> List[Dict[str, str]]:
    """Render the whole transcript for the chatbot component."""
    session = require_session(state)
    show = bool(state.get("show_english"))
    return [format(m, show) for m in session.messages]


def cue_payload(state: SessionState) -> Dict[str, Any]:
    """Drain queued speech cues into the JSON payload the browser plays."""
    player = state.get("player")
    if player is None:
        return {"stop": False, "cues": [], "nonce": 0}
    stop = player.stop_requested
    cues = [c.to_dict() for c in player.drain()]
    state["cue_nonce"] = state.get("cue_nonce", 0) + 1
    return {"stop": stop, "cues": cues, "nonce": state["cue_nonce"]}


def progress_markdown(progress: Progress) -> str:
    """Points, badges and figures learned as markdown."""
    badges = " ".join(f"{b.icon} {b.name}" for b in progress.badges) or "None yet"
    learned = ", ".join(sorted(progress.figures)) or "None yet"
    return (
        f"**Points:** {progress.points}  \n"
        f"**Badges:** {badges}  \n"
        f"**Figures learned:** {learned}"
    )
