"""App state definition for the Gradio UI."""

from typing import TypedDict

from chronos_guru.core.session_manager import ChatSession
from chronos_guru.core.speech import CuePlayer


class SessionState(TypedDict, total=False):
    """Custom state for the Gradio app."""

    session: ChatSession
    player: CuePlayer

    show_english: bool
    quiz_index: int  # question currently shown in the quiz panel
    cue_nonce: int  # bumps so identical cue payloads still trigger playback
