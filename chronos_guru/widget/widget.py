"""Gradio widget construction."""

from __future__ import annotations

from typing import Optional

import gradio as gr
from loguru import logger

from chronos_guru.core.completion import CompletionClient
from chronos_guru.core.progress import ProgressStore
from chronos_guru.utils.murf import MurfClient
from chronos_guru.widget.constants import MAX_TTL_SECONDS
from chronos_guru.widget.handlers import load_progress
from chronos_guru.widget.helpers import cleanup, configure_services
from chronos_guru.widget.session_state import SessionState
from chronos_guru.widget.ui.chat import build_chat
from chronos_guru.widget.ui.header import build_header
from chronos_guru.widget.ui.landing import build_landing
from chronos_guru.widget.ui.quiz import build_quiz
from chronos_guru.widget.wiring import wire_handlers


def build_widget(
    banner: str | None = None,
    completion: Optional[CompletionClient] = None,
    voice_client: Optional[MurfClient] = None,
    progress: Optional[ProgressStore] = None,
) -> gr.Blocks:
    """Build the Gradio UI for conversations with historical figures."""
    logger.info("Building Gradio widget")
    configure_services(completion, voice_client, progress)

    widget = gr.Blocks(
        title="Chronos Guru",
        theme=gr.themes.Default(primary_hue="amber"),
    )
    with widget:
        state = gr.State(
            value=SessionState(show_english=False, quiz_index=0, cue_nonce=0),
            time_to_live=MAX_TTL_SECONDS,
            delete_callback=cleanup,  # function to call when state is deleted
        )

        build_header(banner)
        landing = build_landing()
        chat = build_chat()
        quiz = build_quiz()

        wire_handlers(state, landing, chat, quiz)

        # refresh the journey panel on every page load
        widget.load(fn=load_progress, inputs=None, outputs=[landing.progress_md])

        def on_unload(req: gr.Request) -> None:
            """Log client disconnects; state cleanup runs via delete_callback."""
            logger.debug(f"Client disconnected with session hash: {req.session_hash}")

        # unload runs when the session ends (tab close, refresh, hard nav away)
        widget.unload(on_unload)

    return widget
