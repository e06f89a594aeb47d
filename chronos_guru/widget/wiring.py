"""Wiring of event handlers to widget components."""

import gradio as gr

from chronos_guru.widget.constants import DICTATE_JS, PLAY_CUES_JS, RESET_CONFIRM_JS
from chronos_guru.widget.handlers import (
    on_add_figure,
    on_back,
    on_dictation,
    on_export,
    on_language_change,
    on_mic_start,
    on_quiz_close,
    on_quiz_next,
    on_quiz_select,
    on_quiz_start,
    on_read_aloud,
    on_reset_progress,
    on_send,
    on_start,
    on_stop_audio,
    on_toggle_english,
)
from chronos_guru.widget.ui.chat import ChatUI
from chronos_guru.widget.ui.landing import LandingUI
from chronos_guru.widget.ui.quiz import QuizUI


def wire_handlers(
    state: gr.State,
    landing: LandingUI,
    chat: ChatUI,
    quiz: QuizUI,
) -> None:
    """Wire event handlers to widget components."""
    # Cue playback happens entirely in the browser
    chat.cues.change(fn=None, inputs=[chat.cues], outputs=None, js=PLAY_CUES_JS)

    # Landing page
    for trigger in (landing.start_btn.click, landing.figure_box.submit):
        trigger(
            fn=on_start,
            inputs=[state, landing.figure_box, landing.language_dropdown],
            outputs=[
                state,
                landing.container,
                chat.container,
                chat.chatbot,
                chat.language_dropdown,
                chat.figure_dropdown,
            ],
        )

    # js confirm throws on cancel, which stops the event before the handler
    landing.reset_btn.click(
        fn=on_reset_progress,
        inputs=[],
        outputs=[landing.progress_md],
        js=RESET_CONFIRM_JS,
    )

    # Conversation
    for trigger in (chat.send_btn.click, chat.textbox.submit):
        trigger(
            fn=on_send,
            inputs=[state, chat.textbox],
            outputs=[state, chat.chatbot, chat.textbox, chat.cues],
            concurrency_limit=1,
            show_progress="minimal",
        )

    chat.add_btn.click(
        fn=on_add_figure,
        inputs=[state, chat.figure_dropdown],
        outputs=[state, chat.chatbot, chat.figure_dropdown],
    )
    chat.language_dropdown.input(
        fn=on_language_change,
        inputs=[state, chat.language_dropdown],
        outputs=[state],
    )
    chat.chatbot.select(
        fn=on_read_aloud,
        inputs=[state],
        outputs=[state, chat.cues],
    )
    chat.stop_btn.click(
        fn=on_stop_audio,
        inputs=[state],
        outputs=[state, chat.cues],
    )
    chat.english_toggle.change(
        fn=on_toggle_english,
        inputs=[state, chat.english_toggle],
        outputs=[state, chat.chatbot],
    )
    chat.export_btn.click(
        fn=on_export,
        inputs=[state],
        outputs=[chat.export_file],
    )
    chat.mic_btn.click(
        fn=on_mic_start,
        inputs=[state],
        outputs=[state],
    ).then(fn=None, inputs=None, outputs=None, js=DICTATE_JS)
    chat.dictation_events.input(
        fn=on_dictation,
        inputs=[state, chat.dictation_events],
        outputs=[chat.textbox],
    )
    chat.back_btn.click(
        fn=on_back,
        inputs=[state],
        outputs=[
            state,
            landing.container,
            chat.container,
            quiz.container,
            landing.progress_md,
            chat.cues,
        ],
    )

    # Quiz panel
    chat.quiz_btn.click(
        fn=on_quiz_start,
        inputs=[state],
        outputs=[
            state,
            chat.container,
            quiz.container,
            quiz.question_md,
            quiz.options_radio,
            quiz.next_btn,
            quiz.result_md,
            quiz.close_btn,
        ],
    )
    quiz.options_radio.input(
        fn=on_quiz_select,
        inputs=[state, quiz.options_radio],
        outputs=[state],
    )
    quiz.next_btn.click(
        fn=on_quiz_next,
        inputs=[state],
        outputs=[
            state,
            quiz.question_md,
            quiz.options_radio,
            quiz.next_btn,
            quiz.result_md,
            quiz.close_btn,
            chat.chatbot,
        ],
    )
    quiz.close_btn.click(
        fn=on_quiz_close,
        inputs=[state],
        outputs=[state, chat.container, quiz.container],
    )
