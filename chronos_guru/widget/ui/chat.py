"""Chat UI components."""

from typing import NamedTuple

import gradio as gr

from chronos_guru.core.constants import DEFAULT_LANGUAGE
from chronos_guru.widget.constants import LANGUAGE_CHOICES, MAX_INPUT_LENGTH


class ChatUI(NamedTuple):
    """Named tuple for chat UI components."""

    container: gr.Group
    chatbot: gr.Chatbot
    textbox: gr.Textbox
    send_btn: gr.Button
    mic_btn: gr.Button
    dictation_events: gr.Textbox
    language_dropdown: gr.Dropdown
    figure_dropdown: gr.Dropdown
    add_btn: gr.Button
    stop_btn: gr.Button
    english_toggle: gr.Checkbox
    export_btn: gr.Button
    export_file: gr.File
    quiz_btn: gr.Button
    back_btn: gr.Button
    cues: gr.JSON


def build_chat() -> ChatUI:
    """Build chat UI components."""
    with gr.Group(visible=False) as group:
        with gr.Row():
            language_dropdown = gr.Dropdown(
                choices=LANGUAGE_CHOICES,
                value=DEFAULT_LANGUAGE,
                label="Language",
                scale=1,
            )
            figure_dropdown = gr.Dropdown(
                choices=[],
                label="Invite another figure",
                allow_custom_value=True,
                scale=2,
            )
            add_btn = gr.Button("Add member", scale=0, min_width=120)

        chatbot = gr.Chatbot(
            type="messages",
            show_label=False,
            show_copy_all_button=True,
            render_markdown=True,
            autoscroll=True,
            height=480,
        )
        gr.Markdown(
            "<small style='color:#666'>Click a message to hear it read aloud.</small>"
        )

        with gr.Row():
            textbox = gr.Textbox(
                show_label=False,
                placeholder="Ask something...",
                lines=1,
                max_length=MAX_INPUT_LENGTH,
                scale=5,
            )
            mic_btn = gr.Button("🎤", scale=0, min_width=60)
            send_btn = gr.Button("Send", variant="primary", scale=0, min_width=100)

        with gr.Row():
            stop_btn = gr.Button("Stop audio", size="sm")
            english_toggle = gr.Checkbox(label="Show English transcript", value=False)
            export_btn = gr.Button("Export summary", size="sm")
            quiz_btn = gr.Button("Take quiz", variant="secondary", size="sm")
            back_btn = gr.Button("New conversation", size="sm")

        export_file = gr.File(label="Learning summary", visible=False)
        # bridges between the browser and the server
        dictation_events = gr.Textbox(visible=False, elem_id="dictation-events")
        cues = gr.JSON(visible=False)

    return ChatUI(
        container=group,
        chatbot=chatbot,
        textbox=textbox,
        send_btn=send_btn,
        mic_btn=mic_btn,
        dictation_events=dictation_events,
        language_dropdown=language_dropdown,
        figure_dropdown=figure_dropdown,
        add_btn=add_btn,
        stop_btn=stop_btn,
        english_toggle=english_toggle,
        export_btn=export_btn,
        export_file=export_file,
        quiz_btn=quiz_btn,
        back_btn=back_btn,
        cues=cues,
    )
