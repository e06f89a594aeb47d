"""Quiz panel UI components."""

from typing import NamedTuple

import gradio as gr


class QuizUI(NamedTuple):
    """Named tuple for quiz UI components."""

    container: gr.Group
    question_md: gr.Markdown
    options_radio: gr.Radio
    next_btn: gr.Button
    result_md: gr.Markdown
    close_btn: gr.Button


def build_quiz() -> QuizUI:
    """Build the quiz panel, hidden until a quiz starts."""
    with gr.Group(visible=False) as group:
        question_md = gr.Markdown()
        options_radio = gr.Radio(choices=[], show_label=False, type="index")
        next_btn = gr.Button("Next", variant="primary")
        result_md = gr.Markdown(visible=False)
        close_btn = gr.Button("Back to chat", visible=False)

    return QuizUI(
        container=group,
        question_md=question_md,
        options_radio=options_radio,
        next_btn=next_btn,
        result_md=result_md,
        close_btn=close_btn,
    )
