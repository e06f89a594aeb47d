"""Landing page UI components."""

from typing import NamedTuple

import gradio as gr

from chronos_guru.core.constants import DEFAULT_LANGUAGE
from chronos_guru.widget.constants import LANDING_MD, LANGUAGE_CHOICES
from chronos_guru.widget.helpers import spacer


class LandingUI(NamedTuple):
    """Landing page UI components."""

    container: gr.Group
    figure_box: gr.Textbox
    language_dropdown: gr.Dropdown
    start_btn: gr.Button
    progress_md: gr.Markdown
    reset_btn: gr.Button


def build_landing(initial_progress: str = "") -> LandingUI:
    """Build the landing page UI components."""
    with gr.Group() as group:
        spacer(12)
        gr.Markdown(LANDING_MD)

        with gr.Row():
            with gr.Column(scale=3):
                figure_box = gr.Textbox(
                    show_label=False,
                    placeholder="e.g. Marie Curie, Julius Caesar, Ada Lovelace",
                    lines=1,
                    autofocus=True,
                )
            with gr.Column(scale=1, min_width=160):
                language_dropdown = gr.Dropdown(
                    choices=LANGUAGE_CHOICES,
                    value=DEFAULT_LANGUAGE,
                    label="Language",
                )
            with gr.Column(scale=0, min_width=160):
                start_btn = gr.Button("Start", variant="primary")

        spacer(8)
        gr.Markdown("### Your journey")
        progress_md = gr.Markdown(initial_progress)
        with gr.Row():
            with gr.Column(scale=1):
                ...
            with gr.Column(scale=0, min_width=220):
                reset_btn = gr.Button("Reset journey", variant="stop", size="sm")
            with gr.Column(scale=1):
                ...
        spacer(12)

    return LandingUI(
        container=group,
        figure_box=figure_box,
        language_dropdown=language_dropdown,
        start_btn=start_btn,
        progress_md=progress_md,
        reset_btn=reset_btn,
    )
