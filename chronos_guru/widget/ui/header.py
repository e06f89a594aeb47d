"""Header UI for the Chronos Guru widget."""

from typing import NamedTuple

import gradio as gr


class HeaderUI(NamedTuple):
    """Named tuple for header UI components."""

    pass  # no fields


def build_header(banner: str | None = None) -> HeaderUI:
    """Build the header UI component."""
    if banner:
        gr.HTML(f'<div style="text-align:center" id="banner">{banner} </div>')
    gr.Markdown(
        """
        <div style='text-align:center'>
          <h1 style='margin-bottom:0'>Chronos Guru</h1>
          <p style='margin-top:6px;color:#666'>Conversations across time</p>
        </div>
        """
    )
    return HeaderUI()
