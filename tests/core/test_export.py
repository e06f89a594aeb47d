"""Tests for the printable summary export."""

from datetime import datetime
from pathlib import Path

import pytest

from chronos_guru.core.export import render_summary_html, save_summary_html
from chronos_guru.core.models import Summary, TimelineItem


@pytest.mark.unit
def test_render_lists_points_and_timeline() -> None:
    """Points become a list and the timeline a date/event table."""
    summary = Summary(
        points=["Invented the calculus", "Wrote <Principia>"],
        timeline=[TimelineItem(date="1687", event="Principia published")],
    )
    html = render_summary_html("Isaac Newton", summary, datetime(2024, 1, 2, 3, 4, 5))

    assert "<h1>Isaac Newton</h1>" in html
    assert "<li>Invented the calculus</li>" in html
    assert "&lt;Principia&gt;" in html
    assert "<tr><td>1687</td><td>Principia published</td></tr>" in html
    assert "2024-01-02 03:04:05" in html
    assert "window.print()" in html


@pytest.mark.unit
def test_render_empty_summary_has_placeholders() -> None:
    """Empty sections say so instead of rendering empty markup."""
    html = render_summary_html("Plato", Summary())
    assert "No key points available." in html
    assert "No timeline items available." in html


@pytest.mark.unit
def test_save_never_overwrites(tmp_path: Path) -> None:
    """Saved pages get unique, file-safe names."""
    first = save_summary_html("<html/>", "Leonardo da Vinci", tmp_path)
    second = save_summary_html("<html/>", "Leonardo da Vinci", tmp_path)

    assert first != second
    assert first.name.startswith("Leonardo_da_Vinci_summary_")
    assert first.suffix == ".html"
    assert second.read_text(encoding="utf-8") == "<html/>"
