"""Printable HTML export of a learning summary."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import Optional

from loguru import logger

from chronos_guru.core.constants import OUTPUT_FPATH
from chronos_guru.core.models import Summary
from chronos_guru.utils.file import safe_filename, safe_timestamp, unique_fpath

SUMMARY_STYLES = """
  body{font-family:ui-sans-serif,system-ui,-apple-system,Segoe UI,Roboto,Helvetica,Arial;padding:24px;color:#111}
  h1{font-size:24px;margin:0 0 8px}
  h2{font-size:18px;margin:24px 0 8px}
  .muted{color:#555}
  ul{margin:0 0 16px 20px}
  li{margin:6px 0}
  table{border-collapse:collapse;width:100%;margin-top:8px}
  th,td{border:1px solid #ddd;padding:8px;text-align:left}
  th{background:#f6f6f6}
  .footer{margin-top:24px;font-size:12px;color:#777}
"""

SUMMARY_HTML = """<!doctype html><html><head><meta charset="utf-8"><title>{title}</title><style>{styles}</style></head>
<body>
  <h1>{figure}</h1>
  <div class="muted">Learning summary generated from your Chronos Guru conversation.</div>
  <h2>Important Points</h2>
  {points}
  <h2>Timeline</h2>
  {timeline}
  <div class="footer">Saved from Chronos Guru - {generated}</div>
  <script>window.onload = () => {{ window.print(); }};</script>
</body></html>
"""


def render_summary_html(
    figure: str, summary: Summary, generated_at: Optional[datetime] = None
) -> str:
    """Render the summary as a standalone printable HTML page."""
    if summary.points:
        points = (
            "<ul>"
            + "".join(f"<li>{escape(p)}</li>" for p in summary.points)
            + "</ul>"
        )
    else:
        points = '<p class="muted">No key points available.</p>'

    if summary.timeline:
        rows = "".join(
            f"<tr><td>{escape(t.date)}</td><td>{escape(t.event)}</td></tr>"
            for t in summary.timeline
        )
        timeline = (
            "<table><thead><tr><th>Date</th><th>Event</th></tr></thead>"
            f"<tbody>{rows}</tbody></table>"
        )
    else:
        timeline = '<p class="muted">No timeline items available.</p>'

    generated = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return SUMMARY_HTML.format(
        title=escape(f"Chronos Guru - {figure} Summary"),
        styles=SUMMARY_STYLES,
        figure=escape(figure),
        points=points,
        timeline=timeline,
        generated=generated,
    )


def save_summary_html(html: str, figure: str, out_dir: Path = OUTPUT_FPATH) -> Path:
    """Write the page to a unique path under ``out_dir`` and return it."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = unique_fpath(
        out_dir / f"{safe_filename(figure)}_summary_{safe_timestamp()}.html"
    )
    path.write_text(html, encoding="utf-8")
    logger.info(f"Summary exported to {path}")
    return path
