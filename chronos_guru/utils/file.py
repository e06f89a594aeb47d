"""File utility functions."""

import re
from datetime import datetime
from pathlib import Path

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_timestamp() -> str:
    """Returns a timestamp string safe for file names."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def safe_filename(name: str, default: str = "figure") -> str:
    """Reduce free text (e.g. a figure's name) to a file-name friendly stem."""
    stem = _UNSAFE_CHARS_RE.sub("_", name.strip()).strip("._")
    return stem or default


def unique_fpath(path: Path) -> Path:
    """Returns an incremented unique file path to avoid overwriting existing files."""
    path = Path(path)
    if not path.exists():
        return path

    parent, stem, suffix = path.parent, path.stem, path.suffix
    counter = 1
    while (candidate := parent / f"{stem}_{counter}{suffix}").exists():
        counter += 1
    return candidate
