"""Progress store: points, badges and per-figure quiz history.

The record lives in one persisted document that is read whole, merged in
memory and overwritten whole. Writers are not coordinated, so concurrent
writers race and the last write wins.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from loguru import logger
from pydantic import ValidationError

from chronos_guru.core.constants import (
    PERFECT_BONUS,
    POINTS_PER_CORRECT,
    PROGRESS_FPATH,
    PROGRESS_KEY,
)
from chronos_guru.core.models import Badge, FigureRecord, Progress, QuizResult
from chronos_guru.helpers import database_helpers as dbh


class ProgressBackend(Protocol):
    """Whole-document storage for the progress record."""

    def read(self) -> Optional[str]:
        """Return the stored text, or None when nothing is stored."""
        ...

    def write(self, text: str) -> None:
        """Overwrite the stored text."""
        ...

    def delete(self) -> None:
        """Remove the stored document."""
        ...


class MongoProgressBackend:
    """Progress document kept in MongoDB under a fixed key."""

    def __init__(self, key: str = PROGRESS_KEY) -> None:
        """Initialize the backend."""
        self.key = key

    def read(self) -> Optional[str]:
        """Return the stored JSON text."""
        return dbh.get_document(self.key)

    def write(self, text: str) -> None:
        """Overwrite the stored JSON text."""
        dbh.put_document(self.key, text)

    def delete(self) -> None:
        """Delete the stored document."""
        dbh.delete_document(self.key)


class FileProgressBackend:
    """Progress document kept in a local JSON file."""

    def __init__(self, path: Union[str, Path] = PROGRESS_FPATH) -> None:
        """Initialize the backend."""
        self.path = Path(path)

    def read(self) -> Optional[str]:
        """Return the file contents, or None if the file does not exist."""
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        """Overwrite the file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")

    def delete(self) -> None:
        """Remove the file if present."""
        self.path.unlink(missing_ok=True)


def parse_progress(raw: Optional[str]) -> Progress:
    """Parse a stored document; anything unreadable yields the zero record.

    Individual badges or figure entries that do not validate are dropped
    rather than discarding the whole record.
    """
    if not raw:
        return Progress()
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored progress is not valid JSON; starting from zero")
        return Progress()
    if not isinstance(data, dict):
        logger.warning("Stored progress is not an object; starting from zero")
        return Progress()

    points = data.get("points")
    progress = Progress(points=points if isinstance(points, int) and points >= 0 else 0)

    badges = data.get("badges")
    if isinstance(badges, list):
        for b in badges:
            try:
                badge = Badge.model_validate(b)
            except ValidationError:
                logger.debug(f"Dropping malformed stored badge: {b!r}")
                continue
            if all(existing.id != badge.id for existing in progress.badges):
                progress.badges.append(badge)

    figures = data.get("figures")
    if isinstance(figures, dict):
        for name, record in figures.items():
            try:
                progress.figures[str(name)] = FigureRecord.model_validate(record)
            except ValidationError:
                logger.debug(f"Dropping malformed stored record for {name!r}")
    return progress


def merge_result(progress: Progress, figure: str, result: QuizResult) -> Progress:
    """Return a new record with one quiz result applied.

    Points grow by 10 per correct answer plus 10 for a perfect score; badges
    are unioned by id; the figure's quiz count grows and ``perfect`` latches.
    """
    merged = progress.model_copy(deep=True)
    merged.points += result.score * POINTS_PER_CORRECT
    if result.score == result.total:
        merged.points += PERFECT_BONUS

    have = {b.id for b in merged.badges}
    for badge in result.badges:
        if badge.id not in have:
            merged.badges.append(badge.model_copy())
            have.add(badge.id)

    record = merged.figures.setdefault(figure, FigureRecord())
    record.quizzes += 1
    record.perfect = record.perfect or result.score == result.total
    return merged


class ProgressStore:
    """Read / merge / write access to the progress record with one cache."""

    def __init__(self, backend: ProgressBackend) -> None:
        """Initialize the store."""
        self.backend = backend
        self._cache: Optional[Progress] = None

    def load(self) -> Progress:
        """Return the current record (a copy; mutate through the store)."""
        if self._cache is None:
            try:
                raw = self.backend.read()
            except Exception:
                logger.exception("Failed to read stored progress; starting from zero")
                raw = None
            self._cache = parse_progress(raw)
        return self._cache.model_copy(deep=True)

    def record_quiz(self, figure: str, result: QuizResult) -> Progress:
        """Apply a completed quiz and overwrite the stored document.

        A failed write is logged; the merged record stays cached so this
        process keeps the result and the next successful write persists it.
        """
        updated = merge_result(self.load(), figure, result)
        self._cache = updated
        try:
            self.backend.write(updated.to_json())
        except Exception:
            logger.exception(f"Failed to save progress for {figure}; keeping it in memory")
        logger.info(f"Progress updated for {figure}: now {updated.points} points")
        return updated.model_copy(deep=True)

    def reset(self) -> Progress:
        """Delete the stored document; progress returns to zero."""
        self.backend.delete()
        self._cache = Progress()
        logger.info("Progress reset")
        return Progress()
