"""Helpers for add-member figure suggestions."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from loguru import logger
from pydantic import ConfigDict, Field

from chronos_guru.core.constants import (
    DEFAULT_SUGGESTIONS,
    MAX_SUGGESTIONS,
    SUGGESTIONS_CONFIG_FPATH,
)
from chronos_guru.utils.serde import SerdeMixin


class SuggestionConfig(SerdeMixin):
    """Themed lists of figures offered when adding a member."""

    model_config = ConfigDict(extra="forbid")

    name: str = "default-suggestions"
    categories: Dict[str, List[str]] = Field(default_factory=dict)

    def all_figures(self) -> List[str]:
        """Every suggested figure, categories flattened in file order."""
        return [fig for figs in self.categories.values() for fig in figs]


def load_suggestions(
    path: Union[str, Path] = SUGGESTIONS_CONFIG_FPATH,
) -> SuggestionConfig:
    """Load the suggestion config, falling back to the built-in lists.

    A file that exists but is malformed raises ValueError with a friendly
    message; a missing file is not an error.
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No suggestions config at {path}; using built-in lists.")
        return SuggestionConfig(categories=DEFAULT_SUGGESTIONS)
    logger.debug(f"Loading suggestions config from {path}")
    return SuggestionConfig.load_yaml(path)


def suggest_figures(
    current: Sequence[str],
    config: Optional[SuggestionConfig] = None,
    limit: int = MAX_SUGGESTIONS,
) -> List[str]:
    """Suggested figures not already in the conversation (case-insensitive)."""
    config = config or load_suggestions()
    taken = {c.lower() for c in current}
    return [f for f in config.all_figures() if f.lower() not in taken][:limit]
