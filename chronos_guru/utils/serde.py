"""Serialization / deserialization (serde) mixin for Pydantic models.

Example Usage:
progress = Progress(points=20)

d = progress.to_dict()
js = progress.to_json()

cfg = SuggestionConfig.load_yaml("configs/suggestions.yml")

"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound="BaseModel")


class SerdeMixin(BaseModel):
    """Mixin adding serialization / deserialization methods to Pydantic models."""

    # ---------- exports ----------
    def to_dict(self, **dump_kwargs: Any) -> dict[str, Any]:
        """Convert model to a JSON-compatible dict (camelCase aliases)."""
        dump_kwargs.setdefault("by_alias", True)
        dump_kwargs.setdefault("mode", "json")
        return self.model_dump(**dump_kwargs)

    def to_json(self, **dump_kwargs: Any) -> str:
        """Convert model to JSON string (camelCase aliases)."""
        dump_kwargs.setdefault("by_alias", True)
        return self.model_dump_json(**dump_kwargs)

    # ---------- loaders ----------
    @classmethod
    def from_yaml(cls: type[T], source: Union[str, Path], **validate_kwargs: Any) -> T:
        """Instantiate model from a YAML string or a file path with friendly errors."""
        if isinstance(source, Path) or (
            isinstance(source, str) and "\n" not in source and Path(source).exists()
        ):
            text = Path(source).read_text(encoding="utf-8")
        else:
            text = str(source)

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(SerdeMixin._format_yaml_syntax_error(e, text)) from e

        try:
            return cls.model_validate(data, **validate_kwargs)
        except ValidationError as e:
            raise ValueError(SerdeMixin._format_validation_error(e)) from e

    # ---------- convenience load ----------
    @classmethod
    def load_yaml(cls: type[T], path: Union[str, Path], **validate_kwargs: Any) -> T:
        """Load model from a YAML file."""
        return cls.from_yaml(Path(path), **validate_kwargs)  # type: ignore

    # ---------- friendly error messages ----------
    @staticmethod
    def _format_yaml_syntax_error(e: yaml.YAMLError, text: str) -> str:
        header = "Your YAML isn’t valid."
        problem_mark = getattr(e, "problem_mark", None)
        if problem_mark is None:
            return f"{header} {e}"
        line = problem_mark.line + 1
        col = problem_mark.column
        lines = text.splitlines()
        offending = lines[line - 1] if 0 < line <= len(lines) else ""
        caret = " " * col + "^"
        return (
            f"{header}\nLine {line}, column {col + 1}.\n\n"
            f"  {offending}\n  {caret}\n\nFix the YAML formatting at the ^ marker."
        )

    @staticmethod
    def _format_validation_error(e: ValidationError) -> str:
        """Turn Pydantic errors into plain-English guidance."""
        lines = ["Your YAML loaded, but it doesn’t match the expected structure:"]
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            typ = err.get("type", "")
            msg = err.get("msg", "") or "Invalid value."
            if typ == "missing":
                lines.append(f"• Missing required field: `{loc}`.")
            elif typ == "extra_forbidden":
                lines.append(f"• Unknown field at `{loc}`. Remove or rename it.")
            else:
                lines.append(f"• {msg[0].upper() + msg[1:]} (at `{loc}`).")
        lines.append("\nTip: keys are case-sensitive; match the types shown.")
        return "\n".join(lines)
