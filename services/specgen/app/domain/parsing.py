"""Best-effort extraction of a JSON object from free-text completions."""
from __future__ import annotations

import json
import re
from typing import Any

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_PREVIEW_CHARS = 500


class JsonExtractionError(ValueError):
    """Raised when a completion does not contain a parseable top-level JSON object."""

    def __init__(self, message: str, text: str, preview_chars: int = _PREVIEW_CHARS) -> None:
        super().__init__(message)
        self.preview = text[:preview_chars]


def parse_first_json_object(text: str, preview_chars: int = _PREVIEW_CHARS) -> dict[str, Any]:
    """Return the object spanning the first ``{`` to the last ``}`` in ``text``.

    Surrounding prose and markdown fences are ignored.
    """
    match = _OBJECT_PATTERN.search(text or "")
    if match is None:
        raise JsonExtractionError("no JSON object found in completion", text or "", preview_chars)
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise JsonExtractionError(f"invalid JSON in completion: {exc}", text, preview_chars) from exc
    if not isinstance(parsed, dict):
        raise JsonExtractionError("completion JSON is not an object", text, preview_chars)
    return parsed


__all__ = ["JsonExtractionError", "parse_first_json_object"]
