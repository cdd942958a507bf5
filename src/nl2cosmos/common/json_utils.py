from __future__ import annotations

import json
import re
from typing import Any, Dict

from pydantic import JsonValue

StoreRecord = Dict[str, JsonValue]

# A language tag only counts as one when a newline follows it, or when it is a
# known query tag; otherwise "```SELECT ..." would lose its keyword.
_LEADING_FENCE = re.compile(
    r"^```(?:[A-Za-z0-9_+\-]*[ \t]*\r?\n|(?:sql|cosmosdb|cosmos)[ \t]+)?",
    re.IGNORECASE,
)
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```$")


def strip_code_fences(text: str) -> str:
    """
    Remove a leading markdown fence (with optional language tag) and a trailing fence.
    """
    text = text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def to_canonical_json(record: Any) -> str:
    """Renders a store record as indented JSON, keeping non-ASCII text readable."""
    return json.dumps(record, indent=2, ensure_ascii=False, default=str)
