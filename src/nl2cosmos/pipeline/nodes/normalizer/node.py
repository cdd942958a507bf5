from __future__ import annotations

import re

from nl2cosmos.common.errors import QuerySyntaxError
from nl2cosmos.common.json_utils import strip_code_fences
from nl2cosmos.common.logger import get_logger

logger = get_logger("query_normalizer")

_SELECT_PREFIX = re.compile(r"^SELECT\b", re.IGNORECASE)

# "SELECT c.*" in the outer query or any subquery, also after DISTINCT / TOP n / VALUE modifiers.
_ALIASED_WILDCARD = re.compile(
    r"(?<![\w.])(SELECT\s+(?:(?:DISTINCT|VALUE)\s+|TOP\s+\d+\s+)*)[A-Za-z_][A-Za-z0-9_]*\s*\.\s*\*",
    re.IGNORECASE,
)


def normalize(raw_text: str) -> str:
    """Cleans raw completion output into an executable SELECT query.

    Strips whitespace and markdown fences, requires a leading SELECT, and
    rewrites every aliased wildcard projection, subqueries included, to the
    bare ``*`` form the Cosmos DB dialect accepts. Applying it to its own output is a no-op.

    Args:
        raw_text (str): The completion service output.

    Returns:
        str: The normalized query.

    Raises:
        QuerySyntaxError: If the cleaned text does not begin with SELECT.
    """
    sql = strip_code_fences(raw_text or "")

    if not _SELECT_PREFIX.match(sql):
        preview = sql[:80] if sql else "<empty>"
        raise QuerySyntaxError(f"Generated query must be a SELECT statement, got: {preview}")

    fixed = _ALIASED_WILDCARD.sub(r"\1*", sql)
    if fixed != sql:
        logger.warning("Fixed Cosmos DB syntax: replaced aliased wildcard projection with 'SELECT *'")
    return fixed
