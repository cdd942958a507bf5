"""Programmatic check that a generated query is scoped to the requested partition."""
from __future__ import annotations

import re
from typing import List, Literal, NamedTuple, Optional, Tuple

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import SqlglotError
from pydantic import BaseModel, Field

from nl2cosmos.common.errors import ErrorCode, QueryValidationError
from nl2cosmos.common.logger import get_logger
from nl2cosmos.common.settings import PartitionFilterPolicy

logger = get_logger("partition_filter")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_BRACKET_ACCESS = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)\s*\[\s*[\"']([A-Za-z_][A-Za-z0-9_]*)[\"']\s*\]")

# Words after the container name that cannot be its alias.
_NOT_AN_ALIAS = {"WHERE", "ORDER", "GROUP", "JOIN", "OFFSET", "LIMIT", "IN"}
_TAIL_CLAUSES = {"ORDER", "GROUP", "OFFSET", "LIMIT"}


class PartitionCheck(BaseModel):
    query: str
    status: Literal["present", "injected", "missing"]
    detected_values: List[str] = Field(default_factory=list)


class _Word(NamedTuple):
    text: str
    start: int
    end: int

    @property
    def keyword(self) -> str:
        return self.text.upper()


def _outer_words(sql: str) -> List[_Word]:
    """Bare words of the outermost query.

    Skips string literals (with backslash escapes), anything nested in
    parentheses or brackets, and property names reached through a dot.
    """
    words: List[_Word] = []
    depth = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(depth - 1, 0)
        elif ch.isalpha() or ch == "_":
            match = _IDENTIFIER.match(sql, i)
            if match is None:
                i += 1
                continue
            dotted = sql[:i].rstrip().endswith(".")
            if depth == 0 and not dotted:
                words.append(_Word(match.group(0), match.start(), match.end()))
            i = match.end()
            continue
        elif ch.isdigit():
            # Numbers such as 1e5 must not yield a word.
            while i < len(sql) and (sql[i].isalnum() or sql[i] in "._"):
                i += 1
            continue
        i += 1
    return words


def _outer_clauses(sql: str) -> Tuple[Optional[_Word], Optional[_Word], Optional[_Word]]:
    """The outermost FROM, WHERE and first clause after the filter (ORDER BY, GROUP BY, OFFSET, LIMIT)."""
    from_word = where = tail = None
    for word in _outer_words(sql):
        keyword = word.keyword
        if from_word is None:
            if keyword == "FROM":
                from_word = word
        elif where is None and tail is None and keyword == "WHERE":
            where = word
        elif tail is None and keyword in _TAIL_CLAUSES:
            tail = word
    return from_word, where, tail


def query_alias(sql: str, default: str = "c") -> str:
    """The alias the outermost query binds its container to (the container name itself when unaliased)."""
    words = _outer_words(sql)
    for index, word in enumerate(words):
        if word.keyword != "FROM":
            continue
        rest = words[index + 1:index + 4]
        if not rest:
            return default
        if len(rest) > 2 and rest[1].keyword == "AS":
            return rest[2].text
        if len(rest) > 1 and rest[1].keyword not in _NOT_AN_ALIAS:
            return rest[1].text
        return rest[0].text
    return default


def _conjuncts(condition: exp.Expression) -> List[exp.Expression]:
    condition = condition.unnest()
    if isinstance(condition, exp.And):
        return [c.unnest() for c in condition.flatten()]
    return [condition]


def _partition_values_ast(sql: str, alias: str, field: str) -> Optional[List[str]]:
    """Values of top-level ANDed ``alias.field = 'value'`` predicates, or None if unparseable."""
    try:
        tree = sqlglot.parse_one(sql)
    except SqlglotError:
        return None
    if not isinstance(tree, exp.Select):
        return None

    where = tree.args.get("where")
    if where is None:
        return []

    values = []
    for predicate in _conjuncts(where.this):
        if not isinstance(predicate, exp.EQ):
            continue
        for col, lit in ((predicate.this, predicate.expression), (predicate.expression, predicate.this)):
            if not (isinstance(col, exp.Column) and isinstance(lit, exp.Literal) and lit.is_string):
                continue
            if col.name.lower() != field.lower():
                continue
            if col.table and col.table.lower() != alias.lower():
                continue
            values.append(lit.this)
    return values


def _partition_values_regex(sql: str, alias: str, field: str) -> List[str]:
    _, where, tail = _outer_clauses(sql)
    if where is None:
        return []
    # Only predicates whose alias sits at the outer level count.
    outer = {word.start for word in _outer_words(sql)}
    pattern = re.compile(
        rf"(?<![\w.]){re.escape(alias)}\s*\.\s*{re.escape(field)}\b\s*=\s*'([^']*)'",
        re.IGNORECASE,
    )
    end = tail.start if tail else len(sql)
    return [m.group(1) for m in pattern.finditer(sql, where.end, end) if m.start() in outer]


def find_partition_values(sql: str, alias: str, field: str) -> List[str]:
    # c["TwinID"] and c.TwinID address the same property.
    dotted = _BRACKET_ACCESS.sub(r"\1.\2", sql)
    values = _partition_values_ast(dotted, alias, field)
    if values is None:
        logger.debug("Query did not parse as generic SQL; using pattern match for partition filter.")
        values = _partition_values_regex(dotted, alias, field)
    return values


def _literal(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def inject_partition_filter(sql: str, alias: str, field: str, value: str) -> str:
    """Adds the partition predicate as the first condition of the outermost WHERE.

    An existing condition is parenthesised so OR branches stay inside the
    partition scope. Subqueries and string literals are left untouched.
    """
    predicate = f"{alias}.{field} = {_literal(value)}"
    _, where, tail = _outer_clauses(sql)

    if where is not None:
        end = tail.start if tail else len(sql)
        condition = sql[where.end:end].strip()
        rebuilt = f"{sql[:where.start]}WHERE {predicate} AND ({condition})"
        return f"{rebuilt} {sql[end:].strip()}" if tail else rebuilt

    if tail is not None:
        return f"{sql[:tail.start].rstrip()} WHERE {predicate} {sql[tail.start:]}"
    return f"{sql.rstrip()} WHERE {predicate}"


class PartitionFilterEnforcer:
    """Verifies that a normalized query filters on the requested partition key.

    A filter on the partition field with a different value is always
    rejected. A missing filter is handled per policy: ``inject`` adds it,
    ``reject`` fails the request, ``warn`` only logs.
    """

    def __init__(self, policy: PartitionFilterPolicy = "inject", default_alias: str = "c"):
        self.policy = policy
        self.default_alias = default_alias

    def enforce(self, sql: str, field: str, value: str) -> PartitionCheck:
        alias = query_alias(sql, self.default_alias)
        values = find_partition_values(sql, alias, field)

        if value in values:
            return PartitionCheck(query=sql, status="present", detected_values=values)

        if values:
            raise QueryValidationError(
                f"Generated query filters {field} on {values} instead of the requested partition.",
                error_code=ErrorCode.PARTITION_FILTER_MISMATCH,
            )

        if self.policy == "reject":
            raise QueryValidationError(
                f"Generated query does not filter on the partition key {field}.",
                error_code=ErrorCode.PARTITION_FILTER_MISSING,
            )

        if self.policy == "warn":
            logger.warning(f"Generated query does not filter on partition key {field}; executing as generated.")
            return PartitionCheck(query=sql, status="missing")

        injected = inject_partition_filter(sql, alias, field, value)
        logger.warning(f"Injected missing partition filter on {field}: {injected}")
        return PartitionCheck(query=injected, status="injected")
