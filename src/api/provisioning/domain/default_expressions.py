"""Validation of column DEFAULT expressions.

Defaults are the one piece of generated input that is emitted as SQL rather
than as an identifier or a mapped type, so they are restricted to a narrow
grammar: literals, a handful of zero-argument functions, and an optional
cast to a known column type.
"""

from __future__ import annotations

import re

from provisioning.domain.column_types import is_known_type

MAX_DEFAULT_LENGTH = 256

ALLOWED_FUNCTIONS: frozenset[str] = frozenset(
    {
        "now()",
        "current_timestamp",
        "current_date",
        "current_time",
        "localtimestamp",
        "gen_random_uuid()",
        "uuid_generate_v4()",
    }
)

ALLOWED_KEYWORDS: frozenset[str] = frozenset({"true", "false", "null"})

_NUMERIC_LITERAL = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_STRING_LITERAL = re.compile(r"^'(?:[^'\\]|'')*'$")
_CAST_TYPE = re.compile(r"^[a-z][a-z0-9 ]*(?:\(\s*\d+\s*(?:,\s*\d+\s*)?\))?$")
_WHITESPACE = re.compile(r"\s+")


def _normalize_term(term: str) -> str | None:
    stripped = term.strip()
    if not stripped:
        return None

    if _STRING_LITERAL.match(stripped):
        return stripped
    if _NUMERIC_LITERAL.match(stripped):
        return stripped

    compact = _WHITESPACE.sub("", stripped.lower())
    if compact in ALLOWED_KEYWORDS:
        return compact.upper()
    if compact in ALLOWED_FUNCTIONS:
        return compact
    return None


def normalize_default_expression(expression: str | None) -> str | None:
    """Validate a DEFAULT expression against the allowed grammar.

    Accepted forms:
        numeric literal            42, -1.5, 1e3
        string literal             'active', 'O''Brien'
        keyword                    TRUE, FALSE, NULL
        allowed function           now(), current_timestamp, gen_random_uuid()
        any of the above + cast    '{}'::jsonb, 0::numeric(10,2)

    Args:
        expression: Raw DEFAULT expression, or None

    Returns:
        The expression to emit, or None if absent or not allowed
    """
    if expression is None:
        return None
    expression = expression.strip()
    if not expression or len(expression) > MAX_DEFAULT_LENGTH:
        return None

    term = _normalize_term(expression)
    if term is not None:
        return term

    if "::" not in expression:
        return None

    value, cast = expression.rsplit("::", 1)
    cast = _WHITESPACE.sub(" ", cast.strip().lower())
    if not _CAST_TYPE.match(cast) or not is_known_type(cast):
        return None

    term = _normalize_term(value)
    if term is None:
        return None
    return f"{term}::{cast}"
