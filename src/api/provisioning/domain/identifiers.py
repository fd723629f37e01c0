"""Identifier sanitization for generated table and column names.

Names arrive from generated specifications and must never reach SQL as-is.
`sanitize_identifier` turns any string into one that is safe to place inside
double quotes without further escaping.
"""

from __future__ import annotations

import hashlib
import re

from provisioning.domain.observability import (
    DefaultSchemaDefinitionProbe,
    SchemaDefinitionProbe,
)

# PostgreSQL NAMEDATALEN - 1
MAX_IDENTIFIER_LENGTH = 63

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "select",
        "insert",
        "update",
        "delete",
        "drop",
        "create",
        "alter",
        "table",
        "from",
        "where",
    }
)

REWRITE_PREFIX = "col_"

# Hex digits of the digest appended by shorten_identifier
HASH_SUFFIX_LENGTH = 8

_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_UNSAFE_CHARACTERS = re.compile(r"[^a-zA-Z0-9_]")
_INVALID_LEADING_CHARACTER = re.compile(r"^[^a-zA-Z_]")


def is_valid_identifier(name: str) -> bool:
    """Check that a name can be used as an identifier unchanged.

    A valid identifier is non-empty, at most 63 characters, starts with a
    letter or underscore, contains only ASCII letters, digits and
    underscores, and is not a reserved word (case-insensitive).
    """
    if not name or len(name) > MAX_IDENTIFIER_LENGTH:
        return False
    if not _IDENTIFIER_PATTERN.match(name):
        return False
    return name.lower() not in RESERVED_WORDS


def sanitize_identifier(
    raw: str,
    probe: SchemaDefinitionProbe | None = None,
) -> str:
    """Normalize an arbitrary string into a safe SQL identifier.

    Characters outside [a-zA-Z0-9_] become underscores, the result is
    lower-cased and truncated to 63 characters. If that still fails
    validation (empty, leading digit, reserved word) it is prefixed with
    'col_' and a non-letter leading character is replaced by '_'.

    The function is pure and idempotent:
    sanitize_identifier(sanitize_identifier(s)) == sanitize_identifier(s).

    Args:
        raw: Name as supplied by the generator
        probe: Optional probe notified when a rewrite happens

    Returns:
        Identifier matching ^[a-z_][a-z0-9_]*$ of at most 63 characters
    """
    sanitized = _UNSAFE_CHARACTERS.sub("_", raw).lower()[:MAX_IDENTIFIER_LENGTH]
    if is_valid_identifier(sanitized):
        return sanitized

    rewritten = REWRITE_PREFIX + _INVALID_LEADING_CHARACTER.sub("_", sanitized)
    rewritten = rewritten[:MAX_IDENTIFIER_LENGTH]
    (probe or DefaultSchemaDefinitionProbe()).identifier_rewritten(
        sanitized=sanitized, rewritten=rewritten
    )
    return rewritten


def quote_identifier(identifier: str) -> str:
    """Wrap an identifier in double quotes, doubling embedded quotes."""
    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def shorten_identifier(name: str, max_length: int = MAX_IDENTIFIER_LENGTH) -> str:
    """Bound a composed identifier without letting distinct names collide.

    Names within `max_length` are returned unchanged. Longer names keep their
    leading characters and end in "_" plus a digest of the full name, so the
    result is deterministic and still starts with the same prefix.
    """
    if len(name) <= max_length:
        return name
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:HASH_SUFFIX_LENGTH]
    return f"{name[: max_length - HASH_SUFFIX_LENGTH - 1]}_{digest}"
