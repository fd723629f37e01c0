"""Mapping of free-form logical column types to physical PostgreSQL types.

Only the fixed set of physical types below can ever appear in generated DDL.
Unknown types degrade to TEXT; parameterized types are re-rendered from
parsed integers so no part of the raw string is echoed back.
"""

from __future__ import annotations

import re

from provisioning.domain.observability import (
    DefaultSchemaDefinitionProbe,
    SchemaDefinitionProbe,
)

FALLBACK_TYPE = "TEXT"

VARCHAR_MIN_LENGTH = 1
VARCHAR_MAX_LENGTH = 1000
VARCHAR_DEFAULT_LENGTH = 255
CHAR_DEFAULT_LENGTH = 1

DECIMAL_MAX_PRECISION = 38
DECIMAL_MAX_SCALE = 10
DECIMAL_DEFAULT = (10, 2)

# Base token -> physical type, for types without parameters
_SIMPLE_TYPES: dict[str, str] = {
    "serial": "INTEGER",
    "bigserial": "BIGINT",
    "smallserial": "SMALLINT",
    "int": "INTEGER",
    "int4": "INTEGER",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "int8": "BIGINT",
    "smallint": "SMALLINT",
    "int2": "SMALLINT",
    "text": "TEXT",
    "boolean": "BOOLEAN",
    "bool": "BOOLEAN",
    "timestamp": "TIMESTAMP",
    "datetime": "TIMESTAMP",
    "timestamp without time zone": "TIMESTAMP",
    "timestamptz": "TIMESTAMPTZ",
    "timestamp with time zone": "TIMESTAMPTZ",
    "date": "DATE",
    "time": "TIME",
    "real": "REAL",
    "float": "REAL",
    "float4": "REAL",
    "double": "DOUBLE PRECISION",
    "double precision": "DOUBLE PRECISION",
    "float8": "DOUBLE PRECISION",
    "json": "JSONB",
    "jsonb": "JSONB",
    "uuid": "UUID",
}

_VARCHAR_TYPES = frozenset({"varchar", "character varying"})
_CHAR_TYPES = frozenset({"char", "character"})
_DECIMAL_TYPES = frozenset({"decimal", "numeric"})

# Auto-incrementing integer types and their primary-key column form
AUTO_INCREMENT_TYPES: dict[str, str] = {
    "serial": "SERIAL",
    "bigserial": "BIGSERIAL",
    "smallserial": "SMALLSERIAL",
}

KNOWN_BASE_TYPES: frozenset[str] = frozenset(
    {*_SIMPLE_TYPES, *_VARCHAR_TYPES, *_CHAR_TYPES, *_DECIMAL_TYPES}
)

_LENGTH_PARAMETER = re.compile(r"\(\s*(\d+)\s*\)")
_PRECISION_PARAMETERS = re.compile(r"\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)")
_WHITESPACE = re.compile(r"\s+")


def base_type_token(raw_type: str) -> str:
    """Extract the lower-cased base type before any '(' (e.g. 'varchar')."""
    head = raw_type.lower().split("(", 1)[0]
    return _WHITESPACE.sub(" ", head).strip()


def is_known_type(raw_type: str) -> bool:
    return base_type_token(raw_type) in KNOWN_BASE_TYPES


def auto_increment_type(raw_type: str) -> str | None:
    """Return the SERIAL form for auto-incrementing types, else None."""
    return AUTO_INCREMENT_TYPES.get(base_type_token(raw_type))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _map_length_type(
    name: str, raw_type: str, default_length: int, probe: SchemaDefinitionProbe
) -> str:
    match = _LENGTH_PARAMETER.search(raw_type)
    if match is None:
        if "(" in raw_type:
            probe.column_type_clamped(
                raw_type=raw_type, mapped_type=f"{name}({default_length})"
            )
        return f"{name}({default_length})"

    requested = int(match.group(1))
    length = _clamp(requested, VARCHAR_MIN_LENGTH, VARCHAR_MAX_LENGTH)
    mapped = f"{name}({length})"
    if length != requested:
        probe.column_type_clamped(raw_type=raw_type, mapped_type=mapped)
    return mapped


def _map_decimal_type(raw_type: str, probe: SchemaDefinitionProbe) -> str:
    match = _PRECISION_PARAMETERS.search(raw_type)
    if match is None:
        precision, scale = DECIMAL_DEFAULT
        mapped = f"DECIMAL({precision},{scale})"
        if "(" in raw_type:
            probe.column_type_clamped(raw_type=raw_type, mapped_type=mapped)
        return mapped

    requested_precision = int(match.group(1))
    requested_scale = int(match.group(2)) if match.group(2) is not None else 0

    precision = _clamp(requested_precision, 1, DECIMAL_MAX_PRECISION)
    # PostgreSQL rejects a scale larger than the precision
    scale = min(requested_scale, DECIMAL_MAX_SCALE, precision)
    mapped = f"DECIMAL({precision},{scale})"
    if (precision, scale) != (requested_precision, requested_scale):
        probe.column_type_clamped(raw_type=raw_type, mapped_type=mapped)
    return mapped


def map_column_type(
    raw_type: str,
    probe: SchemaDefinitionProbe | None = None,
) -> str:
    """Map a logical column type to one of the fixed physical types.

    Examples:
        map_column_type("varchar(5000)")   -> "VARCHAR(1000)"
        map_column_type("decimal(50,20)")  -> "DECIMAL(38,10)"
        map_column_type("serial")          -> "INTEGER"
        map_column_type("geometry")        -> "TEXT" (with a warning)

    Args:
        raw_type: Type string as supplied by the generator
        probe: Optional probe for fallbacks and clamping

    Returns:
        Physical type string safe to place in DDL
    """
    probe = probe or DefaultSchemaDefinitionProbe()
    base = base_type_token(raw_type)

    if base in _SIMPLE_TYPES:
        return _SIMPLE_TYPES[base]
    if base in _VARCHAR_TYPES:
        return _map_length_type("VARCHAR", raw_type, VARCHAR_DEFAULT_LENGTH, probe)
    if base in _CHAR_TYPES:
        return _map_length_type("CHAR", raw_type, CHAR_DEFAULT_LENGTH, probe)
    if base in _DECIMAL_TYPES:
        return _map_decimal_type(raw_type, probe)

    probe.unknown_column_type(raw_type=raw_type, fallback=FALLBACK_TYPE)
    return FALLBACK_TYPE
