"""Observability probe for schema definition normalization.

Identifiers, column types and default expressions arrive from generated
specifications and are corrected rather than rejected. Every correction is
reported through this probe so operators can see what the generator produced.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import Protocol

import structlog


class SchemaDefinitionProbe(Protocol):
    """Protocol for schema definition normalization probes."""

    def identifier_rewritten(self, sanitized: str, rewritten: str) -> None:
        """Probe emitted when a sanitized identifier failed validation.

        Args:
            sanitized: Identifier after character replacement
            rewritten: Identifier actually used
        """
        ...

    def unknown_column_type(self, raw_type: str, fallback: str) -> None:
        """Probe emitted when a column type is not in the allow-list."""
        ...

    def column_type_clamped(self, raw_type: str, mapped_type: str) -> None:
        """Probe emitted when type parameters were out of range or unparsable."""
        ...

    def default_expression_rejected(self, column: str, expression: str) -> None:
        """Probe emitted when a DEFAULT expression is dropped."""
        ...


class DefaultSchemaDefinitionProbe:
    """Default implementation of SchemaDefinitionProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def identifier_rewritten(self, sanitized: str, rewritten: str) -> None:
        self._logger.info(
            "identifier_rewritten",
            sanitized=sanitized,
            rewritten=rewritten,
        )

    def unknown_column_type(self, raw_type: str, fallback: str) -> None:
        self._logger.warning(
            "unknown_column_type",
            raw_type=raw_type,
            fallback=fallback,
        )

    def column_type_clamped(self, raw_type: str, mapped_type: str) -> None:
        self._logger.info(
            "column_type_clamped",
            raw_type=raw_type,
            mapped_type=mapped_type,
        )

    def default_expression_rejected(self, column: str, expression: str) -> None:
        self._logger.warning(
            "default_expression_rejected",
            column=column,
            expression=expression,
        )
