"""Domain probes for the provisioning bounded context."""

from provisioning.domain.observability.schema_definition_probe import (
    DefaultSchemaDefinitionProbe,
    SchemaDefinitionProbe,
)

__all__ = [
    "DefaultSchemaDefinitionProbe",
    "SchemaDefinitionProbe",
]
