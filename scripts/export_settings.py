"""Export the environment variables recognised by SchemaForge as JSON.

Usage:
    python scripts/export_settings.py [output.json]

Without an output path the document is written to stdout.
"""

import json
import sys
from pathlib import Path
from typing import Any

from pydantic import SecretStr
from pydantic_core import PydanticUndefined
from pydantic_settings import BaseSettings

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "api"))

from infrastructure.settings import (  # noqa: E402
    BranchingSettings,
    DatabaseSettings,
    Settings,
)


def describe_field(prefix: str, name: str, field: Any) -> dict[str, Any]:
    default = field.get_default()
    type_name = getattr(field.annotation, "__name__", str(field.annotation))
    is_secret = "Secret" in type_name

    # Empty secrets must be provided in production
    is_required = default is PydanticUndefined or (
        isinstance(default, SecretStr) and default.get_secret_value() == ""
    )

    if is_secret or is_required or default is None:
        display_default = None
    elif isinstance(default, (bool, int, float)):
        display_default = default
    else:
        display_default = str(default)

    return {
        "env_var": f"{prefix}{name.upper()}",
        "type": "Secret" if is_secret else type_name,
        "default": display_default,
        "required": is_required,
        "description": field.description or "",
    }


def describe_settings(settings_class: type[BaseSettings]) -> dict[str, Any]:
    prefix = settings_class.model_config.get("env_prefix", "")
    return {
        "prefix": prefix,
        "doc": (settings_class.__doc__ or "").strip().splitlines()[0],
        "properties": [
            describe_field(prefix, name, field)
            for name, field in settings_class.model_fields.items()
        ],
    }


def export_settings(output: Path | None = None) -> None:
    data = {
        cls.__name__: describe_settings(cls)
        for cls in (Settings, DatabaseSettings, BranchingSettings)
    }
    document = json.dumps(data, indent=2)

    if output is None:
        print(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document + "\n")
    print(f"Exported settings to {output}", file=sys.stderr)


if __name__ == "__main__":
    export_settings(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
