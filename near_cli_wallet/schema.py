from __future__ import annotations

from typing import Any, Dict

import jsonschema  # type: ignore[import-untyped]


def validate(instance: Any, schema: Dict[str, Any]) -> None:
    """Raise jsonschema.ValidationError if ``instance`` does not match."""
    jsonschema.validate(instance=instance, schema=schema)
