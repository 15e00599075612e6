"""JSON schema validation for persisted runtime state."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).resolve().parents[2] / "schemas"

AFFINITY_STATE_SCHEMA = "affinity_state.schema.json"
INTEREST_PROFILE_SCHEMA = "interest_profile.schema.json"


def load_schema(name: str, _cache: dict[str, dict[str, Any]] = {}) -> dict[str, Any]:
    """Load a bundled schema once per process."""
    if name not in _cache:
        schema_path = SCHEMAS_DIR / name
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _cache[name] = json.load(f)
    return _cache[name]


def validation_error(data: Any, schema_name: str) -> Optional[str]:
    """Return the first validation message for ``data``, or None when it conforms."""
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        return e.message
    except jsonschema.SchemaError as e:
        raise ValueError(f"Schema error in {schema_name}: {e.message}") from e
    return None


def is_valid(data: Any, schema_name: str) -> bool:
    return validation_error(data, schema_name) is None
