#!/usr/bin/env python3
"""Validation script for persisted For You state files.

Scans a file-store directory for tracker and profile documents and validates
them against the bundled schemas. Files that fail validation are still
readable by the runtime (they are migrated on load) but are reported here.
Exits with error code if any invalid files are found.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from urllib.parse import unquote

import jsonschema

SCHEMA_BY_KEY_PREFIX = {
    "foryou_tracking": "affinity_state.schema.json",
    "foryou_profile": "interest_profile.schema.json",
}


def find_repo_root() -> Path:
    """Find the repository root by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


def schema_for(file_path: Path, schemas_dir: Path) -> Path | None:
    key = unquote(file_path.name.removesuffix(".json")).rsplit("/", 1)[-1]
    for prefix, schema_name in SCHEMA_BY_KEY_PREFIX.items():
        if key.startswith(prefix):
            return schemas_dir / schema_name
    return None


def validate_json_file(file_path: Path, schema_path: Path) -> tuple[bool, str | None]:
    """Validate a JSON file against a schema."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {e}"

    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        return False, f"Failed to load schema: {e}"

    try:
        jsonschema.validate(instance=data, schema=schema)
        return True, None
    except jsonschema.ValidationError as e:
        return False, f"Validation error at {'/'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
    except jsonschema.SchemaError as e:
        return False, f"Schema error: {e.message}"


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate persisted For You state files")
    parser.add_argument(
        "storage_dir",
        nargs="?",
        default=os.getenv("FORYOU_STORAGE_DIR", "/tmp/foryou-runtime-state"),
    )
    args = parser.parse_args()

    storage_dir = Path(args.storage_dir)
    schemas_dir = find_repo_root() / "src" / "foryou_runtime" / "schemas"
    if not schemas_dir.exists():
        print(f"ERROR: Schemas not found: {schemas_dir}", file=sys.stderr)
        return 1
    if not storage_dir.exists():
        print(f"ERROR: Storage directory not found: {storage_dir}", file=sys.stderr)
        return 1

    errors: list[str] = []
    checked = 0
    for state_file in sorted(storage_dir.glob("*.json")):
        schema_path = schema_for(state_file, schemas_dir)
        if schema_path is None:
            continue
        checked += 1
        valid, error = validate_json_file(state_file, schema_path)
        if not valid:
            errors.append(f"{state_file}: {error}")
        else:
            print(f"✓ {state_file}")

    if errors:
        print("\nValidation errors:", file=sys.stderr)
        for error in errors:
            print(f"  {error}", file=sys.stderr)
        return 1

    print(f"\nAll {checked} state files validated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
