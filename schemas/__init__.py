"""
schemas/__init__.py

JSON Schema definition and validation utilities for saved layout snapshots.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft202012Validator

# Schema file paths
SCHEMA_DIR = os.path.dirname(os.path.abspath(__file__))
SNAPSHOT_SCHEMA_PATH = os.path.join(SCHEMA_DIR, "snapshot_schema.json")

# Cached schema
_snapshot_schema: Optional[Dict] = None


def get_snapshot_schema() -> Dict:
    """Load and return the snapshot schema."""
    global _snapshot_schema
    if _snapshot_schema is None:
        with open(SNAPSHOT_SCHEMA_PATH, "r", encoding="utf-8") as f:
            _snapshot_schema = json.load(f)
    return _snapshot_schema


def _format_errors(errors) -> List[str]:
    messages = []
    for error in errors:
        path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
        messages.append(f"{path}: {error.message}")
    return messages


def validate_snapshot(data: Any) -> Tuple[bool, List[str]]:
    """
    Validate the structure of a whole snapshot document.

    Individual node records are not checked here; see
    :func:`validate_node_record`.

    Args:
        data: Parsed JSON document.

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    validator = Draft202012Validator(get_snapshot_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if not errors:
        return True, []
    return False, _format_errors(errors)


def validate_node_record(record: Any) -> Tuple[bool, List[str]]:
    """Validate one node record against ``$defs/nodeRecord``."""
    schema = get_snapshot_schema()
    full_schema = {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "$defs": schema.get("$defs", {}),
        **schema["$defs"]["nodeRecord"],
    }
    errors = list(Draft202012Validator(full_schema).iter_errors(record))
    if not errors:
        return True, []
    return False, _format_errors(errors)
