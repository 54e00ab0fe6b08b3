"""
Serialization helpers for VariableStore objects and override maps.

Provides JSON/YAML round-trip via an intermediate dict representation.
Override maps keep their document order, since ``override_all`` applies
entries in mapping order.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import yaml

from envoverride.store import VariableStore


def store_to_dict(store: VariableStore) -> Dict[str, Any]:
    return {"path_separator": store.path_separator, "variables": store.to_dict()}


def store_from_dict(d: Dict[str, Any]) -> VariableStore:
    if not isinstance(d, dict):
        raise TypeError(f"Expected a mapping for a variable store, got {type(d).__name__}")
    store = VariableStore(path_separator=d.get("path_separator", os.pathsep))
    for name, value in (d.get("variables") or {}).items():
        store.put(str(name), None if value is None else _to_text(value))
    return store


def overrides_from_dict(d: Any) -> Dict[str, Optional[str]]:
    """Coerce a loaded document into an override map. None values mean "remove"."""
    if d is None:
        return {}
    if not isinstance(d, dict):
        raise TypeError(f"Expected a mapping of overrides, got {type(d).__name__}")
    return {str(key): (None if value is None else _to_text(value)) for key, value in d.items()}


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def store_to_json(store: VariableStore) -> str:
    return json.dumps(store_to_dict(store), sort_keys=True)


def store_from_json(s: str) -> VariableStore:
    d = json.loads(s)
    return store_from_dict(d)


def store_to_yaml(store: VariableStore) -> str:
    return yaml.safe_dump(store_to_dict(store), sort_keys=False)


def store_from_yaml(s: str) -> VariableStore:
    d = yaml.safe_load(s)
    return store_from_dict(d)


def overrides_from_json(s: str) -> Dict[str, Optional[str]]:
    return overrides_from_dict(json.loads(s))


def overrides_from_yaml(s: str) -> Dict[str, Optional[str]]:
    return overrides_from_dict(yaml.safe_load(s))
