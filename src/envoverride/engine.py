"""
Override engine: applies an override set to a VariableStore.

    apply_expanding_all  - order-aware, expands each value against the
                           evolving store before merging it
    override_all         - raw values, no expansion, mapping order
    resolve              - expands a flat mapping against itself, one pass
"""

from __future__ import annotations

import logging
from typing import Mapping, MutableMapping, Optional

from envoverride.macros import expand
from envoverride.ordering import compute_order
from envoverride.store import VariableStore

_LOGGER = logging.getLogger(__name__)


def apply_expanding_all(store: VariableStore,
                        overrides: Optional[Mapping[str, Optional[str]]]) -> VariableStore:
    """
    Override ``store`` with ``overrides``, expanding macros in their values.

    Overrides are applied in the order computed by ``compute_order`` so that
    a value referencing another override sees its already-applied result.

    Returns:
        ``store``, mutated in place
    """
    if not overrides:
        return store

    order = compute_order(store, overrides)
    for key in order.names:
        raw = overrides[key]
        value = store.expand(raw)
        _LOGGER.debug("override %s=%r (raw %r)", key, value, raw)
        store.override(key, value)
    return store


def override_all(store: VariableStore, overrides: Mapping[str, Optional[str]]) -> VariableStore:
    """Apply pre-resolved ``overrides`` to ``store`` without macro expansion."""
    return store.override_all(overrides)


def resolve(env: MutableMapping[str, str]) -> None:
    """
    Expand every value of ``env`` against ``env`` itself, in place.

    Single pass in the mapping's iteration order; not cycle-aware.
    """
    for key in list(env.keys()):
        env[key] = expand(env[key], env)
