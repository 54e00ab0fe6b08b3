"""
VariableStore: the working set of environment variables.

Names are case-insensitive but case-preserving: ``Path`` and ``PATH`` are the
same variable, and the displayed casing is whichever was written last.
Iteration follows case-insensitive lexical order, not insertion order.

Append keys:
    An override key of the form ``BASE+SUFFIX`` prepends its value to the
    inherited ``BASE`` value, joined with the store's path separator.
    Only the part before the first "+" is meaningful; the suffix lets
    several appenders target the same base.

ARCHITECTURAL RULE:
    A value is never None. Deleting is done with ``remove`` (or by
    overriding with an empty value), never by storing None.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from envoverride.casefold import fold
from envoverride.macros import Resolver, expand


class InvalidValue(ValueError):
    """Raised when a None value is stored under a name."""
    pass


class MalformedOverrideInput(ValueError):
    """Raised when a flat key/value sequence has an odd number of elements."""
    pass


def is_append_key(key: str) -> bool:
    """True for ``BASE+SUFFIX`` keys (a "+" somewhere after the first character)."""
    return key.find("+") > 0


def split_append_key(key: str) -> Tuple[str, Optional[str]]:
    """
    Split ``BASE+SUFFIX`` at the first "+".

    Returns:
        (base, suffix) for append keys, (key, None) otherwise
    """
    idx = key.find("+")
    if idx > 0:
        return key[:idx], key[idx + 1:]
    return key, None


class VariableStore(Resolver):
    """
    Ordered, case-insensitive mapping of variable names to string values.

    Composition rather than a dict subclass: entries live in ``_entries``
    keyed by the folded name, each holding (display name, value).
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None,
                 path_separator: str = os.pathsep):
        self.path_separator = path_separator
        self._entries: Dict[str, Tuple[str, str]] = {}
        if initial is not None:
            for name, value in initial.items():
                self.put(name, value)

    @classmethod
    def from_pairs(cls, *key_value_pairs: str,
                   path_separator: str = os.pathsep) -> "VariableStore":
        """Build a store from ``"key", "value", "key", "value", ...``."""
        if len(key_value_pairs) % 2 != 0:
            raise MalformedOverrideInput(
                f"Expected key/value pairs, got {len(key_value_pairs)} elements: {list(key_value_pairs)}"
            )
        store = cls(path_separator=path_separator)
        for i in range(0, len(key_value_pairs), 2):
            store.put(key_value_pairs[i], key_value_pairs[i + 1])
        return store

    def copy(self) -> "VariableStore":
        clone = VariableStore(path_separator=self.path_separator)
        clone._entries = dict(self._entries)
        return clone

    # =========================================================================
    # BASIC ACCESS
    # =========================================================================

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._entries.get(fold(name))
        if entry is None:
            return default
        return entry[1]

    def put(self, name: str, value: str) -> Optional[str]:
        """
        Store ``value`` under ``name``, adopting ``name``'s casing.

        Returns:
            The previous value, or None

        Raises:
            InvalidValue: If value is None
        """
        if value is None:
            raise InvalidValue(f"Null value not allowed as an environment variable: {name}")
        previous = self.get(name)
        self._entries[fold(name)] = (name, value)
        return previous

    def put_if_not_none(self, name: str, value: Optional[str]) -> None:
        if value is not None:
            self.put(name, value)

    def remove(self, name: str) -> Optional[str]:
        entry = self._entries.pop(fold(name), None)
        return None if entry is None else entry[1]

    def resolve(self, name: str) -> Optional[str]:
        return self.get(name)

    # =========================================================================
    # OVERRIDES
    # =========================================================================

    def override(self, key: str, value: Optional[str]) -> None:
        """
        Override the current entry by the given one.

        Handles ``PATH+XYZ`` notation: the value is put in front of the
        existing ``PATH``. An empty or None value removes the entry.
        """
        base, suffix = split_append_key(key)
        if not value:
            self.remove(base)
            return

        if suffix is not None:
            existing = self.get(base)
            if existing is not None:
                value = value + self.path_separator + existing
            self.put(base, value)
            return

        self.put(key, value)

    def override_all(self, overrides: Mapping[str, Optional[str]]) -> "VariableStore":
        """Apply ``override`` for every entry, in the mapping's own order. Values are not expanded."""
        for key, value in overrides.items():
            self.override(key, value)
        return self

    def add_line(self, line: str) -> None:
        """Parse ``NAME=VALUE`` (split at the first "="). No-op without a name."""
        sep = line.find("=")
        if sep > 0:
            self.put(line[:sep], line[sep + 1:])

    def add_lines(self, lines) -> None:
        for line in lines:
            self.add_line(line)

    def expand(self, text: Optional[str]) -> Optional[str]:
        """Expand variable references in ``text`` against this store."""
        return expand(text, self)

    # =========================================================================
    # MAPPING PROTOCOL
    # =========================================================================

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and fold(name) in self._entries

    def __getitem__(self, name: str) -> str:
        entry = self._entries.get(fold(name))
        if entry is None:
            raise KeyError(name)
        return entry[1]

    def __setitem__(self, name: str, value: str) -> None:
        self.put(name, value)

    def __delitem__(self, name: str) -> None:
        if self.remove(name) is None:
            raise KeyError(name)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        return [name for name, _ in self.items()]

    def values(self) -> List[str]:
        return [value for _, value in self.items()]

    def items(self) -> List[Tuple[str, str]]:
        """(display name, value) pairs in case-insensitive order."""
        return [self._entries[key] for key in sorted(self._entries)]

    def to_dict(self) -> Dict[str, str]:
        return dict(self.items())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VariableStore):
            return {k: v for k, (_, v) in self._entries.items()} == \
                {k: v for k, (_, v) in other._entries.items()}
        if isinstance(other, Mapping):
            return {k: v for k, (_, v) in self._entries.items()} == \
                {fold(k): v for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"VariableStore({self.to_dict()!r})"
