"""
Macro scanner for ``$NAME`` / ``${NAME}`` references.

A single scanning loop serves two purposes:
    - Expansion: the resolver returns real values
    - Tracing: the resolver records the requested names (see TraceResolver)

Token syntax:
    $NAME      one or more of [A-Za-z0-9_]
    ${NAME}    one or more of [A-Za-z0-9_.]
    $$         escape for a literal "$"

Unlike a shell, unresolved references are left in the text verbatim.
Inserted values are never re-scanned within the same call.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Union

from envoverride.casefold import fold


VARIABLE_PATTERN = re.compile(r"\$([A-Za-z0-9_]+|\{[A-Za-z0-9_.]+\}|\$)")


class Resolver(ABC):
    """
    Given a variable name, return its value or None.

    None means "unknown": the scanner leaves the reference untouched.
    An empty string is a real value and is spliced in.
    """

    @abstractmethod
    def resolve(self, name: str) -> Optional[str]:
        ...


class MapResolver(Resolver):
    """Resolves names against a plain mapping (exact key match)."""

    def __init__(self, mapping: Mapping[str, Optional[str]]):
        self.mapping = mapping

    def resolve(self, name: str) -> Optional[str]:
        return self.mapping.get(name)


class TraceResolver(Resolver):
    """
    Records every name it is asked for and returns an empty placeholder.

    Names are deduplicated case-insensitively; the first casing seen wins.
    """

    def __init__(self):
        self._seen: Dict[str, str] = {}

    def clear(self) -> None:
        self._seen = {}

    def resolve(self, name: str) -> Optional[str]:
        self._seen.setdefault(fold(name), name)
        return ""

    @property
    def referenced(self) -> List[str]:
        """Recorded names in case-insensitive order."""
        return [self._seen[key] for key in sorted(self._seen)]


ResolverLike = Union[Resolver, Mapping[str, Optional[str]]]


def expand(text: Optional[str], resolver: ResolverLike) -> Optional[str]:
    """
    Replace every variable reference in ``text`` using ``resolver``.

    Args:
        text: Input string (None passes through as None)
        resolver: A Resolver, or any mapping (wrapped in MapResolver)

    Returns:
        The expanded string
    """
    if text is None:
        return None
    if not isinstance(resolver, Resolver):
        resolver = MapResolver(resolver)

    idx = 0
    while True:
        match = VARIABLE_PATTERN.search(text, idx)
        if match is None:
            return text

        token = match.group(1)
        if token == "$":
            value: Optional[str] = "$"
        else:
            name = token[1:-1] if token.startswith("{") else token
            value = resolver.resolve(name)

        if value is None:
            idx = match.end()
        else:
            text = text[:match.start()] + value + text[match.end():]
            idx = match.start() + len(value)


def references(text: Optional[str]) -> List[str]:
    """Names referenced by ``text``, case-insensitively unique and sorted."""
    tracer = TraceResolver()
    expand(text, tracer)
    return tracer.referenced
