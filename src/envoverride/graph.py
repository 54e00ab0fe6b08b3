"""
Reference graph over a set of overrides, and its topological sort.

Nodes are plain (non-append) override keys plus any names they reference.
An edge A -> B means the raw value of A mentions B as a macro.

The sort is a depth-first post-order walk. It does not raise on a cycle:
it returns a SortResult carrying either the order or the cycle found, and
the caller decides how to break it (see envoverride.ordering).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from envoverride.casefold import fold
from envoverride.macros import TraceResolver, expand
from envoverride.store import is_append_key


@dataclass
class ReferenceGraph:
    """
    Directed reference graph keyed by folded names.

    Properties:
        names: folded key -> display name (first casing seen)
        edges: folded key -> folded referees, in case-insensitive order
        keys: folded key -> raw override keys sharing that identity, input order
    """

    names: Dict[str, str] = field(default_factory=dict)
    edges: Dict[str, List[str]] = field(default_factory=dict)
    keys: Dict[str, List[str]] = field(default_factory=dict)

    def add_node(self, name: str) -> str:
        key = fold(name)
        self.names.setdefault(key, name)
        return key

    def add_edge(self, referrer: str, referee: str) -> None:
        src = self.add_node(referrer)
        dst = self.add_node(referee)
        referees = self.edges.setdefault(src, [])
        if dst not in referees:
            referees.append(dst)
            referees.sort()

    def remove_edge(self, referrer: str, referee: str) -> bool:
        referees = self.edges.get(fold(referrer), [])
        dst = fold(referee)
        if dst in referees:
            referees.remove(dst)
            return True
        return False

    def has_edge(self, referrer: str, referee: str) -> bool:
        return fold(referee) in self.edges.get(fold(referrer), [])

    def referees(self, name: str) -> List[str]:
        """Display names referenced by ``name``."""
        return [self.names[key] for key in self.edges.get(fold(name), [])]

    def name_of(self, key: str) -> str:
        return self.names.get(key, key)

    def is_override(self, name: str) -> bool:
        return fold(name) in self.keys

    @property
    def roots(self) -> List[str]:
        """Folded override keys in input order."""
        return list(self.keys)

    def edge_count(self) -> int:
        return sum(len(referees) for referees in self.edges.values())


@dataclass
class SortResult:
    """
    Outcome of a topological sort: either an order or a cycle.

    Properties:
        order: folded keys in post-order (referees before referrers)
        cycle: folded keys n0 -> n1 -> ... -> n0, or None if acyclic
    """

    order: List[str] = field(default_factory=list)
    cycle: Optional[List[str]] = None

    @property
    def has_cycle(self) -> bool:
        return self.cycle is not None


def build_reference_graph(overrides: Mapping[str, Optional[str]]) -> Tuple[ReferenceGraph, List[str]]:
    """
    Scan raw override values and build the reference graph.

    Append keys (``BASE+SUFFIX``) are left out of the graph and returned
    separately in their original relative order. Self references are dropped.

    Returns:
        (graph, append_keys)
    """
    graph = ReferenceGraph()
    append_keys: List[str] = []
    tracer = TraceResolver()

    for key, value in overrides.items():
        if is_append_key(key):
            append_keys.append(key)
            continue

        node = graph.add_node(key)
        graph.keys.setdefault(node, []).append(key)
        graph.edges.setdefault(node, [])

        tracer.clear()
        expand(value, tracer)
        for referee in tracer.referenced:
            if fold(referee) != node:
                graph.add_edge(key, referee)

    return graph, append_keys


def topological_sort(graph: ReferenceGraph, roots: Optional[Iterable[str]] = None) -> SortResult:
    """
    Depth-first post-order sort of ``graph`` starting from ``roots``.

    Stops at the first back edge and reports the cycle on the path.
    The walk keeps an explicit stack, so long reference chains do not
    hit the interpreter's recursion limit.

    Args:
        graph: ReferenceGraph to sort
        roots: folded keys to start from (defaults to the override keys)

    Returns:
        SortResult with either ``order`` complete or ``cycle`` set
    """
    result = SortResult()
    visited: Set[str] = set()

    for root in (graph.roots if roots is None else roots):
        if root in visited:
            continue
        visited.add(root)
        path: List[str] = [root]
        on_path: Set[str] = {root}
        pending: List[Iterator[str]] = [iter(graph.edges.get(root, []))]

        while pending:
            referee = next(pending[-1], None)
            if referee is None:
                # every referee of the top node is done
                pending.pop()
                node = path.pop()
                on_path.remove(node)
                result.order.append(node)
                continue

            if referee in on_path:
                start = path.index(referee)
                result.cycle = path[start:] + [referee]
                return result
            if referee in visited:
                continue

            visited.add(referee)
            path.append(referee)
            on_path.add(referee)
            pending.append(iter(graph.edges.get(referee, [])))

    return result
