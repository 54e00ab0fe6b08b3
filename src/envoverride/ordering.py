"""
Override application order.

Computes the order in which overrides must be applied so that every value,
when expanded, sees the already-resolved values of what it references.

Cycles are not errors. Each detected cycle loses exactly one edge and the
sort is retried. Every cut is logged at WARNING on this module's logger,
issued as a CycleWarning and recorded on the returned OverrideOrder.

Cut policy:
    1. If a node r of the cycle already exists in the base store, cut the
       edge (predecessor of r) -> r. The base value stands in for r.
    2. Otherwise cut the edge cycle[0] -> cycle[1].
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from envoverride.casefold import fold
from envoverride.graph import ReferenceGraph, build_reference_graph, topological_sort

_LOGGER = logging.getLogger(__name__)


class CycleWarning(UserWarning):
    """Issued once per reference cycle that had to be cut."""
    pass


@dataclass
class CycleCut:
    """A single removed edge and the cycle it broke (display names)."""

    cycle: List[str]
    referrer: str
    referee: str

    def describe(self) -> str:
        return (
            f"Cyclic reference detected: {' -> '.join(self.cycle)}; "
            f"cut the reference {self.referrer} -> {self.referee}"
        )


@dataclass
class OverrideOrder:
    """
    Result of an order computation.

    Properties:
        names: override keys in application order (append keys last)
        append_keys: the append keys, in their original relative order
        cuts: cycle cuts made, in the order they happened
        graph: the reference graph after cutting
    """

    names: List[str] = field(default_factory=list)
    append_keys: List[str] = field(default_factory=list)
    cuts: List[CycleCut] = field(default_factory=list)
    graph: ReferenceGraph = field(default_factory=ReferenceGraph)

    @property
    def warnings(self) -> List[str]:
        return [cut.describe() for cut in self.cuts]


def _cut_cycle(graph: ReferenceGraph, cycle: List[str], existing: Iterable[str]) -> CycleCut:
    """Remove one edge of ``cycle`` (folded keys, first == last) from ``graph``."""
    existing_keys = set(existing)
    referrer: Optional[str] = None
    referee: Optional[str] = None

    for node in cycle[:-1]:
        if node in existing_keys:
            # cycle lists nodes referrer-to-referee, so the one before the
            # last occurrence of node refers to it
            idx = len(cycle) - 1 - cycle[::-1].index(node)
            referrer, referee = cycle[idx - 1], node
            break
    else:
        referrer, referee = cycle[0], cycle[1]

    if not graph.remove_edge(referrer, referee):
        raise RuntimeError(f"Cannot cut {referrer} -> {referee}: edge not in graph")

    cut = CycleCut(
        cycle=[graph.name_of(node) for node in cycle],
        referrer=graph.name_of(referrer),
        referee=graph.name_of(referee),
    )
    _LOGGER.warning(cut.describe())
    warnings.warn(cut.describe(), CycleWarning, stacklevel=3)
    return cut


def compute_order(existing: Iterable[str], overrides: Optional[Mapping[str, Optional[str]]]) -> OverrideOrder:
    """
    Compute the order in which ``overrides`` should be applied on ``existing``.

    Args:
        existing: the base store (or any iterable of already-defined names)
        overrides: raw override assignments, iterated in their own order

    Returns:
        OverrideOrder; ``names`` lists every override key exactly once
    """
    if not overrides:
        return OverrideOrder()

    graph, append_keys = build_reference_graph(overrides)
    existing_keys = {fold(name) for name in existing}
    report = OverrideOrder(append_keys=append_keys, graph=graph)

    # each cut removes one edge, so this terminates
    while True:
        result = topological_sort(graph)
        if not result.has_cycle:
            break
        report.cuts.append(_cut_cycle(graph, result.cycle, existing_keys))

    # post-order already places every referee before its referrers
    for node in result.order:
        report.names.extend(graph.keys.get(node, []))
    report.names.extend(append_keys)
    return report
