"""
Graphviz DOT diagram generator for override reference graphs.

Converts a ReferenceGraph into Graphviz DOT format for visualization.

Supports two modes:
    - SIMPLE: Override keys and the references between them
    - DETAILED: Also names referenced but not overridden, and cut edges
"""

from enum import Enum
from typing import Iterable, List, Set, Tuple

from envoverride.casefold import fold
from envoverride.graph import ReferenceGraph
from envoverride.ordering import CycleCut


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"      # Override keys only
    DETAILED = "detailed"  # Include external references and cut edges


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Quote an identifier for DOT unless it is a plain ID."""
    if not identifier:
        return _escape_dot_string(identifier)
    if identifier[0].isdigit() or not identifier.replace('_', '').isalnum():
        return _escape_dot_string(identifier)
    return identifier


def generate_dot(graph: ReferenceGraph, mode: DotMode = DotMode.SIMPLE,
                 cuts: Iterable[CycleCut] = ()) -> str:
    """
    Generate Graphviz DOT format for a reference graph.

    Edges point from referrer to referee.

    Args:
        graph: ReferenceGraph to visualize
        mode: Visualization mode (SIMPLE, DETAILED)
        cuts: Cycle cuts to draw as dashed edges (DETAILED only)

    Returns:
        String containing DOT graph definition
    """
    lines: List[str] = []

    lines.append("digraph references {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # NODES
    # =========================================================================

    shown: Set[str] = set()
    for key in graph.roots:
        shown.add(key)
        lines.append(f"  {_escape_dot_id(graph.name_of(key))};")

    if mode == DotMode.DETAILED:
        for key in sorted(graph.names):
            if key in shown:
                continue
            shown.add(key)
            name = _escape_dot_id(graph.name_of(key))
            lines.append(f"  {name} [shape=ellipse, style=dashed, fillcolor=white];")

    # =========================================================================
    # EDGES
    # =========================================================================

    for key in graph.roots:
        for referee in graph.edges.get(key, []):
            if referee not in shown:
                continue
            src = _escape_dot_id(graph.name_of(key))
            dst = _escape_dot_id(graph.name_of(referee))
            lines.append(f"  {src} -> {dst};")

    if mode == DotMode.DETAILED:
        drawn: Set[Tuple[str, str]] = set()
        for cut in cuts:
            edge = (fold(cut.referrer), fold(cut.referee))
            if edge in drawn:
                continue
            drawn.add(edge)
            src = _escape_dot_id(cut.referrer)
            dst = _escape_dot_id(cut.referee)
            lines.append(f'  {src} -> {dst} [style=dashed, color=red, label="cut"];')

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(graph: ReferenceGraph, filename: str, mode: DotMode = DotMode.SIMPLE,
                  cuts: Iterable[CycleCut] = ()) -> None:
    """
    Generate DOT and save to file.

    Args:
        graph: ReferenceGraph to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
        cuts: Cycle cuts to draw (DETAILED only)
    """
    dot = generate_dot(graph, mode=mode, cuts=cuts)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
