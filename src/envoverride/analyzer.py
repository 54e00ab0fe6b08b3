"""
Override Analyzer: early diagnostics for an override set.

This module provides lightweight analysis of an override pass before it runs:
    - Referenced names per override
    - References that will stay unexpanded (defined nowhere)
    - Self references and append keys
    - Cycles and the cuts the ordering would make
    - The computed application order

IMPORTANT: It does NOT modify the base store or the overrides.
It only produces read-only reports.
"""

from __future__ import annotations

import warnings
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set

from envoverride.casefold import fold, sort_names
from envoverride.macros import references
from envoverride.ordering import CycleCut, CycleWarning, compute_order
from envoverride.store import is_append_key, split_append_key


@dataclass
class OverrideReport:
    """Analysis report for one override pass."""

    total_overrides: int = 0
    total_existing: int = 0

    # Reference inventory
    references: Dict[str, List[str]] = field(default_factory=dict)
    undefined_references: Set[str] = field(default_factory=set)
    self_references: List[str] = field(default_factory=list)
    removals: List[str] = field(default_factory=list)

    # Append keys grouped by base name
    append_groups: Dict[str, List[str]] = field(default_factory=dict)

    # Ordering
    order: List[str] = field(default_factory=list)
    cuts: List[CycleCut] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cuts)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_overrides(existing: Iterable[str],
                      overrides: Optional[Mapping[str, Optional[str]]]) -> OverrideReport:
    """
    Analyze ``overrides`` against the names already defined in ``existing``.

    Returns an OverrideReport. Cycle warnings are collected on the report
    instead of being issued.
    """
    overrides = overrides or {}
    existing_names = list(existing)
    report = OverrideReport(total_overrides=len(overrides), total_existing=len(existing_names))

    defined: Set[str] = {fold(name) for name in existing_names}
    for key in overrides:
        defined.add(fold(split_append_key(key)[0]))

    # =========================================================================
    # 1. REFERENCE INVENTORY
    # =========================================================================

    undefined: Dict[str, str] = {}
    groups: Dict[str, List[str]] = defaultdict(list)

    for key, value in overrides.items():
        if not value:
            report.removals.append(key)

        names = references(value)
        report.references[key] = names

        base, suffix = split_append_key(key)
        if suffix is not None:
            groups[base].append(key)
        elif any(fold(name) == fold(key) for name in names):
            report.self_references.append(key)

        for name in names:
            if fold(name) not in defined:
                undefined.setdefault(fold(name), name)

    report.undefined_references = set(undefined.values())
    report.append_groups = dict(groups)

    # =========================================================================
    # 2. ORDERING
    # =========================================================================

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", CycleWarning)
        order = compute_order(existing_names, overrides)
    report.order = order.names
    report.cuts = order.cuts

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if report.undefined_references:
        report.add_warning(
            f"Undefined references (left unexpanded): {', '.join(sort_names(report.undefined_references))}"
        )

    for cut in report.cuts:
        report.add_warning(cut.describe())

    assigned = {fold(name) for name in existing_names}
    assigned.update(fold(key) for key in overrides if not is_append_key(key))
    for base, keys in report.append_groups.items():
        if fold(base) not in assigned:
            report.add_warning(
                f"Append keys {', '.join(keys)} target {base}, which is not defined yet"
            )

    return report
