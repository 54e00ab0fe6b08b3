"""
Environment Override Package

Merges a set of override assignments into a base environment and expands
``$NAME`` / ``${NAME}`` references in a deterministic, cycle-safe order.

LAYERS:
-------
    casefold   - case-insensitive, case-preserving name identity
    store      - VariableStore (append-aware ``KEY+SUFFIX`` merge)
    macros     - single macro scanner, used for expansion AND tracing
    graph      - reference graph + depth-first topological sort
    ordering   - cycle-cut policy and final application order
    engine     - applies overrides in computed order

This package does NOT launch processes, read the platform environment,
or interpret shell syntax beyond simple variable substitution.
"""

__version__ = "0.1.0"
