"""WFST modules for context biasing.

This package implements the context graph used during decoding:
- Context FST: phrase chains with escape arcs, determinized
- ContextGraph: read-only arena flattened from the context FST
- Matching: per-frame advance of the active context states
"""

from .graph import ArcKind, ContextArc, ContextGraph
from .match import get_next_context_states
from .build_context import (
    ContextGraphBuilder,
    build_context_fst,
    build_context_graph,
    determinize_context_fst,
)

__all__ = [
    "ArcKind",
    "ContextArc",
    "ContextGraph",
    "get_next_context_states",
    "ContextGraphBuilder",
    "build_context_fst",
    "build_context_graph",
    "determinize_context_fst",
]
