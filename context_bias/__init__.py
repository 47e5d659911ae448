"""Context Biasing Package.

Weighted context graphs that bias a speech recognition decoder towards a
list of phrases (hotwords) at decoding time.
"""

__version__ = "0.1.0"

from .config import ContextConfig
from .vocab import Vocabulary, load_vocabulary
from .text import split_chars, load_contexts
from .wfst import (
    ArcKind,
    ContextArc,
    ContextGraph,
    ContextGraphBuilder,
    build_context_fst,
    build_context_graph,
    determinize_context_fst,
    get_next_context_states,
)
from .biasing import ContextState, ContextBiasResult, score_candidates, bias_topk

__all__ = [
    "ContextConfig",
    "Vocabulary",
    "load_vocabulary",
    "split_chars",
    "load_contexts",
    "ArcKind",
    "ContextArc",
    "ContextGraph",
    "ContextGraphBuilder",
    "build_context_fst",
    "build_context_graph",
    "determinize_context_fst",
    "get_next_context_states",
    "ContextState",
    "ContextBiasResult",
    "score_candidates",
    "bias_topk",
]
