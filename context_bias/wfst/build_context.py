"""Build the context graph.

This module implements:
1. Context FST: one chain of token arcs per phrase, all phrases sharing the
   start state and a single final state
2. Escape arcs: blank-labelled arcs back to the start state that take back
   the bonus of an abandoned partial match
3. Determinization, so each state has at most one arc per token
"""

import logging
from typing import Dict, List, Optional, Tuple

import pynini
from pynini import Fst

from ..config import ContextConfig
from ..text import split_chars
from ..vocab import Vocabulary
from .graph import ContextGraph
from .match import get_next_context_states

logger = logging.getLogger(__name__)


def build_context_fst(contexts: List[str],
                      vocab: Vocabulary,
                      config: Optional[ContextConfig] = None) -> Tuple[Fst, int]:
    """Build the non-deterministic context FST.

    State 0 is the start state and state 1 the shared final state. A phrase
    of length L becomes a chain of L arcs, each weighted with the context
    score. Every state after the first token of a phrase gets an escape arc
    to the start state weighted with minus the score accumulated so far.

    Phrases longer than ``max_context_length`` are skipped and do not count
    towards ``max_contexts``. A phrase is truncated at its first unknown
    token; arcs built for the known prefix are kept.

    Args:
        contexts: Context phrases in priority order
        vocab: Vocabulary resolving tokens to ids
        config: Context configuration

    Returns:
        Tuple of (context FST, number of arcs added)
    """
    if vocab is None:
        raise ValueError("Symbol table should not be None!")
    config = config or ContextConfig()

    ofst = Fst()
    start_state = ofst.add_state()
    final_state = ofst.add_state()
    ofst.set_start(start_state)
    ofst.set_final(final_state, pynini.Weight.one(ofst.weight_type()))

    num_arcs = 0
    count = 0
    for context in contexts:
        chars = split_chars(context)
        if len(chars) > config.max_context_length:
            logger.info(f"Skip long context: {context}")
            continue

        count += 1
        if count > config.max_contexts:
            break

        prev_state = start_state
        for i, ch in enumerate(chars):
            word_id = vocab.find(ch)
            if word_id == Vocabulary.NOT_FOUND:
                logger.warning(f"Ignore unknown word found during compilation: {ch}")
                break

            next_state = ofst.add_state() if i < len(chars) - 1 else final_state

            if i > 0:
                escape_score = -config.context_score * i
                ofst.add_arc(prev_state, pynini.Arc(
                    Vocabulary.BLANK_ID, Vocabulary.BLANK_ID, escape_score, start_state
                ))
                num_arcs += 1

            # Acceptor: the input label equals the output label
            ofst.add_arc(prev_state, pynini.Arc(
                word_id, word_id, config.context_score, next_state
            ))
            num_arcs += 1
            prev_state = next_state

    return ofst, num_arcs


def determinize_context_fst(context_fst: Fst) -> Fst:
    """Determinize the context FST.

    The blank label is treated as an ordinary symbol, so escape arcs are
    kept. All paths accepting the same label string carry the same weight,
    hence the tropical determinization keeps the best path weight of every
    string.

    Args:
        context_fst: Context FST

    Returns:
        Deterministic context FST
    """
    return pynini.determinize(context_fst)


def build_context_graph(contexts: List[str],
                        vocab: Vocabulary,
                        config: Optional[ContextConfig] = None) -> Optional[ContextGraph]:
    """Build the context graph for a session.

    Args:
        contexts: Context phrases in priority order
        vocab: Vocabulary resolving tokens to ids
        config: Context configuration

    Returns:
        Context graph, or None if no phrase could be compiled
    """
    if vocab is None:
        raise ValueError("Symbol table should not be None!")
    if not contexts:
        return None

    logger.info(f"Contexts count size: {len(contexts)}")
    context_fst, num_arcs = build_context_fst(contexts, vocab, config)
    if num_arcs == 0:
        logger.info("No context compiled")
        return None

    graph = ContextGraph.from_fst(determinize_context_fst(context_fst))
    logger.info(f"Context graph has {graph.num_states()} states")
    return graph


class ContextGraphBuilder:
    """Holds the context graph of the current session.

    Keeps a reference to the shared vocabulary so the graph can be rebuilt
    when the context list changes.
    """

    def __init__(self, config: Optional[ContextConfig] = None):
        """Initialize builder.

        Args:
            config: Context configuration
        """
        self.config = config or ContextConfig()
        self.vocab: Optional[Vocabulary] = None
        self.graph: Optional[ContextGraph] = None

    def build(self, contexts: List[str], vocab: Vocabulary) -> Optional[ContextGraph]:
        """Replace the current graph with one built from ``contexts``.

        Args:
            contexts: Context phrases in priority order
            vocab: Vocabulary resolving tokens to ids

        Returns:
            The new context graph, or None
        """
        if vocab is None:
            raise ValueError("Symbol table should not be None!")
        self.vocab = vocab
        self.graph = build_context_graph(contexts, vocab, self.config)
        return self.graph

    def get_next_context_states(self,
                                active_states: Dict[int, float],
                                word_id: int) -> Tuple[Tuple[float, float], Dict[int, float]]:
        """Advance ``active_states`` on the current graph by one token."""
        return get_next_context_states(self.graph, active_states, word_id)


if __name__ == "__main__":
    # Example usage
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    example_vocab = Vocabulary.from_tokens(list("abcdefghijklmnopqrstuvwxyz"))
    example_graph = build_context_graph(
        ["cat", "car", "dog"], example_vocab, ContextConfig(context_score=1.0)
    )
    print(example_graph.get_stats())

    states = example_graph.start_states()
    for token in "cat":
        scores, states = get_next_context_states(example_graph, states, example_vocab.find(token))
        print(f"{token}: partial={scores[0]} full={scores[1]} active={states}")
