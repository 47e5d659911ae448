"""Decoder-side helpers for context biasing.

Provides:
- ContextState: active context states of one hypothesis
- score_candidates: matches every candidate token of a frame
- bias_topk: selects the top-k tokens of a frame and scores them

The decoder adds the partial score to a hypothesis on every frame it keeps
matching, and the full score on the frame a phrase completes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import torch
from torch import Tensor

from .wfst.graph import ContextGraph
from .wfst.match import get_next_context_states


@dataclass
class ContextState:
    """Active context states of one hypothesis.

    A state must not be advanced from two threads at once; clone it when a
    hypothesis fans out.
    """

    # Map from graph state id to best accumulated score
    active_states: Dict[int, float] = field(default_factory=dict)

    @classmethod
    def initial(cls, graph: Optional[ContextGraph]) -> "ContextState":
        """Create the state of a hypothesis that matched nothing yet."""
        if graph is None:
            return cls()
        return cls(graph.start_states())

    def clone(self) -> "ContextState":
        return ContextState(dict(self.active_states))

    def advance(self,
                graph: Optional[ContextGraph],
                word_id: int,
                keep_start: bool = True) -> Tuple[Tuple[float, float], "ContextState"]:
        """Advance by one token.

        Args:
            graph: Context graph, or None
            word_id: Token decoded on this frame
            keep_start: Whether the start state stays active so a new match
                can begin on the next frame

        Returns:
            Tuple of ((partial_score, full_score), next ContextState)
        """
        scores, next_states = get_next_context_states(graph, self.active_states, word_id)
        if keep_start and graph is not None and graph.start not in next_states:
            next_states[graph.start] = 0.0
        return scores, ContextState(next_states)

    def __len__(self) -> int:
        return len(self.active_states)


@dataclass
class ContextBiasResult:
    """Top-k candidates of one frame with their context scores."""

    # Candidate token ids, shape (k,)
    token_ids: Tensor

    # Log probabilities of the candidates, shape (k,)
    log_probs: Tensor

    # Partial match score per candidate, shape (k,)
    partial_scores: Tensor

    # Full match score per candidate, shape (k,)
    full_scores: Tensor

    # Context state reached by each candidate
    next_states: List[ContextState]

    def biased_log_probs(self, partial_weight: float = 1.0, full_weight: float = 1.0) -> Tensor:
        """Return the candidate log probabilities with the context bonus added."""
        return (self.log_probs
                + partial_weight * self.partial_scores
                + full_weight * self.full_scores)


def score_candidates(graph: Optional[ContextGraph],
                     state: ContextState,
                     token_ids: Tensor,
                     keep_start: bool = True) -> Tuple[Tensor, Tensor, List[ContextState]]:
    """Match every candidate token of a frame against one hypothesis.

    Args:
        graph: Context graph, or None
        state: Context state of the hypothesis
        token_ids: Candidate token ids of shape (k,)
        keep_start: Whether the start state stays active after each step

    Returns:
        Tuple of (partial_scores, full_scores, next_states); the score
        tensors have shape (k,) and dtype float32
    """
    partial_scores = torch.zeros(token_ids.numel(), dtype=torch.float32)
    full_scores = torch.zeros(token_ids.numel(), dtype=torch.float32)
    next_states = []

    for i, word_id in enumerate(token_ids.tolist()):
        (partial, full), next_state = state.advance(graph, word_id, keep_start)
        partial_scores[i] = partial
        full_scores[i] = full
        next_states.append(next_state)

    return partial_scores, full_scores, next_states


def bias_topk(log_probs: Tensor,
              graph: Optional[ContextGraph],
              state: ContextState,
              beam: int,
              keep_start: bool = True) -> ContextBiasResult:
    """Select the top-k tokens of a frame and attach their context scores.

    Args:
        log_probs: Log probabilities of one frame, shape (vocab_size,)
        graph: Context graph, or None
        state: Context state of the hypothesis
        beam: Number of candidates to keep
        keep_start: Whether the start state stays active after each step

    Returns:
        ContextBiasResult for the k best tokens
    """
    if log_probs.dim() != 1:
        raise ValueError(f"Expected log_probs of shape (vocab_size,), got {tuple(log_probs.shape)}")

    k = min(beam, log_probs.numel())
    topk_log_probs, topk_ids = log_probs.topk(k)
    partial_scores, full_scores, next_states = score_candidates(
        graph, state, topk_ids, keep_start
    )

    return ContextBiasResult(
        token_ids=topk_ids,
        log_probs=topk_log_probs,
        partial_scores=partial_scores.to(topk_log_probs.device, topk_log_probs.dtype),
        full_scores=full_scores.to(topk_log_probs.device, topk_log_probs.dtype),
        next_states=next_states,
    )
