"""Per-frame context matching.

Advances the active states of one hypothesis by one token and reports the
bonus earned on this step:
- partial score: best score of any path that matched or escaped
- full score: best score of a path that reached the final state
"""

from typing import Dict, Optional, Tuple

from .graph import ArcKind, ContextGraph


def get_next_context_states(graph: Optional[ContextGraph],
                            active_states: Dict[int, float],
                            word_id: int) -> Tuple[Tuple[float, float], Dict[int, float]]:
    """Advance the active context states by one token.

    Every arc leaving an active state whose label is ``word_id``, as well as
    every escape arc, is followed. Paths reaching the final state update the
    full match score and are not kept active. For other targets the best
    score is kept; on equal scores the first one seen stays.

    ``active_states`` must only hold states of ``graph``. It is not modified.

    Args:
        graph: Context graph, or None when no context is configured
        active_states: Map from state id to accumulated score
        word_id: Id of the token decoded on this step

    Returns:
        Tuple of ((partial_match_score, full_match_score), next_active_states)
    """
    next_active_states: Dict[int, float] = {}
    if not active_states or graph is None:
        return (0.0, 0.0), next_active_states

    partial_match_score = 0.0
    full_match_score = 0.0
    for state in sorted(active_states):
        score = active_states[state]
        for arc in graph.arcs(state):
            if arc.kind is not ArcKind.ESCAPE and arc.label != word_id:
                continue

            context_score = score + arc.weight
            partial_match_score = max(partial_match_score, context_score)
            if graph.is_final(arc.nextstate):
                full_match_score = max(full_match_score, context_score)
            else:
                best = next_active_states.get(arc.nextstate)
                if best is None or best < context_score:
                    next_active_states[arc.nextstate] = context_score

    return (partial_match_score, full_match_score), next_active_states
