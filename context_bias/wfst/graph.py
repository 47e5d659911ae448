"""Immutable context graph used during decoding.

The determinized context FST is flattened into an arena of states indexed
by integer ids. Each state holds an ordered tuple of arcs tagged with their
kind, so the blank label used by escape arcs is never confused with a real
token during matching.
"""

import enum
from typing import Dict, FrozenSet, Iterable, NamedTuple, Optional, Sequence, Tuple

import pynini
from pynini import Fst

from ..vocab import Vocabulary


class ArcKind(enum.Enum):
    """Kind of a context graph arc."""

    # Consumes one token of a phrase
    MATCH = "match"

    # Abandons a partial match and returns to the start state
    ESCAPE = "escape"


class ContextArc(NamedTuple):
    """An arc of the context graph."""

    kind: ArcKind
    label: int
    weight: float
    nextstate: int


class ContextGraph:
    """Read-only weighted acceptor over token ids.

    Built once per session and shared by every hypothesis; nothing in this
    class mutates the graph after construction.
    """

    def __init__(self,
                 arcs: Sequence[Sequence[ContextArc]],
                 start: int,
                 finals: Iterable[int],
                 fst: Optional[Fst] = None):
        """Initialize context graph.

        Args:
            arcs: Outgoing arcs per state, indexed by state id
            start: Start state id
            finals: Ids of the accepting states
            fst: The FST the arena was flattened from, kept for inspection
        """
        self._arcs: Tuple[Tuple[ContextArc, ...], ...] = tuple(
            tuple(state_arcs) for state_arcs in arcs
        )
        if not 0 <= start < len(self._arcs):
            raise ValueError(f"Invalid start state: {start}")
        self._start = start
        self._finals: FrozenSet[int] = frozenset(finals)
        self._fst = fst

    @classmethod
    def from_fst(cls, fst: Fst) -> "ContextGraph":
        """Flatten a (determinized) context FST into a context graph.

        Arcs labelled with the blank id become escape arcs. A state is
        accepting when its final weight is One, i.e. acceptance carries no
        extra weight.

        Args:
            fst: Context acceptor

        Returns:
            ContextGraph instance
        """
        one = pynini.Weight.one(fst.weight_type())
        arcs = []
        finals = []

        for state in fst.states():
            state_arcs = []
            for arc in fst.arcs(state):
                kind = ArcKind.ESCAPE if arc.ilabel == Vocabulary.BLANK_ID else ArcKind.MATCH
                state_arcs.append(ContextArc(kind, arc.ilabel, float(arc.weight), arc.nextstate))
            arcs.append(state_arcs)

            if fst.final(state) == one:
                finals.append(state)

        return cls(arcs, fst.start(), finals, fst=fst)

    @property
    def start(self) -> int:
        return self._start

    @property
    def final_states(self) -> FrozenSet[int]:
        return self._finals

    @property
    def fst(self) -> Optional[Fst]:
        return self._fst

    def num_states(self) -> int:
        return len(self._arcs)

    def num_arcs(self) -> int:
        return sum(len(state_arcs) for state_arcs in self._arcs)

    def arcs(self, state: int) -> Tuple[ContextArc, ...]:
        """Return the outgoing arcs of a state in arc order."""
        return self._arcs[state]

    def is_final(self, state: int) -> bool:
        return state in self._finals

    def start_states(self) -> Dict[int, float]:
        """Return the active-state map of a hypothesis that matched nothing yet."""
        return {self._start: 0.0}

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the context graph.

        Returns:
            Dictionary with graph statistics
        """
        num_escape = sum(
            1 for state_arcs in self._arcs for arc in state_arcs
            if arc.kind is ArcKind.ESCAPE
        )
        return {
            'num_states': self.num_states(),
            'num_arcs': self.num_arcs(),
            'num_escape_arcs': num_escape,
            'num_final_states': len(self._finals),
        }

    def __repr__(self) -> str:
        return (f"ContextGraph(num_states={self.num_states()}, "
                f"num_arcs={self.num_arcs()}, start={self._start})")
