"""Tests for decoder-side context biasing helpers."""

import pytest
import torch

from context_bias.biasing import ContextState, bias_topk, score_candidates
from context_bias.config import ContextConfig
from context_bias.vocab import Vocabulary
from context_bias.wfst.build_context import build_context_graph


@pytest.fixture
def vocab():
    return Vocabulary.from_tokens(list("acdgot"))


@pytest.fixture
def graph(vocab):
    return build_context_graph(["cat", "dog"], vocab, ContextConfig(context_score=1.0))


class TestContextState:
    """Test cases for ContextState."""

    def test_initial(self, graph):
        """Test the state of a new hypothesis."""
        state = ContextState.initial(graph)

        assert state.active_states == {graph.start: 0.0}
        assert len(state) == 1

    def test_initial_without_graph(self):
        """Test the state of a new hypothesis without contexts."""
        assert ContextState.initial(None).active_states == {}

    def test_clone(self, graph):
        """Test that a clone does not share its map."""
        state = ContextState.initial(graph)
        clone = state.clone()
        clone.active_states[123] = 1.0

        assert 123 not in state.active_states

    def test_advance_keeps_start(self, graph, vocab):
        """Test that the start state stays active after a miss."""
        state = ContextState.initial(graph)

        scores, next_state = state.advance(graph, vocab.find("a"))

        assert scores == (0.0, 0.0)
        assert next_state.active_states == {graph.start: 0.0}

    def test_advance_without_start(self, graph, vocab):
        """Test advancing without keeping the start state."""
        state = ContextState.initial(graph)

        scores, next_state = state.advance(graph, vocab.find("a"), keep_start=False)

        assert scores == (0.0, 0.0)
        assert next_state.active_states == {}

    def test_advance_full_match(self, graph, vocab):
        """Test matching a phrase across frames."""
        state = ContextState.initial(graph)
        for ch in "ca":
            _, state = state.advance(graph, vocab.find(ch))

        (partial, full), state = state.advance(graph, vocab.find("t"))

        assert partial == pytest.approx(3.0)
        assert full == pytest.approx(3.0)
        assert state.active_states == {graph.start: pytest.approx(0.0)}

    def test_new_match_after_miss(self, graph, vocab):
        """Test that a phrase can start after unrelated tokens."""
        state = ContextState.initial(graph)
        for ch in "ta":
            _, state = state.advance(graph, vocab.find(ch))
        for ch in "do":
            _, state = state.advance(graph, vocab.find(ch))

        (_, full), _ = state.advance(graph, vocab.find("g"))

        assert full == pytest.approx(3.0)

    def test_advance_without_graph(self, vocab):
        """Test advancing when no context is configured."""
        scores, next_state = ContextState().advance(None, vocab.find("c"))

        assert scores == (0.0, 0.0)
        assert next_state.active_states == {}


class TestCandidateScoring:
    """Test cases for scoring the candidates of a frame."""

    def test_score_candidates(self, graph, vocab):
        """Test scoring several candidate tokens."""
        state = ContextState.initial(graph)
        token_ids = torch.tensor([vocab.find("c"), vocab.find("a"), vocab.find("d")])

        partial, full, next_states = score_candidates(graph, state, token_ids)

        assert partial.dtype == torch.float32
        assert partial.tolist() == [1.0, 0.0, 1.0]
        assert full.tolist() == [0.0, 0.0, 0.0]
        assert len(next_states) == 3
        assert len(next_states[0]) == 2
        assert next_states[1].active_states == {graph.start: 0.0}
        # the hypothesis state is not modified
        assert state.active_states == {graph.start: 0.0}

    def test_score_candidates_without_graph(self, vocab):
        """Test that nothing is scored without a graph."""
        partial, full, next_states = score_candidates(
            None, ContextState(), torch.tensor([1, 2])
        )

        assert partial.tolist() == [0.0, 0.0]
        assert full.tolist() == [0.0, 0.0]
        assert all(len(s) == 0 for s in next_states)

    def test_bias_topk(self, graph, vocab):
        """Test selecting and scoring the best tokens of a frame."""
        log_probs = torch.full((len(vocab),), -10.0)
        log_probs[vocab.find("t")] = -0.1
        log_probs[vocab.find("o")] = -0.5
        log_probs[vocab.find("c")] = -1.0

        state = ContextState.initial(graph)
        for ch in "ca":
            _, state = state.advance(graph, vocab.find(ch))

        result = bias_topk(log_probs, graph, state, beam=3)

        assert result.token_ids.tolist() == [vocab.find("t"), vocab.find("o"), vocab.find("c")]
        assert result.partial_scores.tolist() == pytest.approx([3.0, 0.0, 1.0])
        assert result.full_scores.tolist() == pytest.approx([3.0, 0.0, 0.0])
        assert len(result.next_states) == 3

        biased = result.biased_log_probs(partial_weight=0.0, full_weight=1.0)
        assert biased.tolist() == pytest.approx([2.9, -0.5, -1.0])

    def test_bias_topk_beam_larger_than_vocab(self, graph, vocab):
        """Test that the beam is capped by the vocabulary size."""
        log_probs = torch.log_softmax(torch.randn(len(vocab)), dim=-1)

        result = bias_topk(log_probs, graph, ContextState.initial(graph), beam=100)

        assert result.token_ids.numel() == len(vocab)

    def test_bias_topk_rejects_batches(self, graph):
        """Test that a single frame is required."""
        with pytest.raises(ValueError):
            bias_topk(torch.zeros(2, 5), graph, ContextState.initial(graph), beam=2)
