"""Tests for context configuration."""

import pytest

from context_bias.config import ContextConfig


class TestContextConfig:
    """Test cases for ContextConfig."""

    def test_defaults(self):
        """Test default option values."""
        config = ContextConfig()

        assert config.max_contexts == 5000
        assert config.max_context_length == 100
        assert config.context_score == 3.0

    def test_context_score_is_float(self):
        """Test that an integer score is stored as float."""
        config = ContextConfig(context_score=2)

        assert isinstance(config.context_score, float)

    @pytest.mark.parametrize("options", [
        {"max_contexts": 0},
        {"max_contexts": -1},
        {"max_context_length": 0},
    ])
    def test_invalid_options(self, options):
        """Test that non-positive limits are rejected."""
        with pytest.raises(ValueError):
            ContextConfig(**options)

    def test_from_flat_dict(self):
        """Test creation from a flat option dict."""
        config = ContextConfig.from_dict({"max_contexts": 10, "context_score": 1.5})

        assert config.max_contexts == 10
        assert config.max_context_length == 100
        assert config.context_score == 1.5

    def test_from_nested_dict(self):
        """Test creation from a config with a context section."""
        config = ContextConfig.from_dict({
            "decoding": {"beam": 10},
            "context": {"max_context_length": 20, "unused": True},
        })

        assert config.max_context_length == 20
        assert config.max_contexts == 5000

    def test_from_empty_dict(self):
        """Test that an empty config gives the defaults."""
        assert ContextConfig.from_dict(None) == ContextConfig()
        assert ContextConfig.from_dict({}) == ContextConfig()

    def test_to_dict(self):
        """Test conversion back to a dict."""
        config = ContextConfig(max_contexts=3, max_context_length=4, context_score=0.5)

        assert config.to_dict() == {
            "max_contexts": 3,
            "max_context_length": 4,
            "context_score": 0.5,
        }
        assert ContextConfig.from_dict(config.to_dict()) == config
