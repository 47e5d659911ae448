"""Configuration for context biasing.

Defines the options recognized when compiling a context graph:
- max_contexts: cap on the number of compiled phrases
- max_context_length: cap on the number of tokens per phrase
- context_score: per-token bonus (negated and scaled for escape arcs)
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class ContextConfig:
    """Configuration for building a context graph."""

    # Phrases beyond this count are ignored
    max_contexts: int = 5000

    # Phrases with more tokens than this are skipped entirely
    max_context_length: int = 100

    # Bonus awarded for every matched token
    context_score: float = 3.0

    def __post_init__(self):
        if self.max_contexts <= 0:
            raise ValueError(f"max_contexts must be positive, got {self.max_contexts}")
        if self.max_context_length <= 0:
            raise ValueError(
                f"max_context_length must be positive, got {self.max_context_length}"
            )
        self.context_score = float(self.context_score)

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> "ContextConfig":
        """Create a configuration from a dict.

        Accepts either the flat option dict or a full config holding a
        ``context`` section, e.g. ``{"context": {"context_score": 2.0}}``.
        Unrecognized keys are ignored.

        Args:
            config: Configuration dictionary

        Returns:
            ContextConfig instance
        """
        if not config:
            return cls()

        section = config.get('context', config)
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Return the options as a plain dict."""
        return asdict(self)
