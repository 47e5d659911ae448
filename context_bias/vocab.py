"""Token vocabulary for context biasing.

Wraps an OpenFST symbol table so the graph builder can resolve tokens to
the ids emitted by the acoustic model:
- id 0 is reserved for the blank/epsilon symbol
- a lookup miss is reported as -1
"""

from typing import Iterable, Iterator, Optional, Tuple

import pynini
from pynini import SymbolTable


class Vocabulary:
    """Read-only mapping from token strings to ids."""

    BLANK = "<blank>"
    BLANK_ID = 0
    NOT_FOUND = -1

    def __init__(self, symbols: SymbolTable):
        """Initialize vocabulary.

        Args:
            symbols: Symbol table holding the token inventory. Id 0 is
                expected to be the blank symbol.
        """
        if symbols is None:
            raise ValueError("Symbol table should not be None!")
        self.symbols = symbols

    @classmethod
    def from_tokens(cls, tokens: Iterable[str], blank: str = BLANK) -> "Vocabulary":
        """Create a vocabulary from an ordered token list.

        The blank symbol always receives id 0; the tokens follow in order
        starting at id 1. Duplicates keep their first id.

        Args:
            tokens: Tokens to register
            blank: Blank symbol name

        Returns:
            Vocabulary instance
        """
        symbols = SymbolTable()
        symbols.add_symbol(blank, cls.BLANK_ID)
        for token in tokens:
            if symbols.find(token) == cls.NOT_FOUND:
                symbols.add_symbol(token)
        return cls(symbols)

    @classmethod
    def read_text(cls, path: str) -> "Vocabulary":
        """Load a vocabulary from an OpenFST text symbol file.

        File format: one ``token id`` pair per line.

        Args:
            path: Path to the symbol file

        Returns:
            Vocabulary instance
        """
        return cls(pynini.SymbolTable.read_text(path))

    def find(self, token: str) -> int:
        """Look up the id of a token.

        Args:
            token: Token string

        Returns:
            Token id, or -1 if the token is unknown
        """
        return self.symbols.find(token)

    def token(self, token_id: int) -> str:
        """Look up the token string of an id.

        Args:
            token_id: Token id

        Returns:
            Token string
        """
        if not self.symbols.member(token_id):
            raise ValueError(f"Unknown token id: {token_id}")
        return self.symbols.find(token_id)

    def __contains__(self, token: str) -> bool:
        return self.find(token) != self.NOT_FOUND

    def __len__(self) -> int:
        return self.symbols.num_symbols()

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(self.symbols)


def load_vocabulary(path: Optional[str] = None,
                    tokens: Optional[Iterable[str]] = None) -> Vocabulary:
    """Load a vocabulary from a symbol file or a token list.

    Args:
        path: Path to an OpenFST text symbol file
        tokens: Token list, used when no path is given

    Returns:
        Vocabulary instance
    """
    if path is not None:
        return Vocabulary.read_text(path)
    if tokens is not None:
        return Vocabulary.from_tokens(tokens)
    raise ValueError("Either path or tokens must be provided")
