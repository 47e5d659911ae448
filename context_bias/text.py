"""Phrase handling for context biasing.

Phrases are trimmed and split into characters; subword tokenization is not
supported yet.
"""

from typing import List


def split_chars(text: str) -> List[str]:
    """Split a phrase into character tokens.

    Surrounding whitespace is removed before splitting; inner whitespace is
    kept as its own token.

    Args:
        text: Phrase to split

    Returns:
        List of single-character tokens
    """
    return list(text.strip())


def load_contexts(file_path: str) -> List[str]:
    """Load context phrases from file.

    File format: one phrase per line. Blank lines are skipped.

    Args:
        file_path: Path to the context file

    Returns:
        List of phrases in file order
    """
    contexts = []

    with open(file_path, 'r', encoding='utf-8') as f:
        for line in f:
            phrase = line.strip()
            if phrase:
                contexts.append(phrase)

    return contexts
