"""
Tokenizer utility.

Turns topic text and search queries into comparable lower-case word sets.
"""

import re
from typing import Iterable, List, Set

WORD_RE = re.compile(r"[a-z0-9]+")

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does",
    "for", "from", "how", "in", "into", "is", "it", "its", "of", "on", "or",
    "that", "the", "their", "this", "to", "vs", "was", "what", "when",
    "where", "which", "while", "who", "why", "with",
})


def tokenize(text: str) -> List[str]:
    """
    Split text into lower-case words, dropping stop words.

    Order and repeats are kept so callers can compare phrases.
    """
    if not text:
        return []
    return [w for w in WORD_RE.findall(text.lower()) if w not in STOP_WORDS]


def token_set(texts: Iterable[str]) -> Set[str]:
    """Union of the tokens of several texts."""
    tokens: Set[str] = set()
    for text in texts:
        tokens.update(tokenize(text))
    return tokens


def normalize_phrase(text: str) -> str:
    """Collapse text to its token sequence for exact phrase comparison."""
    return " ".join(tokenize(text))
