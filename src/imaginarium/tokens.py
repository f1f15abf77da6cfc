"""Tokenization and case-normalized token strings.

Sentences are split into word tokens; punctuation that carries meaning in
the grammar (commas, quotes, brackets, possessive ``'s``) becomes a separate
token. ``TokenString`` is the dictionary key used throughout the lexicon:
two spellings that differ only in case are the same key.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

# Words (letters, digits, hyphens; file names like "defs/cats.txt" stay
# whole), numbers with a decimal point, or single punctuation characters.
_TOKEN_RE = re.compile(
    r"-?\d+(?:\.\d+)?(?![\w/])|[/~]?\w[\w\-]*(?:[./]\w[\w\-]*)*|'s\b|[,\"\[\]():;!'?]"
)

# Tokens that attach to the preceding word when untokenizing.
_NO_SPACE_BEFORE = {",", "'s", ")", "]", ":", ";", "!", "?", "."}
_NO_SPACE_AFTER = {"(", "["}


@dataclass(frozen=True, slots=True)
class TokenString:
    """Immutable, case-normalized sequence of words.

    Attributes:
        tokens: The tokens as written.
        key: The lower-cased tokens; equality and hashing use only this.
    """

    tokens: tuple[str, ...] = field(compare=False)
    key: tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "key", tuple(t.lower() for t in self.tokens))

    @classmethod
    def of(cls, tokens: Iterable[str] | str) -> TokenString:
        """Build a TokenString from a token sequence or raw text."""
        if isinstance(tokens, str):
            return cls(tuple(tokenize(tokens)))
        return cls(tuple(tokens))

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self):
        return iter(self.tokens)

    def __str__(self) -> str:
        return untokenize(self.tokens)


def tokenize(text: str) -> list[str]:
    """Split *text* into tokens, dropping sentence-final punctuation."""
    text = text.strip().rstrip(".? ")
    return _TOKEN_RE.findall(text)


def untokenize(tokens: Sequence[str]) -> str:
    """Join tokens back into readable text."""
    out: list[str] = []
    for t in tokens:
        if not t:
            continue
        if out and t not in _NO_SPACE_BEFORE and out[-1] not in _NO_SPACE_AFTER:
            out.append(" ")
        out.append(t)
    return "".join(out)


def same_tokens(a: Sequence[str], b: Sequence[str]) -> bool:
    """Case-insensitive comparison of two token sequences."""
    return len(a) == len(b) and all(x.lower() == y.lower() for x, y in zip(a, b))
