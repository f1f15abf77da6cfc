"""Token trie: the lexicon index for multi-word names.

Each node is keyed by a lower-cased token. Looking up a token stream returns
the longest stored name that starts at the given position, so "house cat" is
preferred over "house" when both are defined.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class TrieMatch(Generic[T]):
    """A value found in the trie.

    Attributes:
        value: The stored referent.
        end: Index just past the last matched token.
        is_plural: Whether the matched spelling was stored as a plural form.
    """

    value: T
    end: int
    is_plural: bool = False


@dataclass
class _Node(Generic[T]):
    children: dict[str, _Node[T]] = field(default_factory=dict)
    value: T | None = None
    is_plural: bool = False


class TokenTrie(Generic[T]):
    """Maps case-insensitive token sequences to values.

    Parameters:
        name: Label used in log messages.
    """

    def __init__(self, name: str = "trie") -> None:
        self.name = name
        self._root: _Node[T] = _Node()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    # --- Mutation ---

    def store(self, tokens: Sequence[str], value: T | None, *, plural: bool = False) -> None:
        """Bind *tokens* to *value*; a value of None removes the binding."""
        if not tokens:
            raise ValueError(f"{self.name}: cannot store an empty name")
        node = self._root
        for t in tokens:
            node = node.children.setdefault(t.lower(), _Node())
        if node.value is None and value is not None:
            self._size += 1
        elif node.value is not None and value is None:
            self._size -= 1
        node.value = value
        node.is_plural = plural and value is not None
        logger.debug("%s: stored %s -> %r", self.name, " ".join(tokens), value)

    # --- Lookup ---

    def matches(self, tokens: Sequence[str], start: int = 0) -> list[TrieMatch[T]]:
        """All names stored in the trie that begin at *start*, longest first."""
        found: list[TrieMatch[T]] = []
        node = self._root
        i = start
        while i < len(tokens):
            node = node.children.get(tokens[i].lower())  # type: ignore[assignment]
            if node is None:
                break
            i += 1
            if node.value is not None:
                found.append(TrieMatch(node.value, i, node.is_plural))
        found.reverse()
        return found

    def lookup(self, tokens: Sequence[str], start: int = 0) -> TrieMatch[T] | None:
        """The longest name beginning at *start*, or None."""
        found = self.matches(tokens, start)
        return found[0] if found else None

    def find(self, tokens: Sequence[str]) -> TrieMatch[T] | None:
        """Exact lookup: *tokens* must be a complete stored name."""
        for m in self.matches(tokens):
            if m.end == len(tokens):
                return m
        return None

    def contents(self) -> Iterator[T]:
        """Every stored value, each reported once."""
        seen: set[int] = set()
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.value is not None and id(node.value) not in seen:
                seen.add(id(node.value))
                yield node.value
            stack.extend(node.children.values())
