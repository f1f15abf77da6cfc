"""Immutable position in a token stream.

Backtracking is done by keeping old cursors around: saving a cursor is the
"mark", matching from it again is the "reset".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Cursor:
    """A token stream and the index of the next token to match."""

    tokens: tuple[str, ...]
    position: int = 0

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    @property
    def current(self) -> str | None:
        """The next token, or None at end of input."""
        return None if self.at_end else self.tokens[self.position]

    @property
    def remaining(self) -> int:
        return len(self.tokens) - self.position

    def advance(self, n: int = 1) -> Cursor:
        if n > self.remaining:
            raise IndexError("Attempt to advance past end of input")
        return Cursor(self.tokens, self.position + n)

    def peek(self, n: int) -> tuple[str, ...]:
        """The next *n* tokens (fewer at end of input)."""
        return self.tokens[self.position:self.position + n]
