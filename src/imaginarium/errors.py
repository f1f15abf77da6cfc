"""Exception types raised by the parser, the ontology and the generator.

Every error is local to one command: ``Session.user_command`` catches
``ImaginariumError`` and turns it into a user-facing message.
"""

from __future__ import annotations

from collections.abc import Sequence


class ImaginariumError(ValueError):
    """Base class for all recoverable errors."""


class GrammaticalError(ImaginariumError):
    """No sentence form matched the input.

    Attributes:
        sentence: The offending input text.
    """

    def __init__(self, message: str, sentence: str) -> None:
        super().__init__(f"{message}: {sentence!r}")
        self.sentence = sentence


class NameCollisionError(ImaginariumError):
    """A name is being redefined as a different kind of thing."""

    def __init__(self, name: Sequence[str], old_type: str, new_type: str) -> None:
        text = " ".join(name)
        super().__init__(
            f"'{text}' is already defined as a {old_type}; "
            f"it can't also be a {new_type}"
        )
        self.name = tuple(name)
        self.old_type = old_type
        self.new_type = new_type


class DefinitionError(ImaginariumError):
    """Malformed ontology construction (cycles, missing domains, etc.)."""


class SolverError(ImaginariumError):
    """The solver gave up without deciding satisfiability."""
