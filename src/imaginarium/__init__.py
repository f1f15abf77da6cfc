"""pyImaginarium: imagine consistent worlds from English descriptions.

Describe kinds of things, their properties and the relations between them
in a small subset of English; the system compiles the description into a
constraint problem and asks z3 for a population of individuals that fits.

Public API::

    from imaginarium import Session, CommandResult
    from imaginarium import Ontology, Generator, Invention
"""

from imaginarium._version import __version__
from imaginarium.errors import (
    DefinitionError,
    GrammaticalError,
    ImaginariumError,
    NameCollisionError,
    SolverError,
)
from imaginarium.generator import Generator, Problem
from imaginarium.invention import Invention
from imaginarium.ontology import Ontology
from imaginarium.session import CommandResult, Session

__all__ = [
    "__version__",
    "CommandResult",
    "DefinitionError",
    "Generator",
    "GrammaticalError",
    "ImaginariumError",
    "Invention",
    "NameCollisionError",
    "Ontology",
    "Problem",
    "Session",
    "SolverError",
]
