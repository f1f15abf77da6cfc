"""Compile an ontology and a set of individuals into a constraint problem.

The ``Problem`` is solver-agnostic: boolean propositions ``IsA(i, c)`` and
``Holds(v, i1, i2)``, clauses over literals, (conditional) cardinality
constraints, typed variables for property values and soft bias literals.
``imaginarium.solver`` turns it into a z3 query.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from imaginarium.errors import DefinitionError
from imaginarium.ontology import (
    Adjective,
    BooleanDomain,
    CommonNoun,
    Enumeration,
    Individual,
    MonadicConcept,
    NumericRange,
    Ontology,
    Verb,
)
from imaginarium.tokens import untokenize

if TYPE_CHECKING:
    from imaginarium.invention import Invention

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Problem representation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class Proposition:
    """A boolean unknown, e.g. ``IsA(Rex, dog)``."""

    predicate: str
    args: tuple[object, ...]

    def __str__(self) -> str:
        names = ", ".join(getattr(a, "text", str(a)) for a in self.args)
        return f"{self.predicate}({names})"


@dataclass(frozen=True, slots=True)
class Literal:
    proposition: Proposition
    positive: bool = True

    def __invert__(self) -> Literal:
        return Literal(self.proposition, not self.positive)

    def __str__(self) -> str:
        return str(self.proposition) if self.positive else f"!{self.proposition}"


@dataclass(frozen=True)
class Cardinality:
    """Between *at_least* and *at_most* of *literals* are true.

    If *condition* is given the constraint only applies when it holds.
    """

    literals: tuple[Literal, ...]
    at_least: int | None = None
    at_most: int | None = None
    condition: Literal | None = None


@dataclass(frozen=True, eq=False)
class NumericVariable:
    name: str
    low: float
    high: float


@dataclass(frozen=True, eq=False)
class EnumVariable:
    name: str
    values: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class SoftValue:
    """Prefer *variable* to take *value* (an index for enumerations)."""

    variable: NumericVariable | EnumVariable
    value: float | int


Variable = NumericVariable | EnumVariable


@dataclass
class Problem:
    """Everything the solver needs, in insertion order."""

    propositions: dict[tuple, Proposition] = field(default_factory=dict)
    clauses: list[tuple[Literal, ...]] = field(default_factory=list)
    cardinalities: list[Cardinality] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    soft_literals: list[Literal] = field(default_factory=list)
    soft_values: list[SoftValue] = field(default_factory=list)

    def proposition(self, predicate: str, *args: object) -> Proposition:
        """Find or create the proposition *predicate(args)*."""
        key = (predicate, *(id(a) for a in args))
        prop = self.propositions.get(key)
        if prop is None:
            prop = Proposition(predicate, args)
            self.propositions[key] = prop
        return prop

    def find(self, predicate: str, *args: object) -> Proposition | None:
        return self.propositions.get((predicate, *(id(a) for a in args)))

    def add_clause(self, *literals: Literal) -> None:
        self.clauses.append(tuple(literals))

    def implies(self, a: Literal, b: Literal) -> None:
        self.add_clause(~a, b)

    def at_most_one(self, literals: Sequence[Literal], condition: Literal | None = None) -> None:
        if len(literals) > 1:
            self.cardinalities.append(Cardinality(tuple(literals), None, 1, condition))

    def at_least_one(self, literals: Sequence[Literal], condition: Literal | None = None) -> None:
        self.add_clause(*(() if condition is None else (~condition,)), *literals)

    def exactly_one(self, literals: Sequence[Literal], condition: Literal | None = None) -> None:
        self.cardinalities.append(Cardinality(tuple(literals), 1, 1, condition))

    def bias(self, literal: Literal) -> None:
        self.soft_literals.append(literal)

    def bias_value(self, variable: Variable, value: float | int) -> None:
        self.soft_values.append(SoftValue(variable, value))

    def stats(self) -> dict[str, int]:
        return {
            "propositions": len(self.propositions),
            "clauses": len(self.clauses),
            "cardinalities": len(self.cardinalities),
            "variables": len(self.variables),
            "soft": len(self.soft_literals) + len(self.soft_values),
        }


def _lit(prop: Proposition) -> Literal:
    return Literal(prop, True)


# ---------------------------------------------------------------------------
# The compiler
# ---------------------------------------------------------------------------

class Generator:
    """Builds and solves the problem for one generation request.

    Parameters:
        ontology: Concepts to instantiate.
        kind: Kind of the ephemeral individuals to create, if any.
        count: How many ephemeral individuals to create.
        individuals: Further (permanent) individuals to include.
        seed: Seed for the random bias choices.
    """

    def __init__(
        self,
        ontology: Ontology,
        kind: CommonNoun | None = None,
        count: int = 1,
        *,
        individuals: Iterable[Individual] = (),
        seed: int | None = None,
    ) -> None:
        self.ontology = ontology
        self.kind = kind
        self.count = count
        self.individuals: list[Individual] = []
        if kind is not None:
            for n in range(count):
                self.individuals.append(Individual((*kind.singular, str(n + 1)), [kind]))
        self.individuals.extend(individuals)
        self._rng = random.Random(seed)
        self._can_be: dict[int, list[CommonNoun]] = {}
        self.problem = Problem()

    # --- Queries used by the decoder ---

    def can_be_a(self, individual: Individual, kind: CommonNoun | None) -> bool:
        """Whether *kind* is in the part of the kind graph *individual* lives in."""
        return kind is not None and any(k is kind for k in self._can_be.get(id(individual), ()))

    def kinds_of(self, individual: Individual) -> list[CommonNoun]:
        return list(self._can_be.get(id(individual), ()))

    def is_a(self, individual: Individual, concept: MonadicConcept) -> Proposition | None:
        return self.problem.find("IsA", individual, concept)

    def holds(self, verb: Verb, subject: Individual, obj: Individual) -> Proposition | None:
        return self.problem.find("Holds", verb, subject, obj)

    # --- Compilation ---

    def _is_a(self, individual: Individual, concept: MonadicConcept) -> Literal:
        return _lit(self.problem.proposition("IsA", individual, concept))

    def _component(self, kinds: Sequence[CommonNoun]) -> list[CommonNoun]:
        """Every kind connected to *kinds* through sub- or superkind edges."""
        seen: list[CommonNoun] = []
        stack = list(kinds)
        while stack:
            k = stack.pop()
            if any(s is k for s in seen):
                continue
            seen.append(k)
            stack.extend(k.superkinds)
            stack.extend(k.subkinds)
        return seen

    def _below(self, kinds: Sequence[CommonNoun]) -> list[CommonNoun]:
        """*kinds* and all of their transitive subkinds."""
        seen: list[CommonNoun] = []
        stack = list(kinds)
        while stack:
            k = stack.pop()
            if any(s is k for s in seen):
                continue
            seen.append(k)
            stack.extend(k.subkinds)
        return seen

    def rebuild(self) -> Problem:
        """Compile the ontology into a fresh ``Problem``."""
        self.problem = Problem()
        self._can_be = {}
        for individual in self.individuals:
            individual.properties = {}
            self._can_be[id(individual)] = self._component(individual.kinds)
        for individual in self.individuals:
            self._encode_kinds(individual)
            self._encode_adjectives(individual)
            self._encode_properties(individual)
        for verb in self.ontology.verbs:
            self._encode_verb(verb)
        self._encode_relations()
        logger.debug(
            "Compiled %d individuals: %s", len(self.individuals), self.problem.stats(),
        )
        return self.problem

    def _encode_kinds(self, individual: Individual) -> None:
        problem = self.problem
        component = self._can_be[id(individual)]
        below = self._below(individual.kinds)
        above = {id(a) for k in individual.kinds for a in k.ancestors()}
        for kind in component:
            is_kind = self._is_a(individual, kind)
            for sup in kind.superkinds:
                problem.implies(is_kind, self._is_a(individual, sup))
            subs = kind.subkinds
            if subs:
                sub_lits = [self._is_a(individual, s) for s in subs]
                problem.exactly_one(sub_lits, condition=is_kind)
                problem.bias(self._rng.choice(sub_lits))
            if id(kind) not in above and not any(b is kind for b in below):
                # Outside the declared kinds' lattice: only via a shared subkind.
                shared = [
                    self._is_a(individual, b)
                    for b in self._below([kind])
                    if any(d is b for d in below)
                ]
                problem.add_clause(~is_kind, *shared)
        for kind in individual.kinds:
            problem.add_clause(self._is_a(individual, kind))

    def _encode_adjectives(self, individual: Individual) -> None:
        problem = self.problem
        relevant: dict[int, tuple[MonadicConcept, list[CommonNoun]]] = {}

        def relevant_to(concept: MonadicConcept, kind: CommonNoun) -> None:
            relevant.setdefault(id(concept), (concept, []))[1].append(kind)

        for kind in self._can_be[id(individual)]:
            is_kind = self._is_a(individual, kind)
            for adj in kind.relevant_adjectives:
                relevant_to(adj, kind)
            for adj in kind.implied_adjectives:
                relevant_to(adj, kind)
                problem.implies(is_kind, self._is_a(individual, adj))
            for alt in kind.alternative_sets:
                lits = [self._is_a(individual, m) for m in alt.members]
                for m in alt.members:
                    if isinstance(m, Adjective):
                        relevant_to(m, kind)
                if alt.exhaustive:
                    problem.exactly_one(lits, condition=is_kind)
                else:
                    problem.at_most_one(lits, condition=is_kind)
        for adj, kinds in relevant.values():
            is_adj = self._is_a(individual, adj)
            problem.add_clause(~is_adj, *(self._is_a(individual, k) for k in kinds))
            problem.bias(is_adj if self._rng.random() < 0.5 else ~is_adj)
        for adj in individual.adjectives:
            problem.add_clause(self._is_a(individual, adj))

    def _encode_properties(self, individual: Individual) -> None:
        problem = self.problem
        for kind in self._can_be[id(individual)]:
            if kind.name_template is not None:
                self._check_template(kind)
            for prop in kind.properties.values():
                name = f"{individual.text}.{prop.text}"
                domain = prop.domain
                if domain is None:
                    raise DefinitionError(
                        f"The property '{prop.text}' of {untokenize(kind.plural)} has no possible values"
                    )
                if isinstance(domain, NumericRange):
                    var: object = NumericVariable(name, domain.low, domain.high)
                    problem.variables.append(var)  # type: ignore[arg-type]
                    problem.bias_value(var, self._random_number(domain))  # type: ignore[arg-type]
                elif isinstance(domain, Enumeration):
                    var = EnumVariable(name, domain.values)
                    problem.variables.append(var)  # type: ignore[arg-type]
                    problem.bias_value(var, self._rng.randrange(len(domain.values)))  # type: ignore[arg-type]
                elif isinstance(domain, BooleanDomain):
                    var = problem.proposition("Has", individual, prop)
                    problem.bias(_lit(var) if self._rng.random() < 0.5 else ~_lit(var))
                else:
                    raise DefinitionError(f"Unknown domain for property '{prop.text}'")
                individual.properties[prop] = var

    def _random_number(self, domain: NumericRange) -> float:
        if domain.high - domain.low >= 1:
            return float(self._rng.randint(int(-(-domain.low // 1)), int(domain.high // 1)))
        return self._rng.uniform(domain.low, domain.high)

    def _check_template(self, kind: CommonNoun) -> None:
        template = kind.name_template or ()
        for i, token in enumerate(template):
            if token != "[":
                continue
            try:
                end = template.index("]", i)
            except ValueError:
                raise DefinitionError(
                    f"Unclosed [ in the name template of {untokenize(kind.plural)}"
                ) from None
            name = template[i + 1:end]
            if kind.property_named(name) is None:
                raise DefinitionError(
                    f"The name template of {untokenize(kind.plural)} uses unknown property "
                    f"'{untokenize(name)}'"
                )

    def _encode_verb(self, verb: Verb) -> None:
        problem = self.problem
        subject_kind, object_kind = verb.subject_kind, verb.object_kind
        if subject_kind is None or object_kind is None:
            return
        subjects = [i for i in self.individuals if self.can_be_a(i, subject_kind)]
        objects = [i for i in self.individuals if self.can_be_a(i, object_kind)]
        for s in subjects:
            row: list[Literal] = []
            for o in objects:
                h = _lit(problem.proposition("Holds", verb, s, o))
                row.append(h)
                problem.implies(h, self._is_a(s, subject_kind))
                problem.implies(h, self._is_a(o, object_kind))
                problem.bias(h if self._rng.random() < verb.density else ~h)
            if verb.is_function:
                problem.at_most_one(row)
            if verb.is_total:
                problem.at_least_one(row, condition=self._is_a(s, subject_kind))
        for s in subjects:
            for o in objects:
                h = _lit(problem.proposition("Holds", verb, s, o))
                back = problem.find("Holds", verb, o, s)
                if s is o:
                    if verb.is_reflexive:
                        problem.add_clause(
                            ~self._is_a(s, subject_kind), ~self._is_a(s, object_kind), h,
                        )
                    if verb.is_anti_reflexive:
                        problem.add_clause(~h)
                    continue
                if verb.is_symmetric:
                    if back is None:
                        problem.add_clause(~h)
                    else:
                        problem.implies(h, _lit(back))
                if verb.is_anti_symmetric and back is not None:
                    problem.add_clause(~h, ~_lit(back))
        # Generalizations and exclusions may refer to verbs encoded later.
        for s in subjects:
            for o in objects:
                h = _lit(problem.proposition("Holds", verb, s, o))
                for general in verb.generalizations:
                    if self._can_relate(general, s, o):
                        problem.implies(h, _lit(problem.proposition("Holds", general, s, o)))
                    else:
                        problem.add_clause(~h)
                for other in verb.mutual_exclusions:
                    if self._can_relate(other, s, o):
                        problem.add_clause(~h, ~_lit(problem.proposition("Holds", other, s, o)))

    def _can_relate(self, verb: Verb, subject: Individual, obj: Individual) -> bool:
        return self.can_be_a(subject, verb.subject_kind) and self.can_be_a(obj, verb.object_kind)

    def _encode_relations(self) -> None:
        members = {id(i) for i in self.individuals}
        for verb, subject, obj in self.ontology.relations:
            if id(subject) not in members or id(obj) not in members:
                continue
            if self._can_relate(verb, subject, obj):
                self.problem.add_clause(_lit(self.problem.proposition("Holds", verb, subject, obj)))
            else:
                logger.debug(
                    "Asserted relation can't hold: %s %s %s",
                    subject.text, untokenize(verb.singular), obj.text,
                )
                self.problem.add_clause()

    # --- Solving ---

    def solve(self, *, timeout_ms: int | None = None, seed: int | None = None) -> Invention | None:
        """Compile, solve and decode; None if no consistent population exists."""
        from imaginarium.invention import Invention
        from imaginarium.solver import solve

        problem = self.rebuild()
        assignment = solve(problem, seed=seed, timeout_ms=timeout_ms)
        if assignment is None:
            return None
        return Invention(self, assignment)
