"""Decode a solver assignment into English.

An ``Invention`` is the read-only result of one generation: the generator
(which knows the individuals and the propositions it created) plus the
solved assignment. Everything here is a query; nothing changes the
ontology.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from imaginarium import morphology
from imaginarium.generator import EnumVariable, Generator, NumericVariable, Proposition
from imaginarium.ontology import Adjective, CommonNoun, Individual, MonadicConcept, Property, Verb
from imaginarium.solver import Assignment
from imaginarium.tokens import untokenize

logger = logging.getLogger(__name__)


def format_value(value: object) -> str:
    """Render a property value: integers for numbers, yes/no for booleans."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return str(int(round(value)))
    if isinstance(value, tuple):
        return untokenize(value)
    return str(value)


class Invention:
    """A consistent population of individuals.

    Parameters:
        generator: The generator that built the problem.
        model: The solver's assignment for that problem.
    """

    def __init__(self, generator: Generator, model: Assignment) -> None:
        self.generator = generator
        self.model = model

    @property
    def ontology(self):
        return self.generator.ontology

    @property
    def individuals(self) -> list[Individual]:
        return self.generator.individuals

    def _value(self, prop: Proposition | None) -> bool:
        return prop is not None and bool(self.model.get(prop, False))

    def is_a(self, individual: Individual, concept: MonadicConcept) -> bool:
        """True if the model makes *individual* a *concept*.

        Concepts outside the individual's part of the kind graph are false.
        """
        return self._value(self.generator.is_a(individual, concept))

    def holds(self, verb: Verb, subject: Individual, obj: Individual) -> bool:
        return self._value(self.generator.holds(verb, subject, obj))

    # --- Kinds ---

    def true_kinds(self, individual: Individual) -> list[CommonNoun]:
        """Every kind the individual belongs to, starting from its declared kinds."""
        found: list[CommonNoun] = []

        def visit(kind: CommonNoun) -> None:
            if any(k is kind for k in found) or not self.is_a(individual, kind):
                return
            found.append(kind)
            for sup in kind.superkinds:
                visit(sup)
            for sub in kind.subkinds:
                visit(sub)

        for kind in individual.kinds:
            visit(kind)
        return found

    def most_specific_nouns(self, individual: Individual) -> list[CommonNoun]:
        """True kinds of *individual* that have no true subkind.

        Collects the true kinds reachable downward from the declared kinds,
        marks every strict superkind of a collected kind as redundant and
        returns what is left. Since superkinds of true kinds are true, the
        result contains no two kinds where one is a kind of the other.
        """
        nouns: list[CommonNoun] = []

        def add(kind: CommonNoun) -> None:
            if any(k is kind for k in nouns) or not self.is_a(individual, kind):
                return
            nouns.append(kind)
            for sub in kind.subkinds:
                add(sub)

        for kind in individual.kinds:
            add(kind)

        redundant: list[CommonNoun] = []

        def mark(kind: CommonNoun) -> None:
            for sup in kind.superkinds:
                if not any(r is sup for r in redundant):
                    redundant.append(sup)
                    mark(sup)

        for kind in nouns:
            mark(kind)
        return [k for k in nouns if not any(r is k for r in redundant)]

    def adjectives_describing(self, individual: Individual) -> list[Adjective]:
        """Adjectives true of *individual* that are relevant to one of its kinds."""
        result: list[Adjective] = []

        def add(adj: MonadicConcept) -> None:
            if isinstance(adj, Adjective) and not any(a is adj for a in result) and self.is_a(individual, adj):
                result.append(adj)

        for kind in self.true_kinds(individual):
            for adj in kind.relevant_adjectives:
                add(adj)
            for adj in kind.implied_adjectives:
                add(adj)
            for alt in kind.alternative_sets:
                for member in alt.members:
                    add(member)
        for adj in individual.adjectives:
            add(adj)
        return result

    # --- Properties ---

    def properties(self, individual: Individual) -> Iterator[tuple[Property, object]]:
        """(property, value) for each property whose owning kind holds."""
        for prop, var in individual.properties.items():
            if not self.is_a(individual, prop.owner):
                continue
            if isinstance(var, (NumericVariable, EnumVariable)):
                yield prop, self.model.get(var)
            else:
                yield prop, self._value(var)  # type: ignore[arg-type]

    def property_value(self, individual: Individual, name: tuple[str, ...] | list[str]) -> object:
        key = tuple(t.lower() for t in name)
        for prop, value in self.properties(individual):
            if prop.name.key == key:
                return value
        return None

    # --- Names and descriptions ---

    def _template_kind(self, individual: Individual) -> CommonNoun | None:
        for kind in (*self.most_specific_nouns(individual), *self.true_kinds(individual)):
            if kind.name_template is not None:
                return kind
            for sup in kind.ancestors():
                if sup.name_template is not None:
                    return sup
        return None

    def _suppressed(self, individual: Individual) -> set[tuple[str, ...]]:
        """Properties already shown in the individual's name."""
        suppressed: set[tuple[str, ...]] = set()
        name_prop = individual.name_property()
        if name_prop is not None and self.is_a(individual, name_prop.owner):
            suppressed.add(name_prop.name.key)
            return suppressed
        kind = self._template_kind(individual)
        if kind is not None:
            suppressed.update(self._template_references(kind.name_template or ()))
        return suppressed

    @staticmethod
    def _template_references(template: tuple[str, ...]) -> list[tuple[str, ...]]:
        refs: list[tuple[str, ...]] = []
        i = 0
        while i < len(template):
            if template[i] == "[" and "]" in template[i:]:
                end = template.index("]", i)
                refs.append(tuple(t.lower() for t in template[i + 1:end]))
                i = end + 1
            else:
                i += 1
        return refs

    def name_string(self, individual: Individual) -> str:
        """How the individual is referred to in output.

        Uses its "name" property if it has one, then the name template of
        its kind with [property] references filled in, then its identifier.
        """
        name_prop = individual.name_property()
        if name_prop is not None and self.is_a(individual, name_prop.owner):
            value = self.property_value(individual, name_prop.name.tokens)
            if value is not None:
                return format_value(value)
        kind = self._template_kind(individual)
        if kind is None:
            return individual.text
        template = kind.name_template or ()
        out: list[str] = []
        i = 0
        while i < len(template):
            token = template[i]
            if token == "[" and "]" in template[i:]:
                end = template.index("]", i)
                value = self.property_value(individual, template[i + 1:end])
                out.append(format_value(value) if value is not None else "?")
                i = end + 1
            else:
                out.append(token)
                i += 1
        return untokenize(out)

    def description(self, individual: Individual) -> str:
        """"<name> is a <adjectives> <kinds>, <property> <value>, ..."."""
        adjectives = [a.text for a in self.adjectives_describing(individual)]
        nouns = [k.text for k in self.most_specific_nouns(individual)]
        words = [", ".join(adjectives)] if adjectives else []
        words.append(" ".join(nouns) if nouns else "thing")
        phrase = " ".join(words)
        text = f"{self.name_string(individual)} is {morphology.indefinite_article(phrase)} {phrase}"
        suppressed = self._suppressed(individual)
        for prop, value in self.properties(individual):
            if prop.name.key in suppressed or value is None:
                continue
            text += f", {prop.text} {format_value(value)}"
        return text

    def descriptions(self) -> list[str]:
        return [self.description(i) for i in self.individuals]

    # --- Relationships ---

    def relationships(self) -> list[tuple[Verb, Individual, Individual]]:
        """Every (verb, subject, object) that holds, over all pairs."""
        generator = self.generator
        result: list[tuple[Verb, Individual, Individual]] = []
        verbs = self.ontology.verbs
        for subject in self.individuals:
            for obj in self.individuals:
                for verb in verbs:
                    if not generator.can_be_a(subject, verb.subject_kind):
                        continue
                    if not generator.can_be_a(obj, verb.object_kind):
                        continue
                    if self.holds(verb, subject, obj):
                        result.append((verb, subject, obj))
        return result

    def relationship_sentences(self) -> list[str]:
        return [
            f"{self.name_string(s)} {untokenize(v.singular)} {self.name_string(o)}."
            for v, s, o in self.relationships()
        ]
