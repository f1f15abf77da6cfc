"""Tests for imaginarium.generator: compiling an ontology into a Problem."""

import pytest

from imaginarium.errors import DefinitionError
from imaginarium.generator import (
    Cardinality,
    EnumVariable,
    Generator,
    Literal,
    NumericVariable,
    Problem,
)
from imaginarium.invention import Invention
from imaginarium.ontology import (
    AlternativeSet,
    BooleanDomain,
    Enumeration,
    Individual,
    NumericRange,
    Property,
)
from imaginarium.solver import solve
from imaginarium.tokens import TokenString


def add_property(kind, name, domain):
    prop = Property(TokenString(tuple(name.split())), kind, domain)
    kind.properties[prop.name] = prop
    return prop


@pytest.fixture
def zoo(ontology):
    animal = ontology.common_noun(("animal",))
    dog = ontology.common_noun(("dog",))
    cat = ontology.common_noun(("cat",))
    ontology.add_subkind(dog, animal)
    ontology.add_subkind(cat, animal)
    return ontology, animal, dog, cat


class TestProblem:
    def test_propositions_are_shared(self):
        problem = Problem()
        a, b = object(), object()
        p = problem.proposition("IsA", a, b)
        assert problem.proposition("IsA", a, b) is p
        assert problem.proposition("IsA", b, a) is not p
        assert problem.find("IsA", a, b) is p
        assert problem.find("Holds", a, b) is None

    def test_literal_negation(self):
        p = Problem().proposition("P")
        lit = Literal(p)
        assert (~lit).positive is False
        assert ~~lit == lit
        assert str(~lit) == "!P()"

    def test_implies_is_a_clause(self):
        problem = Problem()
        a = Literal(problem.proposition("A"))
        b = Literal(problem.proposition("B"))
        problem.implies(a, b)
        assert problem.clauses == [(~a, b)]

    def test_at_most_one_of_one_is_trivial(self):
        problem = Problem()
        problem.at_most_one([Literal(problem.proposition("A"))])
        assert problem.cardinalities == []

    def test_conditional_cardinality(self):
        problem = Problem()
        c = Literal(problem.proposition("C"))
        lits = [Literal(problem.proposition("X", n)) for n in (1, 2)]
        problem.exactly_one(lits, condition=c)
        assert problem.cardinalities == [Cardinality(tuple(lits), 1, 1, c)]

    def test_conditional_at_least_one(self):
        problem = Problem()
        c = Literal(problem.proposition("C"))
        x = Literal(problem.proposition("X"))
        problem.at_least_one([x], condition=c)
        assert problem.clauses == [(~c, x)]

    def test_stats(self):
        problem = Problem()
        problem.bias(Literal(problem.proposition("A")))
        assert problem.stats()["propositions"] == 1
        assert problem.stats()["soft"] == 1


class TestKinds:
    def test_ephemeral_individuals(self, zoo):
        ontology, animal, _, _ = zoo
        generator = Generator(ontology, animal, 3)
        assert [i.text for i in generator.individuals] == ["animal 1", "animal 2", "animal 3"]
        assert not any(i.permanent for i in generator.individuals)

    def test_declared_kind_is_asserted(self, zoo):
        ontology, animal, _, _ = zoo
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (individual,) = generator.individuals
        assert (Literal(generator.is_a(individual, animal)),) in problem.clauses

    def test_subkinds_are_exclusive_and_exhaustive(self, zoo):
        ontology, animal, dog, cat = zoo
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (i,) = generator.individuals
        expected = Cardinality(
            (Literal(generator.is_a(i, dog)), Literal(generator.is_a(i, cat))),
            1, 1, Literal(generator.is_a(i, animal)),
        )
        assert expected in problem.cardinalities

    def test_subkind_implies_superkind(self, zoo):
        ontology, animal, dog, _ = zoo
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (i,) = generator.individuals
        assert (~Literal(generator.is_a(i, dog)), Literal(generator.is_a(i, animal))) in problem.clauses

    def test_unrelated_kinds_are_not_encoded(self, zoo):
        ontology, animal, _, _ = zoo
        rock = ontology.common_noun(("rock",))
        generator = Generator(ontology, animal)
        generator.rebuild()
        (i,) = generator.individuals
        assert generator.is_a(i, rock) is None
        assert not generator.can_be_a(i, rock)
        assert generator.can_be_a(i, animal)

    def test_multiple_inheritance_reaches_shared_subkind(self, zoo):
        ontology, animal, dog, _ = zoo
        pet = ontology.common_noun(("pet",))
        ontology.add_subkind(dog, pet)
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (i,) = generator.individuals
        problem.add_clause(Literal(generator.is_a(i, dog)))
        model = solve(problem, seed=1)
        assert model is not None
        invention = Invention(generator, model)
        assert invention.is_a(i, pet)
        assert invention.most_specific_nouns(i) == [dog]

    def test_kind_off_the_lattice_is_false(self, zoo):
        ontology, animal, dog, _ = zoo
        pet = ontology.common_noun(("pet",))
        goldfish = ontology.common_noun(("goldfish",))
        ontology.add_subkind(dog, pet)
        ontology.add_subkind(goldfish, pet)
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (i,) = generator.individuals
        problem.add_clause(Literal(generator.is_a(i, goldfish)))
        assert solve(problem, seed=1) is None

    def test_other_root_implies_shared_subkind(self, zoo):
        ontology, animal, dog, _ = zoo
        pet = ontology.common_noun(("pet",))
        ontology.add_subkind(dog, pet)
        generator = Generator(ontology, animal)
        problem = generator.rebuild()
        (i,) = generator.individuals
        clause = (~Literal(generator.is_a(i, pet)), Literal(generator.is_a(i, dog)))
        assert clause in problem.clauses


class TestAdjectives:
    def test_alternative_set(self, zoo):
        ontology, _, _, cat = zoo
        black = ontology.adjective(("black",))
        white = ontology.adjective(("white",))
        cat.alternative_sets.append(AlternativeSet((black, white), exhaustive=True))
        generator = Generator(ontology, cat)
        problem = generator.rebuild()
        (i,) = generator.individuals
        expected = Cardinality(
            (Literal(generator.is_a(i, black)), Literal(generator.is_a(i, white))),
            1, 1, Literal(generator.is_a(i, cat)),
        )
        assert expected in problem.cardinalities

    def test_adjective_requires_a_relevant_kind(self, zoo):
        ontology, _, _, cat = zoo
        fluffy = ontology.adjective(("fluffy",))
        cat.relevant_adjectives.append(fluffy)
        generator = Generator(ontology, cat)
        problem = generator.rebuild()
        (i,) = generator.individuals
        assert (~Literal(generator.is_a(i, fluffy)), Literal(generator.is_a(i, cat))) in problem.clauses

    def test_implied_adjective(self, zoo):
        ontology, _, dog, _ = zoo
        loyal = ontology.adjective(("loyal",))
        dog.implied_adjectives.append(loyal)
        generator = Generator(ontology, dog)
        problem = generator.rebuild()
        (i,) = generator.individuals
        assert (~Literal(generator.is_a(i, dog)), Literal(generator.is_a(i, loyal))) in problem.clauses


class TestProperties:
    def test_variables_per_domain(self, zoo):
        ontology, _, _, cat = zoo
        age = add_property(cat, "age", NumericRange(1, 20))
        food = add_property(cat, "food", Enumeration((("fish",), ("milk",))))
        collar = add_property(cat, "collar", BooleanDomain())
        generator = Generator(ontology, cat, seed=3)
        problem = generator.rebuild()
        (i,) = generator.individuals
        assert isinstance(i.properties[age], NumericVariable)
        assert isinstance(i.properties[food], EnumVariable)
        assert i.properties[collar] is problem.find("Has", i, collar)
        assert len(problem.soft_values) == 2
        for soft in problem.soft_values:
            if soft.variable is i.properties[age]:
                assert 1 <= soft.value <= 20

    def test_inherited_property(self, zoo):
        ontology, animal, dog, _ = zoo
        add_property(animal, "age", NumericRange(0, 15))
        generator = Generator(ontology, dog)
        generator.rebuild()
        (i,) = generator.individuals
        assert [p.text for p in i.properties] == ["age"]

    def test_property_without_domain(self, zoo):
        ontology, _, _, cat = zoo
        add_property(cat, "mood", None)
        with pytest.raises(DefinitionError, match="no possible values"):
            Generator(ontology, cat).rebuild()

    def test_template_with_unknown_property(self, zoo):
        ontology, _, _, cat = zoo
        cat.name_template = ("[", "name", "]")
        with pytest.raises(DefinitionError, match="unknown property"):
            Generator(ontology, cat).rebuild()


class TestVerbs:
    def make_verb(self, ontology, subject, obj, **flags):
        verb = ontology.verb(("chase",))
        verb.subject_kind = subject
        verb.object_kind = obj
        for name, value in flags.items():
            setattr(verb, name, value)
        return verb

    def test_holds_implies_kinds(self, zoo):
        ontology, animal, dog, cat = zoo
        chase = self.make_verb(ontology, dog, cat)
        generator = Generator(ontology, animal, 2)
        problem = generator.rebuild()
        a, b = generator.individuals
        h = Literal(generator.holds(chase, a, b))
        assert (~h, Literal(generator.is_a(a, dog))) in problem.clauses
        assert (~h, Literal(generator.is_a(b, cat))) in problem.clauses

    def test_no_holds_outside_domain(self, zoo):
        ontology, _, dog, cat = zoo
        rock = ontology.common_noun(("rock",))
        chase = self.make_verb(ontology, dog, cat)
        generator = Generator(ontology, rock, 2)
        generator.rebuild()
        a, b = generator.individuals
        assert generator.holds(chase, a, b) is None

    def test_function_and_total(self, zoo):
        ontology, animal, dog, cat = zoo
        self.make_verb(ontology, dog, cat, is_function=True, is_total=True)
        generator = Generator(ontology, animal, 3)
        problem = generator.rebuild()
        rows = [c for c in problem.cardinalities if c.at_most == 1 and c.at_least is None]
        assert len(rows) == 3

    def test_anti_reflexive(self, zoo):
        ontology, animal, _, _ = zoo
        chase = self.make_verb(ontology, animal, animal, is_anti_reflexive=True)
        generator = Generator(ontology, animal, 2)
        problem = generator.rebuild()
        a, _ = generator.individuals
        assert (~Literal(generator.holds(chase, a, a)),) in problem.clauses

    def test_symmetric(self, zoo):
        ontology, animal, _, _ = zoo
        chase = self.make_verb(ontology, animal, animal, is_symmetric=True)
        generator = Generator(ontology, animal, 2)
        problem = generator.rebuild()
        a, b = generator.individuals
        ab = Literal(generator.holds(chase, a, b))
        ba = Literal(generator.holds(chase, b, a))
        assert (~ab, ba) in problem.clauses
        assert (~ba, ab) in problem.clauses

    def test_relation_that_cannot_hold(self, ontology):
        dog = ontology.common_noun(("dog",))
        rock = ontology.common_noun(("rock",))
        chase = self.make_verb(ontology, dog, dog)
        rex = ontology.proper_noun(("Rex",)).individual
        stone = ontology.proper_noun(("Stone",)).individual
        rex.kinds.append(dog)
        stone.kinds.append(rock)
        ontology.assert_relation(chase, rex, stone)
        generator = Generator(ontology, individuals=ontology.individuals)
        problem = generator.rebuild()
        assert () in problem.clauses

    def test_rebuild_is_fresh(self, zoo):
        ontology, animal, _, _ = zoo
        generator = Generator(ontology, animal)
        first = generator.rebuild()
        second = generator.rebuild()
        assert first is not second
        assert first.stats() == second.stats()


def test_individual_kinds_from_constructor(zoo):
    ontology, _, dog, _ = zoo
    rex = Individual(("Rex",), [dog], permanent=True)
    generator = Generator(ontology, individuals=[rex])
    generator.rebuild()
    assert generator.kinds_of(rex)
