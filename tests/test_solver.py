"""Tests for imaginarium.solver: running problems through z3."""

from imaginarium.generator import EnumVariable, Literal, NumericVariable, Problem
from imaginarium.solver import Assignment, solve


def lit(problem, name, *args):
    return Literal(problem.proposition(name, *args))


class TestAssignment:
    def test_keyed_by_identity(self):
        problem = Problem()
        a = problem.proposition("A")
        b = problem.proposition("B")
        assignment = Assignment()
        assignment.set(a, True)
        assert assignment[a] is True
        assert a in assignment
        assert b not in assignment
        assert assignment.get(b, False) is False
        assert len(assignment) == 1


class TestSolve:
    def test_clauses(self):
        problem = Problem()
        a, b = lit(problem, "A"), lit(problem, "B")
        problem.add_clause(a)
        problem.implies(a, b)
        result = solve(problem, seed=0)
        assert result[a.proposition] is True
        assert result[b.proposition] is True

    def test_unsatisfiable(self):
        problem = Problem()
        a = lit(problem, "A")
        problem.add_clause(a)
        problem.add_clause(~a)
        assert solve(problem) is None

    def test_empty_clause(self):
        problem = Problem()
        lit(problem, "A")
        problem.add_clause()
        assert solve(problem) is None

    def test_exactly_one(self):
        problem = Problem()
        lits = [lit(problem, "X", n) for n in range(4)]
        problem.exactly_one(lits)
        result = solve(problem, seed=1)
        assert sum(result[x.proposition] for x in lits) == 1

    def test_condition_switches_cardinality_off(self):
        problem = Problem()
        c = lit(problem, "C")
        lits = [lit(problem, "X", n) for n in range(3)]
        problem.exactly_one(lits, condition=c)
        problem.add_clause(~c)
        for x in lits:
            problem.add_clause(x)
        result = solve(problem)
        assert result is not None
        assert result[c.proposition] is False

    def test_at_most_one_conflict(self):
        problem = Problem()
        lits = [lit(problem, "X", n) for n in range(2)]
        problem.at_most_one(lits)
        for x in lits:
            problem.add_clause(x)
        assert solve(problem) is None

    def test_soft_literal_preferred(self):
        problem = Problem()
        a = lit(problem, "A")
        problem.bias(~a)
        assert solve(problem)[a.proposition] is False

    def test_soft_literal_never_overrides_hard(self):
        problem = Problem()
        a = lit(problem, "A")
        problem.add_clause(a)
        problem.bias(~a)
        assert solve(problem)[a.proposition] is True

    def test_variables(self):
        problem = Problem()
        age = NumericVariable("age", 1, 20)
        food = EnumVariable("food", (("fish",), ("milk",), ("mice",)))
        problem.variables.extend([age, food])
        problem.bias_value(age, 7)
        problem.bias_value(food, 2)
        result = solve(problem, timeout_ms=5000)
        assert result[age] == 7.0
        assert result[food] == ("mice",)

    def test_numeric_range_is_respected(self):
        problem = Problem()
        x = NumericVariable("x", 2, 3)
        problem.variables.append(x)
        problem.bias_value(x, 10)
        assert 2 <= solve(problem)[x] <= 3
