"""The solver boundary: run a ``Problem`` through z3.

Hard clauses and cardinality constraints must hold; the bias literals and
preferred values are added as soft constraints, so they shape which model
comes back without ever making a satisfiable problem unsatisfiable.
"""

from __future__ import annotations

import logging

from z3 import And, Bool, BoolVal, Implies, Int, Not, Optimize, Or, PbEq, PbGe, PbLe, Real, is_true, sat, set_param, unsat

from imaginarium.errors import SolverError
from imaginarium.generator import (
    Cardinality,
    EnumVariable,
    Literal,
    NumericVariable,
    Problem,
    Proposition,
    Variable,
)

logger = logging.getLogger(__name__)


class Assignment:
    """Values of the propositions and variables of a solved problem.

    Propositions map to bools, numeric variables to floats and enumerated
    variables to the chosen value (a token tuple).
    """

    def __init__(self, values: dict[int, object] | None = None) -> None:
        self._values: dict[int, object] = dict(values or {})

    def set(self, key: Proposition | Variable, value: object) -> None:
        self._values[id(key)] = value

    def __getitem__(self, key: Proposition | Variable) -> object:
        return self._values[id(key)]

    def __contains__(self, key: object) -> bool:
        return id(key) in self._values

    def get(self, key: Proposition | Variable, default: object = None) -> object:
        return self._values.get(id(key), default)

    def __len__(self) -> int:
        return len(self._values)


def _literal(bools: dict[int, object], lit: Literal):
    b = bools[id(lit.proposition)]
    return b if lit.positive else Not(b)


def _cardinality(bools: dict[int, object], card: Cardinality):
    terms = [(_literal(bools, lit), 1) for lit in card.literals]
    if card.at_least is not None and card.at_least == card.at_most:
        if not terms:
            expr = BoolVal(card.at_least <= 0)
        else:
            expr = PbEq(terms, card.at_least)
    else:
        parts = []
        if card.at_least is not None:
            parts.append(PbGe(terms, card.at_least) if terms else BoolVal(card.at_least <= 0))
        if card.at_most is not None and terms:
            parts.append(PbLe(terms, card.at_most))
        expr = And(*parts) if parts else BoolVal(True)
    if card.condition is not None:
        return Implies(_literal(bools, card.condition), expr)
    return expr


def solve(problem: Problem, *, seed: int | None = None, timeout_ms: int | None = None) -> Assignment | None:
    """Find an assignment satisfying *problem*.

    Returns None if the problem is unsatisfiable. Raises SolverError if z3
    gives up (timeout or resource limit).
    """
    if seed is not None:
        set_param("smt.random_seed", seed)
        set_param("sat.random_seed", seed)
    opt = Optimize()
    if timeout_ms is not None:
        opt.set(timeout=timeout_ms)

    bools: dict[int, object] = {}
    for n, prop in enumerate(problem.propositions.values()):
        bools[id(prop)] = Bool(f"p{n}:{prop}")
    reals: dict[int, object] = {}
    ints: dict[int, object] = {}
    for n, var in enumerate(problem.variables):
        if isinstance(var, NumericVariable):
            x = Real(f"v{n}:{var.name}")
            opt.add(x >= var.low, x <= var.high)
            reals[id(var)] = x
        elif isinstance(var, EnumVariable):
            x = Int(f"v{n}:{var.name}")
            opt.add(x >= 0, x < len(var.values))
            ints[id(var)] = x

    for clause in problem.clauses:
        if clause:
            opt.add(Or(*(_literal(bools, lit) for lit in clause)))
        else:
            opt.add(BoolVal(False))
    for card in problem.cardinalities:
        opt.add(_cardinality(bools, card))
    for lit in problem.soft_literals:
        opt.add_soft(_literal(bools, lit))
    for soft in problem.soft_values:
        x = reals.get(id(soft.variable))
        if x is None:
            x = ints[id(soft.variable)]
        opt.add_soft(x == soft.value)

    result = opt.check()
    logger.debug("Solver result: %s (%s)", result, problem.stats())
    if result == unsat:
        return None
    if result != sat:
        raise SolverError(f"The solver gave up: {opt.reason_unknown()}")

    model = opt.model()
    assignment = Assignment()
    for prop in problem.propositions.values():
        assignment.set(prop, is_true(model.eval(bools[id(prop)], model_completion=True)))
    for var in problem.variables:
        if isinstance(var, NumericVariable):
            value = model.eval(reals[id(var)], model_completion=True)
            assignment.set(var, float(value.as_fraction()))
        else:
            index = model.eval(ints[id(var)], model_completion=True).as_long()
            assignment.set(var, var.values[index])
    return assignment
