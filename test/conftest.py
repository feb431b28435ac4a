"""Shared systems for the structural analysis tests."""

import pytest
import sympy as sp

from daestruct import Equation, TearingState, Variable


def algebraic_state(names, residuals):
    """State with algebraic variables ``names`` and equations ``residual ~ 0``."""
    variables = [Variable.algebraic(n) for n in names]
    equations = [Equation(r, 0) for r in residuals]
    return TearingState.from_equations(equations, variables)


@pytest.fixture
def make_state():
    return algebraic_state


@pytest.fixture
def symbols():
    return sp.symbols("x y z")


@pytest.fixture
def triangular_state(symbols):
    """x = 1, y = 2x, z = x + y: three explicit scalar blocks."""
    x, y, z = symbols
    return algebraic_state("xyz", [x - 1, y - 2 * x, z - x - y])


@pytest.fixture
def coupled_state(symbols):
    """x + y = 1, y + z = 2, z + x = 3: one coupled block of size 3."""
    x, y, z = symbols
    return algebraic_state("xyz", [x + y - 1, y + z - 2, z + x - 3])


@pytest.fixture
def oscillator_state():
    """der(x) = v, der(v) = -x."""
    x = Variable.state("x")
    v = Variable.state("v")
    der_x = Variable.der(x)
    der_v = Variable.der(v)
    equations = [
        Equation(der_x.symbol, v.symbol),
        Equation(der_v.symbol, -x.symbol),
    ]
    return TearingState.from_equations(equations, [x, v, der_x, der_v])


@pytest.fixture
def chain_state():
    """der(der(x)) = -x with x -> der_x -> der_der_x."""
    x = Variable.state("x")
    der_x = Variable.der(x)
    der_der_x = Variable.der(der_x)
    equations = [Equation(der_der_x.symbol, -x.symbol)]
    return TearingState.from_equations(equations, [x, der_x, der_der_x])
