"""
Example: structural analysis of a mass-spring-damper with a nonlinear spring.

The spring force is an algebraic variable coupled to the damping force
through an implicit relation, so the BLT form contains one block that has to
be solved numerically at every step.
"""

import sympy as sp

from daestruct import (
    Equation,
    TearingState,
    Variable,
    analyze_structure,
    numerical_nlsolve,
)


def create_mass_spring_damper() -> TearingState:
    """
    Build the system

      der(x) = v
      der(v) = (F_s + F_d) / m
      F_s = -k * x - k3 * x^3
      F_d + c * v + d * F_d^3 = 0

    with parameters m, k, k3, c and d kept symbolic.
    """
    x = Variable.state("x", description="position")
    v = Variable.state("v", description="velocity")
    der_x = Variable.der(x)
    der_v = Variable.der(v)
    f_s = Variable.algebraic("F_s", description="spring force")
    f_d = Variable.algebraic("F_d", description="damping force")

    m, k, k3, c, d = sp.symbols("m k k3 c d")
    equations = [
        Equation(der_x.symbol, v.symbol),
        Equation(der_v.symbol, (f_s.symbol + f_d.symbol) / m),
        Equation(f_s.symbol, -k * x.symbol - k3 * x.symbol**3),
        Equation(f_d.symbol + c * v.symbol + d * f_d.symbol**3, 0),
    ]
    return TearingState.from_equations(equations, [x, v, der_x, der_v, f_s, f_d])


def main():
    state = create_mass_spring_damper()
    print(state.summary())
    print()

    result = analyze_structure(state)
    print(result.summary())
    print()

    # the damping force is implicit in F_d; solve it for v = 1, c = 0.5, d = 0.1
    for block in result.implicit_blocks:
        names = [state.fullvars[i].name for i in block.iteration_variables]
        print(f"Solving for {', '.join(names)}")
        u = numerical_nlsolve(lambda u, p: u + p[0] * p[1] + p[2] * u**3, [0.0], [0.5, 1.0, 0.1])
        print(f"  {names[0]} = {u[0]:.6f}")


if __name__ == "__main__":
    main()
