"""
Equation representation for structural analysis.
"""

from dataclasses import dataclass
from typing import Any

import sympy as sp


@dataclass
class Equation:
    """
    A scalar equation ``lhs ~ rhs`` over SymPy expressions.

    Examples:
        Equation(der_x, v)          # der(x) = v
        Equation(x - 2 * y, 0)      # x - 2*y = 0
    """

    lhs: Any
    rhs: Any = 0

    def __post_init__(self):
        self.lhs = sp.sympify(self.lhs)
        self.rhs = sp.sympify(self.rhs)

    def __str__(self) -> str:
        return f"{self.lhs} ~ {self.rhs}"

    @property
    def residual(self) -> sp.Expr:
        """Residual form ``lhs - rhs`` (zero when the equation holds)."""
        return self.lhs - self.rhs

    @property
    def free_symbols(self) -> set:
        """All symbols occurring on either side."""
        return self.lhs.free_symbols | self.rhs.free_symbols
