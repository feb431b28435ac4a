"""
Variable representation for structural analysis.
"""

from dataclasses import dataclass, field
from typing import Optional

import sympy as sp

from daestruct.types import VariableType


@dataclass
class Variable:
    """
    A scalar unknown (or input) of the flattened system.

    Variables are referenced by their position in ``TearingState.fullvars``;
    the symbol is only used to find incidence in equations.
    """

    name: str
    var_type: VariableType = VariableType.ALGEBRAIC
    symbol: Optional[sp.Symbol] = None

    # Order of differentiation with respect to time (x -> 0, der(x) -> 1)
    derivative_order: int = 0

    # For derivative variables: name of the variable being differentiated
    state_ref: Optional[str] = None

    description: str = ""
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.symbol is None:
            self.symbol = sp.Symbol(self.name)
        if self.var_type == VariableType.DER_STATE and self.derivative_order == 0:
            self.derivative_order = 1

    def __str__(self) -> str:
        return self.name

    @property
    def is_state(self) -> bool:
        """True if this is a differentiated variable."""
        return self.var_type == VariableType.STATE

    @property
    def is_derivative(self) -> bool:
        """True if this is a derivative variable."""
        return self.var_type == VariableType.DER_STATE

    @property
    def is_algebraic(self) -> bool:
        """True if this is an algebraic variable."""
        return self.var_type == VariableType.ALGEBRAIC

    @property
    def is_input(self) -> bool:
        """True for inputs and parameters, which are never solved for."""
        return self.var_type in (VariableType.INPUT, VariableType.PARAMETER)

    @staticmethod
    def state(name: str, **kwargs) -> "Variable":
        """Create a differentiated variable."""
        return Variable(name=name, var_type=VariableType.STATE, **kwargs)

    @staticmethod
    def der(state: "Variable", name: Optional[str] = None) -> "Variable":
        """
        Create the derivative variable of ``state``.

        The default name follows the ``der_<name>`` convention.
        """
        return Variable(
            name=name or f"der_{state.name}",
            var_type=VariableType.DER_STATE,
            derivative_order=state.derivative_order + 1,
            state_ref=state.name,
        )

    @staticmethod
    def algebraic(name: str, **kwargs) -> "Variable":
        """Create an algebraic variable."""
        return Variable(name=name, var_type=VariableType.ALGEBRAIC, **kwargs)

    @staticmethod
    def input(name: str, **kwargs) -> "Variable":
        """Create an external input."""
        return Variable(name=name, var_type=VariableType.INPUT, **kwargs)
