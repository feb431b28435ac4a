"""
Type definitions for structural analysis.
"""

from enum import Enum, auto


class VariableType(Enum):
    """Role of a variable in the flattened DAE system."""

    STATE = auto()  # Differentiated variable (has a derivative variable)
    DER_STATE = auto()  # Time derivative of another variable
    ALGEBRAIC = auto()  # Algebraic variable (no derivative)
    INPUT = auto()  # External input, never solved for
    PARAMETER = auto()  # Constant parameter, never solved for


class IssueKind(Enum):
    """Kind of structural problem found by the consistency check."""

    EXTRA_EQUATIONS = "extra_equations"
    EXTRA_VARIABLES = "extra_variables"
    STRUCTURAL_SINGULARITY = "structural_singularity"
