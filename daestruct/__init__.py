"""
daestruct - Structural analysis of differential-algebraic equation systems

Matching, consistency checking, BLT ordering and tearing of flattened DAE
systems, prior to code generation and numerical solution.
"""

from beartype.claw import beartype_package

beartype_package(__name__)

__version__ = "0.1.0"

from daestruct.types import IssueKind, VariableType
from daestruct.variable import Variable
from daestruct.equation import Equation
from daestruct.bipartite import BipartiteGraph
from daestruct.matching import Matching, complete, invview, maximal_matching
from daestruct.diff_graph import DiffGraph
from daestruct.structure import SystemStructure, TearingState
from daestruct.errors import (
    ExtraEquationsError,
    ExtraVariablesError,
    InternalInconsistencyWarning,
    InvalidSystemError,
    NonlinearSolveError,
    StructuralError,
    StructurallySingularError,
)
from daestruct.consistency import (
    ConsistencyReport,
    StructuralIssue,
    assert_consistency,
    check_consistency,
)
from daestruct.scc import algebraic_variables_scc, find_var_sccs
from daestruct.solvability import (
    LinearExpansion,
    LinearExpansionOracle,
    SolvabilityOptions,
    SymPyLinearExpansion,
    find_eq_solvables,
    find_solvables,
)
from daestruct.tearing import BLTBlock, tear_sccs, torn_matching
from daestruct.sparsity import (
    reordered_matrix,
    sorted_incidence_matrix,
    torn_system_jacobian_sparsity,
    uneven_invmap,
)
from daestruct.nlsolve import NonlinearSolution, numerical_nlsolve, solve_residual
from daestruct.analysis import StructuralAnalysis, analyze_structure

__all__ = [
    # Types
    "IssueKind",
    "VariableType",
    "Variable",
    "Equation",
    # Graphs
    "BipartiteGraph",
    "Matching",
    "DiffGraph",
    "complete",
    "invview",
    "maximal_matching",
    # State
    "SystemStructure",
    "TearingState",
    # Errors
    "StructuralError",
    "InvalidSystemError",
    "ExtraEquationsError",
    "ExtraVariablesError",
    "StructurallySingularError",
    "NonlinearSolveError",
    "InternalInconsistencyWarning",
    # Consistency
    "ConsistencyReport",
    "StructuralIssue",
    "check_consistency",
    "assert_consistency",
    # BLT
    "find_var_sccs",
    "algebraic_variables_scc",
    # Solvability and tearing
    "LinearExpansion",
    "LinearExpansionOracle",
    "SolvabilityOptions",
    "SymPyLinearExpansion",
    "find_eq_solvables",
    "find_solvables",
    "BLTBlock",
    "tear_sccs",
    "torn_matching",
    # Sparsity
    "uneven_invmap",
    "sorted_incidence_matrix",
    "torn_system_jacobian_sparsity",
    "reordered_matrix",
    # Nonlinear solve
    "NonlinearSolution",
    "solve_residual",
    "numerical_nlsolve",
    # Pipeline
    "StructuralAnalysis",
    "analyze_structure",
    "__version__",
]
