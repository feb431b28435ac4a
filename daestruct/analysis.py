"""
Full structural analysis pipeline.

Runs the passes in a fixed order on a single ``TearingState``:

1. Consistency check (balance and structural singularity), fail fast
2. Solvability analysis (may remove zero-coefficient edges from the graph)
3. Maximal matching of highest order variables to equations
4. BLT ordering of the variables via strongly connected components
5. Tearing of every block into explicit and residual parts

Example:
    x, y, z = sp.symbols("x y z")
    variables = [Variable.algebraic(n) for n in "xyz"]
    equations = [Equation(x, 1), Equation(y, 2 * x), Equation(z - x - y, 0)]
    result = analyze_structure(TearingState.from_equations(equations, variables))
    result.is_explicit  # True: three explicit scalar blocks
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import scipy.sparse as sparse

from daestruct.consistency import ConsistencyReport, assert_consistency
from daestruct.matching import Matching, complete, maximal_matching
from daestruct.scc import find_var_sccs
from daestruct.solvability import LinearExpansionOracle, find_solvables
from daestruct.sparsity import torn_system_jacobian_sparsity
from daestruct.structure import TearingState
from daestruct.tearing import BLTBlock, tear_sccs, torn_matching


@dataclass
class StructuralAnalysis:
    """Result of ``analyze_structure``."""

    state: TearingState
    var_eq_matching: Matching
    sccs: List[List[int]]
    blocks: List[BLTBlock]
    torn_matching: Matching
    jacobian_sparsity: sparse.csr_matrix
    report: Optional[ConsistencyReport] = None
    implicit_blocks: List[BLTBlock] = field(default_factory=list)

    def __post_init__(self):
        self.implicit_blocks = [b for b in self.blocks if not b.is_explicit]

    @property
    def is_explicit(self) -> bool:
        """True if no block needs a nonlinear solve."""
        return not self.implicit_blocks

    def summary(self) -> str:
        names = [v.name for v in self.state.fullvars]
        lines = [
            f"Blocks: {len(self.blocks)}",
            f"  Implicit: {len(self.implicit_blocks)}",
        ]
        for k, block in enumerate(self.blocks):
            kind = "explicit" if block.is_explicit else "implicit"
            members = ", ".join(names[v] for v in block.variables)
            lines.append(f"  [{k}] {kind}: {members}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()


def analyze_structure(
    state: TearingState,
    allow_symbolic: bool = False,
    may_be_zero: bool = False,
    check: bool = True,
    oracle: Optional[LinearExpansionOracle] = None,
) -> StructuralAnalysis:
    """
    Run the structural passes on ``state`` (mutated in place).

    Args:
        state: Freshly built state without a solvable graph
        allow_symbolic: Accept symbolic coefficients as solvable
        may_be_zero: Drop zero-coefficient edges instead of warning
        check: Run the consistency check first and raise on failure
        oracle: Linear-expansion oracle (default: SymPy)

    Raises:
        InvalidSystemError: If ``check`` is set and the system is unbalanced
            or structurally singular
    """
    report = assert_consistency(state) if check else None

    structure = state.structure.complete()
    find_solvables(state, allow_symbolic=allow_symbolic, may_be_zero=may_be_zero, oracle=oracle)

    # Differentiated variables are integrator states, known at every step
    graph = structure.graph
    var_eq_matching = complete(
        maximal_matching(graph, varfilter=structure.var_to_diff.is_highest_order),
        graph.nsrcs,
    )
    sccs = find_var_sccs(graph, var_eq_matching)
    blocks = tear_sccs(state, var_eq_matching, sccs)

    return StructuralAnalysis(
        state=state,
        var_eq_matching=var_eq_matching,
        sccs=sccs,
        blocks=blocks,
        torn_matching=torn_matching(blocks, graph.ndsts),
        jacobian_sparsity=torn_system_jacobian_sparsity(state),
        report=report,
    )
