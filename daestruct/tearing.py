"""
Tearing of BLT blocks into explicit and residual parts.

Within each strongly connected block, equations are assigned greedily to a
solvable variable of the same block as long as the explicit assignments stay
acyclic. Torn pairs ``(equation, variable)`` can be evaluated in sequence once
the iteration variables are known; the remaining equations of the block are
residuals that the nonlinear solver drives to zero by adjusting the iteration
variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from daestruct.bipartite import BipartiteGraph
from daestruct.matching import Matching, complete
from daestruct.scc import strongly_connected_components
from daestruct.structure import TearingState


@dataclass
class BLTBlock:
    """One block of the BLT form."""

    variables: List[int]
    equations: List[int] = field(default_factory=list)

    # Explicit assignments (equation, variable) in evaluation order
    torn: List[Tuple[int, int]] = field(default_factory=list)

    # Equations left as residuals, and the unknowns they determine
    residual_equations: List[int] = field(default_factory=list)
    iteration_variables: List[int] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.variables)

    @property
    def is_explicit(self) -> bool:
        """True if every equation of the block is solved explicitly."""
        return not self.residual_equations

    @property
    def is_unmatched(self) -> bool:
        """True for blocks of variables that no equation determines."""
        return not self.equations


def _reaches(graph: BipartiteGraph, torn: Dict[int, int], start: List[int], target: int) -> bool:
    """True if ``target`` occurs in the equation of a torn variable reachable from ``start``."""
    seen = set()
    stack = list(start)
    while stack:
        u = stack.pop()
        if u in seen:
            continue
        seen.add(u)
        for x in graph.src_neighbors(torn[u]):
            if x == target:
                return True
            if x != u and x in torn and x not in seen:
                stack.append(x)
    return False


def _evaluation_order(graph: BipartiteGraph, torn: Dict[int, int]) -> List[Tuple[int, int]]:
    tvars = sorted(torn)
    local = {v: i for i, v in enumerate(tvars)}
    adj = [[local[w] for w in graph.src_neighbors(torn[v]) if w != v and w in local] for v in tvars]
    order = strongly_connected_components(adj)
    return [(torn[tvars[c[0]]], tvars[c[0]]) for c in order]


def tear_block(
    state: TearingState,
    var_eq_matching: Matching,
    variables: Sequence[int],
) -> BLTBlock:
    """Split one strongly connected block into torn and residual parts."""
    structure = state.structure
    graph = structure.graph
    solvable_graph = structure.solvable_graph
    if solvable_graph is None:
        raise ValueError("state has no solvable graph, use find_solvables()")

    variables = list(variables)
    equations = sorted(var_eq_matching[v] for v in variables if var_eq_matching[v] is not None)
    if not equations:
        return BLTBlock(variables=variables)

    block_vars = set(variables)
    torn: Dict[int, int] = {}
    for eq in equations:
        for v in solvable_graph.src_neighbors(eq):
            if v not in block_vars or v in torn:
                continue
            deps = [w for w in graph.src_neighbors(eq) if w != v and w in torn]
            if _reaches(graph, torn, deps, v):
                continue
            torn[v] = eq
            break

    torn_eqs = set(torn.values())
    return BLTBlock(
        variables=variables,
        equations=equations,
        torn=_evaluation_order(graph, torn),
        residual_equations=[eq for eq in equations if eq not in torn_eqs],
        iteration_variables=[
            v for v in variables if v not in torn and var_eq_matching[v] is not None
        ],
    )


def tear_sccs(
    state: TearingState,
    var_eq_matching: Matching,
    sccs: Sequence[Sequence[int]],
) -> List[BLTBlock]:
    """
    Tear every block of a BLT decomposition.

    Args:
        state: State with a solvable graph (see ``find_solvables``)
        var_eq_matching: Matching used to build ``sccs``
        sccs: Components in BLT order, as returned by ``find_var_sccs``

    Returns:
        One ``BLTBlock`` per component, in the same order
    """
    return [tear_block(state, var_eq_matching, scc) for scc in sccs]


def torn_matching(blocks: Sequence[BLTBlock], nvars: int) -> Matching:
    """Complete matching of torn variables to the equations that solve them."""
    matching = Matching.unassigned(nvars)
    for block in blocks:
        for eq, v in block.torn:
            matching[v] = eq
    return complete(matching)
