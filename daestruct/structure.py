"""
Mutable analysis context shared by all structural passes.

A ``TearingState`` owns the flat equation and variable lists together with a
``SystemStructure`` (incidence graph, derivative relation, solvable graph).
Everything is referenced by integer index into ``equations`` and
``fullvars``; the state is built once, mutated in place by the passes, and
treated as read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from daestruct.bipartite import BipartiteGraph
from daestruct.diff_graph import DiffGraph
from daestruct.equation import Equation
from daestruct.variable import Variable


@dataclass
class SystemStructure:
    """Index-based structural data of a DAE system."""

    var_to_diff: DiffGraph
    graph: BipartiteGraph

    # Built by find_solvables; None until then
    solvable_graph: Optional[BipartiteGraph] = None

    # Linear coefficient of each solvable edge (eq, var)
    solvable_coefficients: Dict[Tuple[int, int], object] = field(default_factory=dict)

    @property
    def nsrcs(self) -> int:
        return self.graph.nsrcs

    @property
    def ndsts(self) -> int:
        return self.graph.ndsts

    def is_diff_var(self, v: int) -> bool:
        """True if ``v`` has a derivative variable."""
        return self.var_to_diff[v] is not None

    def is_der_var(self, v: int) -> bool:
        """True if ``v`` is the derivative of another variable."""
        return self.var_to_diff.diff_to_primal[v] is not None

    def is_alg_var(self, v: int) -> bool:
        """True if ``v`` is neither differentiated nor a derivative."""
        return not self.is_diff_var(v) and not self.is_der_var(v)

    def is_alg_eq(self, eq: int) -> bool:
        """True if no derivative variable occurs in ``eq``."""
        return not any(self.is_der_var(v) for v in self.graph.src_neighbors(eq))

    def diff_vars(self) -> List[int]:
        return [v for v in self.graph.dst_vertices if self.is_diff_var(v)]

    def der_vars(self) -> List[int]:
        return [v for v in self.graph.dst_vertices if self.is_der_var(v)]

    def alg_vars(self) -> List[int]:
        return [v for v in self.graph.dst_vertices if self.is_alg_var(v)]

    def complete(self) -> SystemStructure:
        """Build backward adjacency of all graphs in place."""
        self.graph.complete()
        if self.solvable_graph is not None:
            self.solvable_graph.complete()
        return self


class TearingState:
    """Equations, variables and their structure for one analysis run."""

    def __init__(
        self,
        equations: Sequence[Equation],
        fullvars: Sequence[Variable],
        structure: SystemStructure,
    ):
        if structure.nsrcs != len(equations):
            raise ValueError(f"graph has {structure.nsrcs} equations, got {len(equations)}")
        if structure.ndsts != len(fullvars) or len(structure.var_to_diff) != len(fullvars):
            raise ValueError(f"graph has {structure.ndsts} variables, got {len(fullvars)}")
        self.equations: List[Equation] = list(equations)
        self.fullvars: List[Variable] = list(fullvars)
        self.structure = structure

    def __repr__(self) -> str:
        return f"TearingState(nequations={self.nequations}, nvars={self.nvars})"

    @classmethod
    def from_equations(cls, equations: Sequence[Equation], variables: Sequence[Variable]) -> TearingState:
        """
        Build the incidence graph and derivative relation.

        A variable is incident to an equation when its symbol is a free symbol
        of either side. Derivative variables are linked to the variable named
        by their ``state_ref``.
        """
        index: Dict[str, int] = {}
        by_symbol = {}
        for i, var in enumerate(variables):
            if var.name in index:
                raise ValueError(f"duplicate variable name '{var.name}'")
            index[var.name] = i
            by_symbol[var.symbol] = i

        fadjlist = []
        for eq in equations:
            fadjlist.append(sorted(by_symbol[s] for s in eq.free_symbols if s in by_symbol))
        graph = BipartiteGraph.from_adjacency(fadjlist, len(variables))

        var_to_diff = DiffGraph(len(variables))
        for i, var in enumerate(variables):
            if var.state_ref is None:
                continue
            if var.state_ref not in index:
                raise ValueError(f"derivative '{var.name}' refers to unknown variable '{var.state_ref}'")
            var_to_diff[index[var.state_ref]] = i

        return cls(equations, variables, SystemStructure(var_to_diff=var_to_diff, graph=graph))

    @property
    def nequations(self) -> int:
        return len(self.equations)

    @property
    def nvars(self) -> int:
        return len(self.fullvars)

    def is_diff_eq(self, ieq: int) -> bool:
        """True if the left-hand side of equation ``ieq`` is a derivative variable."""
        lhs = self.equations[ieq].lhs
        for v, var in enumerate(self.fullvars):
            if var.symbol == lhs:
                return self.structure.is_der_var(v)
        return False

    def summary(self) -> str:
        s = self.structure
        lines = [
            f"Equations: {self.nequations}",
            f"Variables: {self.nvars}",
            f"  Differentiated: {len(s.diff_vars())}",
            f"  Derivatives: {len(s.der_vars())}",
            f"  Algebraic: {len(s.alg_vars())}",
            f"Incidence edges: {s.graph.nedges}",
        ]
        if s.solvable_graph is not None:
            lines.append(f"Solvable edges: {s.solvable_graph.nedges}")
        return "\n".join(lines)
