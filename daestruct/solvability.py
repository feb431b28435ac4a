"""
Solvability analysis: which incident variables can be isolated explicitly.

For every equation the residual ``lhs - rhs`` is expanded around each
incident variable as ``a * var + b``. The edge ``(eq, var)`` is *solvable*
when the residual is linear in ``var`` and ``a`` is a nonzero number (or any
symbolic coefficient, when ``allow_symbolic`` is set). Solvable edges form a
second bipartite graph used by tearing.

The symbolic layer is reached only through a ``LinearExpansionOracle``; the
default oracle works on SymPy expressions.
"""

from __future__ import annotations

import numbers
import warnings
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, runtime_checkable

import sympy as sp

from daestruct.bipartite import BipartiteGraph
from daestruct.errors import InternalInconsistencyWarning
from daestruct.structure import TearingState


@dataclass(frozen=True)
class LinearExpansion:
    """Result of expanding ``term`` as ``coefficient * var + offset``."""

    is_linear: bool
    coefficient: Any = None
    offset: Any = None

    @property
    def is_numeric(self) -> bool:
        """True if the coefficient is a plain number rather than an expression."""
        return isinstance(self.coefficient, numbers.Number) and not isinstance(self.coefficient, bool)


@runtime_checkable
class LinearExpansionOracle(Protocol):
    """Capability provided by the symbolic layer."""

    def linear_expansion(self, term: Any, var: Any) -> LinearExpansion: ...


class SymPyLinearExpansion:
    """
    Linear expansion of SymPy expressions.

    ``term`` is linear in ``var`` when ``d term / d var`` no longer depends on
    ``var``. Numeric coefficients are returned as ``int`` or ``float`` so that
    they can be told apart from symbolic ones.
    """

    def linear_expansion(self, term: Any, var: Any) -> LinearExpansion:
        term = sp.sympify(term)
        if not term.has(var):
            return LinearExpansion(True, 0, term)
        a = sp.diff(term, var)
        if a.has(var):
            return LinearExpansion(False)
        b = term.subs(var, 0)
        return LinearExpansion(True, _as_number(a), b)


def _as_number(a: sp.Basic) -> Any:
    if a.is_Integer:
        return int(a)
    if a.is_number and a.is_real:
        return float(a)
    return a


DEFAULT_ORACLE = SymPyLinearExpansion()


@dataclass(frozen=True)
class SolvabilityOptions:
    """Switches of the solvability analysis.

    Attributes:
        may_be_zero: Drop edges whose coefficient is numerically zero from the
            incidence graph instead of warning about them.
        allow_symbolic: Treat edges with a symbolic coefficient as solvable.
    """

    may_be_zero: bool = False
    allow_symbolic: bool = False


def find_eq_solvables(
    state: TearingState,
    ieq: int,
    may_be_zero: bool = False,
    allow_symbolic: bool = False,
    oracle: Optional[LinearExpansionOracle] = None,
) -> None:
    """
    Add the solvable edges of equation ``ieq`` to the solvable graph.

    Inputs are skipped. Zero coefficients either mark the edge for removal
    from the incidence graph (``may_be_zero``) or emit an
    ``InternalInconsistencyWarning`` and leave the edge in place. Removals are
    applied after all incident variables have been scanned.
    """
    structure = state.structure
    graph = structure.graph
    solvable_graph = structure.solvable_graph
    if solvable_graph is None:
        raise ValueError("state has no solvable graph, use find_solvables()")
    if oracle is None:
        oracle = DEFAULT_ORACLE

    eq = state.equations[ieq]
    term = eq.residual
    to_rm: List[int] = []
    for j in graph.src_neighbors(ieq):
        var = state.fullvars[j]
        if var.is_input:
            continue
        expansion = oracle.linear_expansion(term, var.symbol)
        if not expansion.is_linear:
            continue
        a = expansion.coefficient
        if not expansion.is_numeric:
            if not allow_symbolic:
                continue
            solvable_graph.add_edge(ieq, j)
            structure.solvable_coefficients[(ieq, j)] = a
            continue
        if a != 0:
            solvable_graph.add_edge(ieq, j)
            structure.solvable_coefficients[(ieq, j)] = a
        elif may_be_zero:
            to_rm.append(j)
        else:
            warnings.warn(
                f"Internal error: Variable {var} was marked as being in {eq}, but was actually zero",
                InternalInconsistencyWarning,
                stacklevel=2,
            )
    for j in to_rm:
        graph.rem_edge(ieq, j)


def find_solvables(
    state: TearingState,
    allow_symbolic: bool = False,
    may_be_zero: bool = False,
    oracle: Optional[LinearExpansionOracle] = None,
    options: Optional[SolvabilityOptions] = None,
) -> None:
    """
    Build the solvable graph of ``state`` in place.

    May only be called once per state. ``options``, if given, overrides the
    individual keyword switches.
    """
    structure = state.structure
    if structure.solvable_graph is not None:
        raise ValueError("solvable graph already built for this state")
    if options is not None:
        allow_symbolic = options.allow_symbolic
        may_be_zero = options.may_be_zero
    graph = structure.graph
    structure.solvable_graph = BipartiteGraph(graph.nsrcs, graph.ndsts)
    for ieq in range(state.nequations):
        find_eq_solvables(
            state,
            ieq,
            may_be_zero=may_be_zero,
            allow_symbolic=allow_symbolic,
            oracle=oracle,
        )
