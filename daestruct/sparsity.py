"""
Sparsity patterns derived from the structural analysis.

All matrices are ``scipy.sparse.csr_matrix`` with boolean entries; rows are
equations (or solved/residual rows) and columns are variables, both renumbered
as described per function.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import scipy.sparse as sparse

from daestruct.matching import Matching, complete, maximal_matching
from daestruct.scc import algebraic_variables_scc, find_var_sccs
from daestruct.structure import TearingState


def _pattern(rows: List[int], cols: List[int], shape: tuple, val: bool = True) -> sparse.csr_matrix:
    data = np.full(len(rows), val)
    return sparse.csr_matrix((data, (rows, cols)), shape=shape)


def uneven_invmap(n: int, lst: Sequence[int]) -> np.ndarray:
    """
    Inverse of a partial permutation.

    Returns an integer array of length ``n`` with ``rename[lst[i]] = i`` and
    ``-1`` for indices that do not occur in ``lst``.
    """
    rename = np.full(n, -1, dtype=int)
    for i, v in enumerate(lst):
        rename[v] = i
    return rename


def sorted_incidence_matrix(
    state: TearingState,
    val: bool = True,
    only_algeqs: bool = False,
    only_algvars: bool = False,
) -> sparse.csr_matrix:
    """
    Incidence matrix permuted into BLT order.

    Matched algebraic variables and their equations come first, in the order
    of ``algebraic_variables_scc``, followed by differentiated variables and
    then derivative variables. Unmatched equations are placed last; unmatched
    algebraic variables are dropped.
    """
    var_eq_matching, var_sccs = algebraic_variables_scc(state)
    s = state.structure
    graph = s.graph
    varsmap = np.full(graph.ndsts, -1, dtype=int)
    eqsmap = np.full(graph.nsrcs, -1, dtype=int)
    varidx = 0
    eqidx = 0
    for vs in var_sccs:
        for v in vs:
            eq = var_eq_matching[v]
            if eq is not None:
                eqsmap[eq] = eqidx
                eqidx += 1
                varsmap[v] = varidx
                varidx += 1
    for v in s.diff_vars():
        varsmap[v] = varidx
        varidx += 1
    for v in s.der_vars():
        if varsmap[v] < 0:
            varsmap[v] = varidx
            varidx += 1
    for eq in graph.src_vertices:
        if eqsmap[eq] < 0:
            eqsmap[eq] = eqidx
            eqidx += 1

    rows: List[int] = []
    cols: List[int] = []
    for eq in graph.src_vertices:
        if only_algeqs and not s.is_alg_eq(eq):
            continue
        for var in graph.src_neighbors(eq):
            if only_algvars and not s.is_alg_var(var):
                continue
            i = int(eqsmap[eq])
            j = int(varsmap[var])
            if i < 0 or j < 0:
                continue
            rows.append(i)
            cols.append(j)
    return _pattern(rows, cols, (eqidx, varidx), val)


def torn_system_jacobian_sparsity(state: TearingState) -> sparse.csr_matrix:
    """Equations x non-derivative variables, for Jacobian preallocation."""
    s = state.structure
    graph = s.graph
    states_idxs = [v for v in graph.dst_vertices if not s.is_der_var(v)]
    var2idx = {v: i for i, v in enumerate(states_idxs)}
    rows: List[int] = []
    cols: List[int] = []
    for ieq in graph.src_vertices:
        for ivar in graph.src_neighbors(ieq):
            nivar = var2idx.get(ivar)
            if nivar is None:
                continue
            rows.append(ieq)
            cols.append(nivar)
    return _pattern(rows, cols, (graph.nsrcs, len(states_idxs)))


def reordered_matrix(state: TearingState, torn_matching: Matching) -> sparse.csr_matrix:
    """
    Debugging view of a torn system.

    For every block of the maximal matching's BLT order, first the rows of
    explicitly solved equations and then the rows of residual equations are
    emitted. Columns are algebraic variables, with the solved variables of
    each block placed before the unsolved ones. Differential equations are
    skipped.
    """
    s = state.structure
    graph = s.graph
    nvars = graph.ndsts
    max_matching = complete(maximal_matching(graph), graph.nsrcs)
    torn_matching = complete(torn_matching)
    sccs = find_var_sccs(graph, max_matching)

    def torn_eq(v: int):
        return torn_matching[v] if v < len(torn_matching) else None

    solved = {v for v in range(nvars) if torn_eq(v) is not None}
    order: List[int] = []
    for vars in sccs:
        order.extend(v for v in vars if v in solved)
        order.extend(v for v in vars if v not in solved)
    seen = set(order)
    order.extend(v for v in range(nvars) if v not in seen)
    position = uneven_invmap(nvars, order)

    rows: List[int] = []
    cols: List[int] = []
    ii = 0

    def emit(eq: int) -> None:
        nonlocal ii
        if state.is_diff_eq(eq):
            return
        for x in graph.src_neighbors(eq):
            if s.is_alg_var(x):
                rows.append(ii)
                cols.append(int(position[x]))
        ii += 1

    for vars in sccs:
        e_solved = [torn_eq(v) for v in vars if torn_eq(v) is not None]
        for es in e_solved:
            emit(es)
        e_residual: List[int] = []
        for v in vars:
            eq = max_matching[v]
            if eq is not None and eq not in e_solved and eq not in e_residual:
                e_residual.append(eq)
        for er in e_residual:
            emit(er)

    return _pattern(rows, cols, (ii, nvars))
