"""
BLT ordering via strongly connected components.

Given a matching ``variable -> equation``, the bipartite graph gets a
direction: variable ``v`` depends on every other matched variable ``w`` that
occurs in the equation assigned to ``v``. The strongly connected components
of this variable graph are the blocks of the block-lower-triangular form.

Components are found with Tarjan's algorithm, which emits them in reverse
topological order of the dependency edges, i.e. every component comes after
the components it depends on. Vertices and neighbors are visited in
ascending index order so the result is reproducible.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from daestruct.bipartite import BipartiteGraph
from daestruct.matching import Matching, complete, maximal_matching
from daestruct.structure import TearingState

Assignment = Union[Matching, Sequence[Optional[int]]]


def _assigned_eq(assign: Assignment, v: int) -> Optional[int]:
    return assign[v] if v < len(assign) else None


def var_dependency_graph(graph: BipartiteGraph, assign: Optional[Assignment] = None) -> List[List[int]]:
    """
    Directed dependency graph over variables.

    ``deps[v]`` lists (ascending) the matched variables other than ``v`` that
    occur in the equation assigned to ``v``. Unassigned variables have no
    outgoing edges and are never the target of one.

    When ``assign`` is None, variable ``i`` is assigned to equation ``i``.
    """
    if assign is None:
        assign = [i if i < graph.nsrcs else None for i in range(graph.ndsts)]
    deps: List[List[int]] = []
    for v in graph.dst_vertices:
        eq = _assigned_eq(assign, v)
        if eq is None:
            deps.append([])
            continue
        deps.append(
            [w for w in graph.src_neighbors(eq) if w != v and _assigned_eq(assign, w) is not None]
        )
    return deps


def strongly_connected_components(adj: Sequence[Sequence[int]]) -> List[List[int]]:
    """
    Tarjan's algorithm on an adjacency list.

    Args:
        adj: adj[v] = vertices that v points to

    Returns:
        List of SCCs (each sorted ascending), in reverse topological order.
    """
    n = len(adj)
    index: List[Optional[int]] = [None] * n
    lowlink = [0] * n
    on_stack = [False] * n
    stack: List[int] = []
    sccs: List[List[int]] = []
    counter = 0

    for root in range(n):
        if index[root] is not None:
            continue
        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True
        work = [(root, iter(adj[root]))]

        while work:
            node, successors = work[-1]
            for succ in successors:
                if index[succ] is None:
                    # Not visited yet: descend
                    index[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack[succ] = True
                    work.append((succ, iter(adj[succ])))
                    break
                elif on_stack[succ]:
                    lowlink[node] = min(lowlink[node], index[succ])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])
                if lowlink[node] == index[node]:
                    scc: List[int] = []
                    while True:
                        w = stack.pop()
                        on_stack[w] = False
                        scc.append(w)
                        if w == node:
                            break
                    scc.sort()
                    sccs.append(scc)

    return sccs


def find_var_sccs(graph: BipartiteGraph, assign: Optional[Assignment] = None) -> List[List[int]]:
    """
    Find strongly connected components of the variables of ``graph``.

    ``assign`` gives the undirected bipartite graph a direction. When it is
    None, the ``i``-th variable is assumed to be assigned to the ``i``-th
    equation. Every variable appears in exactly one component.
    """
    return strongly_connected_components(var_dependency_graph(graph, assign))


def algebraic_variables_scc(state: TearingState) -> Tuple[Matching, List[List[int]]]:
    """
    Match algebraic equations to algebraic variables and order them.

    Equations in which a derivative variable occurs, and variables that are
    differentiated or are derivatives, are excluded from the matching.
    """
    s = state.structure
    graph = s.graph
    algvars = set(s.alg_vars())
    algeqs = {eq for eq in graph.src_vertices if s.is_alg_eq(eq)}
    var_eq_matching = complete(
        maximal_matching(graph, lambda eq: eq in algeqs, lambda v: v in algvars),
        graph.nsrcs,
    )
    var_sccs = find_var_sccs(graph, var_eq_matching)
    return var_eq_matching, var_sccs
