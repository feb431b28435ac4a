"""
Tests for BLT ordering via strongly connected components.

Partitions are checked against scipy's strong connected components on seeded
random graphs, and the component order against the dependency edges.
"""

import numpy as np
import scipy.sparse as sparse
from scipy.sparse.csgraph import connected_components

from daestruct import BipartiteGraph, Matching, algebraic_variables_scc, complete, find_var_sccs, maximal_matching
from daestruct.scc import strongly_connected_components, var_dependency_graph


def random_square_graph(rng, n: int, density: float) -> BipartiteGraph:
    mask = rng.random((n, n)) < density
    np.fill_diagonal(mask, True)
    fadjlist = [[int(j) for j in np.flatnonzero(row)] for row in mask]
    return BipartiteGraph.from_adjacency(fadjlist, n)


class TestFindVarSccs:
    def test_triangular(self, triangular_state) -> None:
        graph = triangular_state.structure.graph

        assert find_var_sccs(graph) == [[0], [1], [2]]

    def test_coupled(self, coupled_state) -> None:
        graph = coupled_state.structure.graph

        assert find_var_sccs(graph) == [[0, 1, 2]]

    def test_order_follows_dependencies(self) -> None:
        # eq0 determines var0 from var2, eq2 determines var2 from var1
        g = BipartiteGraph.from_adjacency([[0, 2], [1], [1, 2]], ndsts=3)

        assert find_var_sccs(g) == [[1], [2], [0]]

    def test_unassigned_variables_are_singletons(self) -> None:
        g = BipartiteGraph.from_adjacency([[0, 1, 2]], ndsts=3)
        sccs = find_var_sccs(g, Matching([0, None, None]))

        assert sorted(sccs) == [[0], [1], [2]]

    def test_explicit_matching(self) -> None:
        g = BipartiteGraph.from_adjacency([[0, 1], [1, 2], [2, 0]], ndsts=3)
        m = complete(maximal_matching(g))

        assert find_var_sccs(g, m) == [[0, 1, 2]]

    def test_partition_and_reverse_topological_order(self) -> None:
        rng = np.random.default_rng(7)
        for _ in range(50):
            n = int(rng.integers(1, 12))
            g = random_square_graph(rng, n, float(rng.uniform(0.05, 0.4)))
            m = maximal_matching(g)
            sccs = find_var_sccs(g, m)

            # partition of all variables, each exactly once
            members = sorted(v for c in sccs for v in c)
            assert members == list(range(n))
            assert all(c == sorted(c) for c in sccs)

            deps = var_dependency_graph(g, m)
            rows = [v for v in range(n) for _ in deps[v]]
            cols = [w for v in range(n) for w in deps[v]]
            adj = sparse.csr_matrix((np.ones(len(rows)), (rows, cols)), shape=(n, n))
            n_comp, labels = connected_components(adj, directed=True, connection="strong")
            assert n_comp == len(sccs)
            for c in sccs:
                assert len({int(labels[v]) for v in c}) == 1

            # dependencies come first
            position = {v: k for k, c in enumerate(sccs) for v in c}
            for v in range(n):
                for w in deps[v]:
                    assert position[w] <= position[v]

    def test_deterministic(self) -> None:
        rng = np.random.default_rng(3)
        g = random_square_graph(rng, 10, 0.3)
        m = maximal_matching(g)

        assert find_var_sccs(g, m) == find_var_sccs(g.copy(), maximal_matching(g))


class TestTarjan:
    def test_cycle_and_tail(self) -> None:
        adj = [[1], [2], [0, 3], []]

        assert strongly_connected_components(adj) == [[3], [0, 1, 2]]

    def test_deep_chain(self) -> None:
        n = 5000
        adj = [[i + 1] if i + 1 < n else [] for i in range(n)]
        sccs = strongly_connected_components(adj)

        assert len(sccs) == n
        assert sccs[0] == [n - 1]


class TestAlgebraicVariablesScc:
    def test_skips_differential_part(self, oscillator_state) -> None:
        matching, sccs = algebraic_variables_scc(oscillator_state)

        assert matching.cardinality == 0
        assert sorted(v for c in sccs for v in c) == [0, 1, 2, 3]

    def test_algebraic_system(self, triangular_state) -> None:
        matching, sccs = algebraic_variables_scc(triangular_state)

        assert matching.match == [0, 1, 2]
        assert sccs == [[0], [1], [2]]
