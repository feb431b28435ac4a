"""Tests for sparsity patterns."""

import numpy as np
import sympy as sp

from daestruct import (
    analyze_structure,
    reordered_matrix,
    sorted_incidence_matrix,
    torn_system_jacobian_sparsity,
    uneven_invmap,
)


class TestUnevenInvmap:
    def test_partial_inverse(self) -> None:
        rename = uneven_invmap(5, [3, 1])

        np.testing.assert_array_equal(rename, [-1, 1, -1, 0, -1])

    def test_full_permutation(self) -> None:
        perm = [2, 0, 1]
        rename = uneven_invmap(3, perm)

        assert [perm[i] for i in rename] == [0, 1, 2]


class TestSortedIncidenceMatrix:
    def test_triangular_is_lower_triangular(self, triangular_state) -> None:
        m = sorted_incidence_matrix(triangular_state).toarray()

        np.testing.assert_array_equal(
            m,
            [
                [True, False, False],
                [True, True, False],
                [True, True, True],
            ],
        )

    def test_reordering(self, make_state) -> None:
        x, y = sp.symbols("x y")
        # y is determined first, then x from y
        state = make_state("xy", [x - y, y - 1])
        m = sorted_incidence_matrix(state).toarray()

        np.testing.assert_array_equal(m, [[True, False], [True, True]])

    def test_differential_columns_last(self, oscillator_state) -> None:
        m = sorted_incidence_matrix(oscillator_state)

        # no algebraic part: columns are x, v, der_x, der_v
        assert m.shape == (2, 4)
        np.testing.assert_array_equal(
            m.toarray(),
            [
                [False, True, True, False],
                [True, False, False, True],
            ],
        )

    def test_only_algebraic(self, oscillator_state) -> None:
        m = sorted_incidence_matrix(oscillator_state, only_algeqs=True)

        assert m.nnz == 0


class TestJacobianSparsity:
    def test_oscillator(self, oscillator_state) -> None:
        m = torn_system_jacobian_sparsity(oscillator_state)

        assert m.shape == (2, 2)
        np.testing.assert_array_equal(m.toarray(), [[False, True], [True, False]])

    def test_algebraic(self, coupled_state) -> None:
        m = torn_system_jacobian_sparsity(coupled_state)

        assert m.nnz == coupled_state.structure.graph.nedges


class TestReorderedMatrix:
    def test_coupled(self, coupled_state) -> None:
        result = analyze_structure(coupled_state)
        m = reordered_matrix(coupled_state, result.torn_matching).toarray()

        # solved rows eq0, eq1 first, then residual eq2
        np.testing.assert_array_equal(
            m,
            [
                [True, True, False],
                [False, True, True],
                [True, False, True],
            ],
        )

    def test_skips_differential_equations(self, oscillator_state) -> None:
        result = analyze_structure(oscillator_state)
        m = reordered_matrix(oscillator_state, result.torn_matching)

        assert m.shape[0] == 0
