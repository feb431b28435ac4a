"""Tests for the Newton solve of residual blocks."""

import casadi as ca
import numpy as np
import pytest

from daestruct import NonlinearSolveError, numerical_nlsolve, solve_residual


class TestNumericalNlsolve:
    def test_scalar_with_parameter(self) -> None:
        u = numerical_nlsolve(lambda u, p: u**2 - p, [1.0], [4.0])

        np.testing.assert_allclose(u, [2.0], atol=1e-8)

    def test_system_from_list(self) -> None:
        def f(u, p):
            return [u[0] + u[1] - 3, u[0] - u[1] - 1]

        u = numerical_nlsolve(f, [0.0, 0.0])

        np.testing.assert_allclose(u, [2.0, 1.0], atol=1e-10)

    def test_casadi_function(self) -> None:
        u = ca.SX.sym("u", 2)
        p = ca.SX.sym("p", 1)
        f = ca.Function("f", [u, p], [ca.vertcat(u[0] * u[1] - p, u[0] - 2 * u[1])])

        sol = numerical_nlsolve(f, [1.0, 1.0], [8.0])

        np.testing.assert_allclose(sol, [4.0, 2.0], atol=1e-8)

    def test_failure_carries_retcode(self) -> None:
        with pytest.raises(NonlinearSolveError) as excinfo:
            numerical_nlsolve(lambda u, p: u**2 + 1, [0.5])

        assert excinfo.value.retcode
        assert str(excinfo.value.retcode) in str(excinfo.value)


class TestSolveResidual:
    def test_reports_status_instead_of_raising(self) -> None:
        sol = solve_residual(lambda u, p: u**2 + 1, [0.5], max_iter=20)

        assert not sol.success
        assert isinstance(sol.retcode, str)

    def test_success(self) -> None:
        sol = solve_residual(lambda u, p: 3 * u - 6, [0.0])

        assert sol.success
        np.testing.assert_allclose(sol.u, [2.0])
