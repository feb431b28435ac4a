"""
Newton solve of residual blocks.

Blocks that tearing could not make explicit are handed to a CasADi Newton
rootfinder. The solver is called exactly once; any status other than success
is a failure carrying the solver's return status. There is no retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

import casadi as ca
import numpy as np

from daestruct.errors import NonlinearSolveError

ResidualFunction = Union[ca.Function, Callable]


@dataclass
class NonlinearSolution:
    """Outcome of a single rootfinder call."""

    u: np.ndarray
    retcode: str
    success: bool
    iterations: int = 0


def _as_column(x: Any) -> ca.DM:
    x = np.atleast_1d(np.asarray(x, dtype=float)).ravel()
    if x.size == 0:
        return ca.DM.zeros(0, 1)
    return ca.DM(x.reshape(-1, 1))


def residual_function(f: ResidualFunction, n: int, n_p: int) -> ca.Function:
    """
    Wrap ``f`` as a CasADi function ``(u, p) -> r``.

    ``f`` may already be a ``casadi.Function``; otherwise it is called once
    with symbolic ``u`` (n x 1) and ``p`` (n_p x 1) and may return a CasADi
    expression or a list of scalar expressions.
    """
    if isinstance(f, ca.Function):
        return f
    u = ca.SX.sym("u", n)
    p = ca.SX.sym("p", n_p)
    r = f(u, p)
    if isinstance(r, (list, tuple)):
        r = ca.vertcat(*r)
    return ca.Function("residual", [u, p], [r], ["u", "p"], ["r"])


def solve_residual(
    f: ResidualFunction,
    u0: Any,
    p: Any = (),
    abstol: float = 1e-12,
    max_iter: int = 100,
) -> NonlinearSolution:
    """
    Solve ``f(u, p) = 0`` for ``u`` starting from ``u0`` with Newton's method.

    Returns the solution together with the solver status instead of raising.
    """
    u0 = _as_column(u0)
    p = _as_column(p)
    g = residual_function(f, u0.shape[0], p.shape[0])
    rf = ca.rootfinder(
        "nlsolve",
        "newton",
        g,
        {"abstol": abstol, "max_iter": max_iter, "error_on_fail": False},
    )
    u = rf(u0, p)
    stats = rf.stats()
    retcode = str(stats.get("return_status", "unknown"))
    return NonlinearSolution(
        u=np.asarray(ca.DM(u).full(), dtype=float).ravel(),
        retcode=retcode,
        success=bool(stats["success"]) if "success" in stats else retcode == "success",
        iterations=int(stats.get("iter_count", 0)),
    )


def numerical_nlsolve(f: ResidualFunction, u0: Any, p: Any = ()) -> np.ndarray:
    """Solve ``f(u, p) = 0`` and return ``u``, raising ``NonlinearSolveError`` on failure."""
    sol = solve_residual(f, u0, p)
    if not sol.success:
        raise NonlinearSolveError(sol.retcode)
    return sol.u
