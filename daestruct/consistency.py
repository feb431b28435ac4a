"""
Structural consistency check of a DAE system.

Detects unbalanced systems (more equations than highest order variables, or
the reverse) and structurally singular systems, i.e. systems for which no
complete matching exists even after adding one pseudo-equation per
derivative relation. The extended check is also the termination criterion of
index reduction: an upstream pass can call it after each step.

The check never raises by itself. It returns a ``ConsistencyReport`` with one
``StructuralIssue`` per problem found; ``raise_for_errors`` (or
``assert_consistency``) turns the first issue into its exception type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from daestruct.equation import Equation
from daestruct.errors import (
    ExtraEquationsError,
    ExtraVariablesError,
    InvalidSystemError,
    StructurallySingularError,
)
from daestruct.matching import Matching, complete, invview, maximal_matching
from daestruct.structure import TearingState
from daestruct.types import IssueKind
from daestruct.variable import Variable

_ERRORS = {
    IssueKind.EXTRA_EQUATIONS: ExtraEquationsError,
    IssueKind.EXTRA_VARIABLES: ExtraVariablesError,
    IssueKind.STRUCTURAL_SINGULARITY: StructurallySingularError,
}


@dataclass
class StructuralIssue:
    """A single structural problem with the offending equations or variables."""

    kind: IssueKind
    message: str
    n_highest_vars: int
    n_equations: int
    equation_indices: List[int] = field(default_factory=list)
    variable_indices: List[int] = field(default_factory=list)
    equations: List[Equation] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    @property
    def error_type(self) -> type:
        return _ERRORS[self.kind]


@dataclass
class ConsistencyReport:
    """Result of ``check_consistency``."""

    n_highest_vars: int
    n_equations: int
    issues: List[StructuralIssue] = field(default_factory=list)

    @property
    def is_balanced(self) -> bool:
        return self.n_highest_vars == self.n_equations

    @property
    def is_consistent(self) -> bool:
        """True if no issue was found."""
        return not self.issues

    def __bool__(self) -> bool:
        return self.is_consistent

    def by_kind(self, kind: IssueKind) -> List[StructuralIssue]:
        return [i for i in self.issues if i.kind == kind]

    def raise_for_errors(self) -> None:
        """Raise the exception of the first issue, if any."""
        if not self.issues:
            return
        issue = self.issues[0]
        raise issue.error_type(issue.message, issue=issue, report=self)

    def summary(self) -> str:
        status = "CONSISTENT" if self.is_consistent else "INCONSISTENT"
        lines = [
            f"Consistency: {status}",
            f"  Highest order variables: {self.n_highest_vars}",
            f"  Equations: {self.n_equations}",
        ]
        for issue in self.issues:
            lines.append(f"  - {issue}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()


def _print_array(items) -> str:
    return "\n".join(f" {item}" for item in items)


def _imbalance_issue(state: TearingState, matching: Matching, n_highest_vars: int) -> StructuralIssue:
    neqs = state.nequations
    header = (
        "The system is unbalanced. "
        f"There are {n_highest_vars} highest order derivative variables "
        f"and {neqs} equations.\n"
    )
    if n_highest_vars < neqs:
        eq_var_matching = invview(complete(matching, neqs))
        bad_idxs = [eq for eq in range(neqs) if eq_var_matching[eq] is None]
        bad_eqs = [state.equations[eq] for eq in bad_idxs]
        return StructuralIssue(
            kind=IssueKind.EXTRA_EQUATIONS,
            message=header
            + "More equations than variables, here are the potential extra equation(s):\n"
            + _print_array(bad_eqs),
            n_highest_vars=n_highest_vars,
            n_equations=neqs,
            equation_indices=bad_idxs,
            equations=bad_eqs,
        )
    bad_idxs = matching.unassigned_indices()
    bad_vars = [state.fullvars[v] for v in bad_idxs]
    return StructuralIssue(
        kind=IssueKind.EXTRA_VARIABLES,
        message=header
        + "More variables than equations, here are the potential extra variable(s):\n"
        + _print_array(bad_vars),
        n_highest_vars=n_highest_vars,
        n_equations=neqs,
        variable_indices=bad_idxs,
        variables=bad_vars,
    )


def check_consistency(state: TearingState) -> ConsistencyReport:
    """
    Check balance and structural regularity of ``state``.

    1. Compare the number of highest order variables (variables without a
       derivative) with the number of equations. If they differ, match the
       equations against the highest order variables only and report the
       equations (or variables) left over.
    2. Match the graph extended with one row ``[v, der(v)]`` per derivative
       relation. Unassigned variables, or an imbalance from step 1, make the
       system structurally singular.

    The state is not modified.
    """
    graph = state.structure.graph
    var_to_diff = state.structure.var_to_diff
    n_highest_vars = sum(1 for v in range(len(var_to_diff)) if var_to_diff.is_highest_order(v))
    neqs = graph.nsrcs
    report = ConsistencyReport(n_highest_vars=n_highest_vars, n_equations=neqs)

    if neqs > 0 and not report.is_balanced:
        var_eq_matching = maximal_matching(graph, varfilter=var_to_diff.is_highest_order)
        report.issues.append(_imbalance_issue(state, var_eq_matching, n_highest_vars))

    extended_graph = graph.with_extra_rows([v, dv] for v, dv in var_to_diff.edges())
    extended_var_eq_matching = maximal_matching(extended_graph)
    unassigned = extended_var_eq_matching.unassigned_indices()

    if unassigned or not report.is_balanced:
        unassigned_vars = [state.fullvars[v] for v in unassigned]
        report.issues.append(
            StructuralIssue(
                kind=IssueKind.STRUCTURAL_SINGULARITY,
                message="The system is structurally singular! "
                "Here are the problematic variables: \n" + _print_array(unassigned_vars),
                n_highest_vars=n_highest_vars,
                n_equations=neqs,
                variable_indices=unassigned,
                variables=unassigned_vars,
            )
        )

    return report


def assert_consistency(state: TearingState) -> ConsistencyReport:
    """Like ``check_consistency`` but raise on the first issue."""
    report = check_consistency(state)
    report.raise_for_errors()
    return report


__all__ = [
    "StructuralIssue",
    "ConsistencyReport",
    "check_consistency",
    "assert_consistency",
    "InvalidSystemError",
]
