"""Tests for the structural consistency check."""

import pytest
import sympy as sp

from daestruct import (
    Equation,
    ExtraEquationsError,
    ExtraVariablesError,
    IssueKind,
    StructurallySingularError,
    TearingState,
    Variable,
    assert_consistency,
    check_consistency,
    maximal_matching,
)


class TestBalancedSystems:
    def test_chain_passes(self, chain_state) -> None:
        report = check_consistency(chain_state)

        assert report.is_consistent
        assert report.n_highest_vars == 1
        assert report.n_equations == 1
        assert_consistency(chain_state)

    def test_oscillator_passes(self, oscillator_state) -> None:
        assert check_consistency(oscillator_state).is_consistent

    def test_algebraic_passes(self, triangular_state) -> None:
        report = check_consistency(triangular_state)

        assert report
        assert report.issues == []

    def test_does_not_mutate_state(self, oscillator_state) -> None:
        before = [list(row) for row in oscillator_state.structure.graph.fadjlist]
        check_consistency(oscillator_state)

        assert oscillator_state.structure.graph.fadjlist == before
        assert oscillator_state.structure.solvable_graph is None


class TestUnbalancedSystems:
    def test_missing_equation_reports_extra_variables(self, oscillator_state) -> None:
        # drop der(v) = -x
        state = TearingState.from_equations(oscillator_state.equations[:1], oscillator_state.fullvars)
        report = check_consistency(state)

        extra = report.by_kind(IssueKind.EXTRA_VARIABLES)
        assert len(extra) == 1
        issue = extra[0]
        expected = maximal_matching(
            state.structure.graph, varfilter=state.structure.var_to_diff.is_highest_order
        ).unassigned_indices()
        assert issue.variable_indices == expected
        assert [v.name for v in issue.variables] == ["x", "v", "der_v"]
        assert issue.n_highest_vars == 2
        assert issue.n_equations == 1
        assert "More variables than equations" in issue.message

        with pytest.raises(ExtraVariablesError) as excinfo:
            assert_consistency(state)
        assert excinfo.value.issue == issue

    def test_extra_equation(self) -> None:
        x = sp.Symbol("x")
        state = TearingState.from_equations(
            [Equation(x, 1), Equation(x, 2)],
            [Variable.algebraic("x")],
        )
        report = check_consistency(state)

        assert [i.kind for i in report.issues] == [
            IssueKind.EXTRA_EQUATIONS,
            IssueKind.STRUCTURAL_SINGULARITY,
        ]
        issue = report.issues[0]
        assert issue.equation_indices == [1]
        assert issue.equations == [state.equations[1]]
        assert "There are 1 highest order derivative variables and 2 equations" in issue.message

        with pytest.raises(ExtraEquationsError):
            report.raise_for_errors()

    def test_no_equations_is_singular(self) -> None:
        state = TearingState.from_equations([], [Variable.algebraic("x")])
        report = check_consistency(state)

        assert [i.kind for i in report.issues] == [IssueKind.STRUCTURAL_SINGULARITY]
        assert report.issues[0].variable_indices == [0]


class TestStructuralSingularity:
    def test_balanced_but_singular(self, make_state) -> None:
        x, y = sp.symbols("x y")
        state = make_state("xy", [x - 1, x - 2])
        report = check_consistency(state)

        assert report.is_balanced
        assert [i.kind for i in report.issues] == [IssueKind.STRUCTURAL_SINGULARITY]
        issue = report.issues[0]
        assert issue.variable_indices == [1]
        assert issue.variables[0].name == "y"
        assert issue.message.startswith("The system is structurally singular!")

        with pytest.raises(StructurallySingularError) as excinfo:
            assert_consistency(state)
        assert excinfo.value.report == report


class TestIdempotence:
    def test_repeated_checks_are_identical(self, oscillator_state) -> None:
        state = TearingState.from_equations(oscillator_state.equations[:1], oscillator_state.fullvars)

        first = check_consistency(state)
        second = check_consistency(state)

        assert first == second
        assert str(first) == str(second)

    def test_summary(self, triangular_state) -> None:
        summary = check_consistency(triangular_state).summary()

        assert "Consistency: CONSISTENT" in summary
        assert "Equations: 3" in summary
