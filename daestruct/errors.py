"""
Exceptions and warnings raised by structural analysis.
"""

from typing import Any, Optional


class StructuralError(Exception):
    """Base class for structural analysis failures."""


class InvalidSystemError(StructuralError):
    """The equation system cannot be solved as posed.

    Carries the ``StructuralIssue`` that triggered it and the full
    ``ConsistencyReport`` when raised from the consistency check.
    """

    def __init__(self, message: str, issue: Optional[Any] = None, report: Optional[Any] = None):
        super().__init__(message)
        self.issue = issue
        self.report = report


class ExtraEquationsError(InvalidSystemError):
    """More equations than highest order variables."""


class ExtraVariablesError(InvalidSystemError):
    """More highest order variables than equations."""


class StructurallySingularError(InvalidSystemError):
    """No complete matching exists, even accounting for derivatives."""


class NonlinearSolveError(StructuralError):
    """The nonlinear solver returned anything but success."""

    def __init__(self, retcode: Any):
        super().__init__(f"The nonlinear solver failed with the return code {retcode}.")
        self.retcode = retcode


class InternalInconsistencyWarning(UserWarning):
    """A variable marked as incident to an equation has a zero coefficient."""
