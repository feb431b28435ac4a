"""
Derivative relation between variables.

``var_to_diff[v]`` is the index of the time derivative of variable ``v``, or
``None`` if ``v`` is not differentiated. The inverse relation is maintained
alongside so that both directions can be queried in O(1). Each variable has at
most one derivative and at most one antiderivative, so the relation is a
forest of chains ``x -> der(x) -> der(der(x))``.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple


class DiffGraph:
    """Partial map ``variable -> derivative variable`` with its inverse."""

    def __init__(self, n: int, primal_to_diff: Optional[Iterable[Optional[int]]] = None):
        self.primal_to_diff: List[Optional[int]] = [None] * n
        self.diff_to_primal: List[Optional[int]] = [None] * n
        if primal_to_diff is not None:
            for v, dv in enumerate(primal_to_diff):
                if dv is not None:
                    self[v] = dv

    def __repr__(self) -> str:
        return f"DiffGraph({self.primal_to_diff})"

    def __len__(self) -> int:
        return len(self.primal_to_diff)

    def __iter__(self) -> Iterator[Optional[int]]:
        return iter(self.primal_to_diff)

    def __getitem__(self, v: int) -> Optional[int]:
        return self.primal_to_diff[v]

    def __setitem__(self, v: int, dv: Optional[int]) -> None:
        old = self.primal_to_diff[v]
        if old == dv:
            return
        if dv is not None:
            w = dv
            while w is not None:
                if w == v:
                    raise ValueError(f"derivative chain of variable {v} would form a cycle")
                w = self.primal_to_diff[w]
            if self.diff_to_primal[dv] is not None:
                raise ValueError(
                    f"variable {dv} is already the derivative of variable {self.diff_to_primal[dv]}"
                )
        if old is not None:
            self.diff_to_primal[old] = None
        self.primal_to_diff[v] = dv
        if dv is not None:
            self.diff_to_primal[dv] = v

    def __eq__(self, other) -> bool:
        if not isinstance(other, DiffGraph):
            return NotImplemented
        return self.primal_to_diff == other.primal_to_diff

    def add_vertex(self) -> int:
        """Append an unrelated variable and return its index."""
        self.primal_to_diff.append(None)
        self.diff_to_primal.append(None)
        return len(self.primal_to_diff) - 1

    def invview(self) -> DiffGraph:
        """The antiderivative relation ``derivative -> variable``."""
        inv = DiffGraph(0)
        inv.primal_to_diff = self.diff_to_primal
        inv.diff_to_primal = self.primal_to_diff
        return inv

    def outneighbors(self, v: int) -> Tuple[int, ...]:
        dv = self.primal_to_diff[v]
        return () if dv is None else (dv,)

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Iterate ``(variable, derivative)`` pairs in ascending variable order."""
        for v, dv in enumerate(self.primal_to_diff):
            if dv is not None:
                yield v, dv

    @property
    def nedges(self) -> int:
        return sum(1 for dv in self.primal_to_diff if dv is not None)

    def is_highest_order(self, v: int) -> bool:
        """True if ``v`` has no derivative variable."""
        return self.primal_to_diff[v] is None

    def order(self, v: int) -> int:
        """Number of antiderivative steps from ``v`` back to its root."""
        k = 0
        while self.diff_to_primal[v] is not None:
            v = self.diff_to_primal[v]
            k += 1
        return k
