"""
Bipartite incidence graph between equations and variables.

Source vertices are equations ``0..nsrcs-1`` and destination vertices are
variables ``0..ndsts-1``. An edge ``(eq, var)`` means that ``var`` occurs in
``eq``. Adjacency is stored per side as sorted index lists, so neighbor
iteration is always in ascending order.
"""

from __future__ import annotations

import bisect
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sparse


class BipartiteGraph:
    """Equation/variable incidence graph with index-based vertices."""

    def __init__(
        self,
        nsrcs: int,
        ndsts: int,
        fadjlist: Optional[Sequence[Iterable[int]]] = None,
        backedges: bool = True,
    ):
        if nsrcs < 0 or ndsts < 0:
            raise ValueError("vertex counts must be non-negative")
        self._ndsts = ndsts
        self.fadjlist: List[List[int]] = [[] for _ in range(nsrcs)]
        self.badjlist: Optional[List[List[int]]] = [[] for _ in range(ndsts)] if backedges else None
        if fadjlist is not None:
            if len(fadjlist) != nsrcs:
                raise ValueError(f"expected {nsrcs} adjacency rows, got {len(fadjlist)}")
            for eq, row in enumerate(fadjlist):
                for var in row:
                    self.add_edge(eq, var)

    @classmethod
    def from_adjacency(cls, fadjlist: Sequence[Iterable[int]], ndsts: int, backedges: bool = True) -> BipartiteGraph:
        """Build a graph from per-equation variable lists."""
        return cls(len(fadjlist), ndsts, fadjlist, backedges=backedges)

    def __repr__(self) -> str:
        return f"BipartiteGraph(nsrcs={self.nsrcs}, ndsts={self.ndsts}, nedges={self.nedges})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, BipartiteGraph):
            return NotImplemented
        return self.ndsts == other.ndsts and self.fadjlist == other.fadjlist

    # ------------------------------------------------------------------
    # Sizes and vertices
    # ------------------------------------------------------------------

    @property
    def nsrcs(self) -> int:
        """Number of source (equation) vertices."""
        return len(self.fadjlist)

    @property
    def ndsts(self) -> int:
        """Number of destination (variable) vertices."""
        return self._ndsts

    @property
    def nedges(self) -> int:
        return sum(len(row) for row in self.fadjlist)

    @property
    def src_vertices(self) -> range:
        return range(self.nsrcs)

    @property
    def dst_vertices(self) -> range:
        return range(self.ndsts)

    @property
    def has_backedges(self) -> bool:
        return self.badjlist is not None

    def _check(self, eq: int, var: int) -> None:
        if not 0 <= eq < self.nsrcs:
            raise IndexError(f"equation index {eq} out of range [0, {self.nsrcs})")
        if not 0 <= var < self.ndsts:
            raise IndexError(f"variable index {var} out of range [0, {self.ndsts})")

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def has_edge(self, eq: int, var: int) -> bool:
        self._check(eq, var)
        row = self.fadjlist[eq]
        i = bisect.bisect_left(row, var)
        return i < len(row) and row[i] == var

    def add_edge(self, eq: int, var: int) -> bool:
        """Add edge ``(eq, var)``. Returns False if it already exists."""
        self._check(eq, var)
        row = self.fadjlist[eq]
        i = bisect.bisect_left(row, var)
        if i < len(row) and row[i] == var:
            return False
        row.insert(i, var)
        if self.badjlist is not None:
            bisect.insort(self.badjlist[var], eq)
        return True

    def rem_edge(self, eq: int, var: int) -> bool:
        """Remove edge ``(eq, var)``. Returns False if it does not exist."""
        self._check(eq, var)
        row = self.fadjlist[eq]
        i = bisect.bisect_left(row, var)
        if i == len(row) or row[i] != var:
            return False
        del row[i]
        if self.badjlist is not None:
            col = self.badjlist[var]
            del col[bisect.bisect_left(col, eq)]
        return True

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Iterate ``(eq, var)`` pairs in row-major ascending order."""
        for eq, row in enumerate(self.fadjlist):
            for var in row:
                yield eq, var

    # ------------------------------------------------------------------
    # Neighbors
    # ------------------------------------------------------------------

    def src_neighbors(self, eq: int) -> List[int]:
        """Variables incident to equation ``eq`` (ascending)."""
        return self.fadjlist[eq]

    def dst_neighbors(self, var: int) -> List[int]:
        """Equations incident to variable ``var`` (ascending)."""
        if self.badjlist is None:
            raise ValueError("graph has no back edges, call complete() first")
        return self.badjlist[var]

    def degree(self, eq: int) -> int:
        return len(self.fadjlist[eq])

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def complete(self) -> BipartiteGraph:
        """Build the backward adjacency in place if it is missing."""
        if self.badjlist is None:
            badjlist: List[List[int]] = [[] for _ in range(self.ndsts)]
            for eq, var in self.edges():
                badjlist[var].append(eq)
            self.badjlist = badjlist
        return self

    def copy(self) -> BipartiteGraph:
        g = BipartiteGraph(0, self.ndsts, backedges=False)
        g.fadjlist = [list(row) for row in self.fadjlist]
        if self.badjlist is not None:
            g.badjlist = [list(col) for col in self.badjlist]
        return g

    def with_extra_rows(self, rows: Iterable[Iterable[int]]) -> BipartiteGraph:
        """
        Return a new graph with ``rows`` appended as extra source vertices.

        Existing indices are unchanged; the new rows get indices starting at
        ``nsrcs``.
        """
        g = self.copy()
        for row in rows:
            g.fadjlist.append([])
            if g.badjlist is not None:
                eq = g.nsrcs - 1
                for var in row:
                    g.add_edge(eq, var)
            else:
                g.fadjlist[-1] = sorted(set(row))
                for var in g.fadjlist[-1]:
                    g._check(g.nsrcs - 1, var)
        return g

    def incidence_matrix(self, val: bool = True) -> sparse.csr_matrix:
        """Sparse ``nsrcs x ndsts`` incidence matrix."""
        rows, cols = [], []
        for eq, var in self.edges():
            rows.append(eq)
            cols.append(var)
        data = np.full(len(rows), val)
        return sparse.csr_matrix((data, (rows, cols)), shape=(self.nsrcs, self.ndsts))
