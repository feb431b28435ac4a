"""
Maximal bipartite matching between variables and equations.

A ``Matching`` maps each variable index to the equation that determines it,
or to ``None`` when the variable is unassigned. The inverse (equation ->
variable) is only available after ``complete`` has built it.

Example:
    g = BipartiteGraph.from_adjacency([[0, 1], [1]], ndsts=2)
    m = maximal_matching(g)          # m[0] == 0, m[1] == 1
    eq_to_var = invview(complete(m)) # eq_to_var[1] == 1
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional

from daestruct.bipartite import BipartiteGraph


class Matching:
    """Injective assignment ``variable -> Optional[equation]``."""

    def __init__(
        self,
        match: Iterable[Optional[int]],
        inv_match: Optional[List[Optional[int]]] = None,
    ):
        # lists are kept as-is so that invview can share storage
        self.match: List[Optional[int]] = match if isinstance(match, list) else list(match)
        self.inv_match = inv_match

    @classmethod
    def unassigned(cls, n: int) -> Matching:
        """A matching of ``n`` slots with nothing assigned."""
        return cls([None] * n)

    @classmethod
    def identity(cls, n: int) -> Matching:
        """Variable ``i`` assigned to equation ``i``."""
        return cls(range(n))

    def __repr__(self) -> str:
        return f"Matching({self.match})"

    def __len__(self) -> int:
        return len(self.match)

    def __iter__(self) -> Iterator[Optional[int]]:
        return iter(self.match)

    def __getitem__(self, i: int) -> Optional[int]:
        return self.match[i]

    def __setitem__(self, i: int, v: Optional[int]) -> None:
        if self.inv_match is not None:
            old = self.match[i]
            if old is not None:
                self.inv_match[old] = None
            if v is not None:
                if v >= len(self.inv_match):
                    self.inv_match.extend([None] * (v + 1 - len(self.inv_match)))
                self.inv_match[v] = i
        self.match[i] = v

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matching):
            return NotImplemented
        return self.match == other.match

    @property
    def is_complete(self) -> bool:
        """True if the inverse has been built."""
        return self.inv_match is not None

    @property
    def cardinality(self) -> int:
        """Number of assigned slots."""
        return sum(1 for eq in self.match if eq is not None)

    def assigned(self) -> Iterator[tuple[int, int]]:
        """Iterate ``(variable, equation)`` for assigned slots."""
        for var, eq in enumerate(self.match):
            if eq is not None:
                yield var, eq

    def unassigned_indices(self) -> List[int]:
        return [var for var, eq in enumerate(self.match) if eq is None]


def complete(matching: Matching, n: Optional[int] = None) -> Matching:
    """
    Return a copy of ``matching`` with its inverse built.

    The inverse has ``n`` slots (default: one past the largest assigned
    equation); every slot not reached by the forward matching holds ``None``.
    Returns ``matching`` itself if it is already complete.
    """
    if matching.inv_match is not None:
        if n is not None and len(matching.inv_match) < n:
            matching.inv_match.extend([None] * (n - len(matching.inv_match)))
        return matching
    if n is None:
        n = max((eq + 1 for eq in matching.match if eq is not None), default=0)
    inv_match: List[Optional[int]] = [None] * n
    for var, eq in enumerate(matching.match):
        if eq is None:
            continue
        if eq >= n:
            inv_match.extend([None] * (eq + 1 - len(inv_match)))
        if inv_match[eq] is not None:
            raise ValueError(f"matching is not injective: equation {eq} assigned twice")
        inv_match[eq] = var
    return Matching(list(matching.match), inv_match)


def invview(matching: Matching) -> Matching:
    """
    Inverse view ``equation -> variable`` of a complete matching.

    The returned matching shares storage with ``matching``.
    """
    if matching.inv_match is None:
        raise ValueError("invview requires a complete matching, call complete() first")
    return Matching(matching.inv_match, matching.match)


def _first_free(
    matching: Matching,
    graph: BipartiteGraph,
    eq: int,
    varfilter: Callable[[int], bool],
) -> Optional[int]:
    for var in graph.src_neighbors(eq):
        if matching[var] is None and varfilter(var):
            return var
    return None


def construct_augmenting_path(
    matching: Matching,
    graph: BipartiteGraph,
    eq: int,
    varfilter: Callable[[int], bool],
    visited: Optional[List[bool]] = None,
) -> bool:
    """
    Try to assign equation ``eq`` by augmenting ``matching`` in place.

    First looks for a free eligible neighbor, then searches depth first along
    alternating paths, marking visited variables. Neighbors are visited in
    ascending order. Returns True if the matching grew by one.
    """
    free = _first_free(matching, graph, eq, varfilter)
    if free is not None:
        matching[free] = eq
        return True

    if visited is None:
        visited = [False] * graph.ndsts
    stack = [(eq, iter(graph.src_neighbors(eq)))]
    via: List[int] = []
    while stack:
        cur, it = stack[-1]
        for var in it:
            if visited[var] or not varfilter(var):
                continue
            visited[var] = True
            nxt = matching[var]
            free = _first_free(matching, graph, nxt, varfilter)
            if free is not None:
                matching[free] = nxt
                matching[var] = cur
                for (e, _), w in zip(stack, via):
                    matching[w] = e
                return True
            via.append(var)
            stack.append((nxt, iter(graph.src_neighbors(nxt))))
            break
        else:
            stack.pop()
            if via:
                via.pop()
    return False


def maximal_matching(
    graph: BipartiteGraph,
    eqfilter: Optional[Callable[[int], bool]] = None,
    varfilter: Optional[Callable[[int], bool]] = None,
) -> Matching:
    """
    Maximum-cardinality matching of variables to equations.

    Args:
        graph: Incidence graph
        eqfilter: Only equations for which this returns True are matched
        varfilter: Only variables for which this returns True are matched

    Returns:
        Matching with one slot per variable of ``graph``
    """
    if varfilter is None:
        varfilter = _always
    matching = Matching.unassigned(graph.ndsts)
    for eq in graph.src_vertices:
        if eqfilter is None or eqfilter(eq):
            construct_augmenting_path(matching, graph, eq, varfilter)
    return matching


def _always(_: int) -> bool:
    return True
