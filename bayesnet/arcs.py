"""Arc-set utilities: hashing, duplicate removal and membership checks.

Arcs are ``(from, to)`` pairs of node labels unless stated otherwise; node
positions used in hashes are 1-based, following the order of ``nodes``.
"""

from __future__ import annotations

import warnings
from collections import Counter
from collections.abc import Hashable, Iterable, Sequence

import numpy as np

Arc = tuple


def uptri_index(i, j, n):
    """Index of the unordered pair ``{i, j}`` in the strict upper triangle.

    ``i`` and ``j`` are 1-based node positions among ``n`` nodes; pairs are
    numbered row by row, so the result lies in ``range(n * (n - 1) // 2)``.
    """
    if i == j:
        raise ValueError("an arc cannot join a node to itself")
    if not (1 <= i <= n and 1 <= j <= n):
        raise ValueError(f"node positions must lie between 1 and {n}")
    row, col = min(i, j), max(i, j)
    return (row - 1) * n - (row - 1) * row // 2 + (col - row - 1)


def _positions(nodes: Iterable[Hashable]) -> dict:
    index: dict = {}
    for position, label in enumerate(nodes, start=1):
        index.setdefault(label, position)
    return index


def _locate(label, index: dict) -> int:
    try:
        return index[label]
    except KeyError:
        raise ValueError(f"unknown node {label!r}") from None


def arc_hash(arcs, nodes, uptri=False, sort=False):
    """Hash each arc to an integer.

    With ``uptri`` the hash ignores direction (see :func:`uptri_index`);
    otherwise it is the column-major position of the arc in the adjacency
    matrix, as returned by :func:`amat_hash`.
    """
    nodes = list(nodes)
    index = _positions(nodes)
    n = len(nodes)
    hashes = []
    for source, target in arcs:
        i, j = _locate(source, index), _locate(target, index)
        hashes.append(uptri_index(i, j, n) if uptri else (i - 1) + (j - 1) * n)
    if sort:
        hashes.sort()
    return hashes


def amat_hash(amat):
    """Column-major coordinates of the non-zero cells of an adjacency matrix."""
    matrix = np.asarray(amat)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError("the adjacency matrix must be square")
    return np.flatnonzero(matrix.flatten(order="F") > 0).tolist()


def is_dag(arcs, nnodes):
    """Whether no pair of nodes is joined by more than one arc.

    ``arcs`` holds pairs of 1-based node positions; the graph is taken to be
    directed only if no arc appears together with its reverse. Each arc must
    be listed at most once.
    """
    seen = set()
    for source, target in arcs:
        if not (1 <= source <= nnodes and 1 <= target <= nnodes):
            raise ValueError(f"node positions must lie between 1 and {nnodes}")
        key = (min(source, target), max(source, target))
        if key in seen:
            return False
        seen.add(key)
    return True


def is_row_equal(arcs, arc):
    """For each arc in ``arcs``, whether it equals ``arc`` exactly."""
    source, target = arc
    return [a == source and b == target for a, b in arcs]


def is_listed(arc, arcs, either=False, both=False):
    """Whether ``arc`` is in ``arcs``.

    With ``either`` the direction is ignored; with ``both`` the arc must be
    present in both directions.
    """
    if arcs is None:
        return False
    source, target = arc
    matched = 0
    for a, b in arcs:
        if a == source:
            if b == target:
                matched += 1
                if (not either and not both) or either or (matched == 2 and both):
                    return True
        elif either or both:
            if a == target and b == source:
                matched += 1
                if either or (matched == 2 and both):
                    return True
    return False


def unique_arcs(arcs, nodes, warn=False):
    """Drop duplicate arcs, keeping the first occurrence of each.

    ``arcs=None`` stands for every arc allowed by the order of ``nodes``,
    that is each node pointing to all the nodes after it.
    """
    nodes = list(nodes)
    if arcs is None:
        return [
            (source, target)
            for position, source in enumerate(nodes)
            for target in nodes[position + 1:]
        ]
    arcs = [tuple(arc) for arc in arcs]
    if not arcs:
        return arcs
    seen = set()
    kept = []
    for arc, code in zip(arcs, arc_hash(arcs, nodes)):
        if code in seen:
            continue
        seen.add(code)
        kept.append(arc)
    removed = len(arcs) - len(kept)
    if removed and warn:
        warnings.warn(f"removed {removed} duplicate arcs.", stacklevel=2)
    return kept


def which_undirected(arcs, nodes=None):
    """For each arc, whether its reverse is also in the arc set."""
    arcs = [tuple(arc) for arc in arcs]
    if nodes is None:
        labels: Sequence = list(
            dict.fromkeys([a for a, _ in arcs] + [b for _, b in arcs])
        )
    else:
        labels = list(nodes)
    index = _positions(labels)
    keys = []
    for source, target in arcs:
        i, j = _locate(source, index), _locate(target, index)
        keys.append((min(i, j), max(i, j)))
    counts = Counter(keys)
    return [counts[key] > 1 for key in keys]