"""Structure learning from pairwise mutual information: ARACNE and Chow-Liu trees.

Discrete variables are sequences of integer level codes in ``range(n)``;
when the number of levels is not given it is taken to be one more than the
largest code. Learned undirected arcs are returned in both directions.
"""

from __future__ import annotations

import enum
import itertools
from collections.abc import Mapping, Sequence

import numpy as np

from bayesnet.arcs import arc_hash, uptri_index
from bayesnet.correlation import gaussian_mi
from bayesnet.mutual_information import (
    conditional_mutual_information,
    mutual_information,
)


class Estimator(enum.IntEnum):
    """Estimators of the mutual information."""

    DISCRETE_MAXIMUM_LIKELIHOOD = 1
    GAUSSIAN_MAXIMUM_LIKELIHOOD = 2


def _levels(column) -> int:
    codes = np.asarray(column, dtype=int)
    return int(codes.max()) + 1 if codes.size else 1


def _pairs(dim):
    """Unordered pairs of positions, in the order of :func:`uptri_index`."""
    return list(itertools.combinations(range(dim), 2))


def mi_matrix(
    columns: Sequence,
    nlevels=None,
    estimator=Estimator.DISCRETE_MAXIMUM_LIKELIHOOD,
    cond=None,
    clevels=None,
):
    """Mutual information of every pair of columns.

    The result holds one value per unordered pair, indexed as by
    :func:`bayesnet.arcs.uptri_index`. With ``cond``, discrete estimates
    are conditional on that variable; Gaussian estimates ignore it.
    """
    estimator = Estimator(estimator)
    columns = list(columns)
    dim = len(columns)
    pairs = _pairs(dim)
    if estimator is Estimator.GAUSSIAN_MAXIMUM_LIKELIHOOD:
        values = [gaussian_mi(columns[i], columns[j]) for i, j in pairs]
        return np.array(values, dtype=float)
    if nlevels is None:
        nlevels = [_levels(column) for column in columns]
    elif len(nlevels) != dim:
        raise ValueError("there must be one number of levels for each column")
    if cond is None:
        values = [
            mutual_information(columns[i], columns[j], nlevels[i], nlevels[j])[0]
            for i, j in pairs
        ]
    else:
        if clevels is None:
            clevels = _levels(cond)
        values = [
            conditional_mutual_information(
                columns[i], columns[j], cond, nlevels[i], nlevels[j], clevels
            )[0]
            for i, j in pairs
        ]
    return np.array(values, dtype=float)


def _arc_set(keep, nodes):
    arcs = []
    for (i, j), kept in zip(_pairs(len(nodes)), keep):
        if kept:
            arcs.append((nodes[i], nodes[j]))
            arcs.append((nodes[j], nodes[i]))
    return arcs


def _has_list(arcs) -> bool:
    return arcs is not None and len(arcs) > 0


def aracne(
    data: Mapping,
    estimator=Estimator.DISCRETE_MAXIMUM_LIKELIHOOD,
    whitelist=None,
    blacklist=None,
):
    """ARACNE: drop the weakest arc of every triangle of variables.

    ``data`` maps node labels to columns. Whitelisted arcs are added back,
    then blacklisted ones removed, regardless of their direction.
    """
    nodes = list(data)
    n = len(nodes)
    mim = mi_matrix([data[label] for label in nodes], None, estimator)
    exclude = np.zeros(mim.size, dtype=bool)

    for i, j in _pairs(n):
        coord = uptri_index(i + 1, j + 1, n)
        for k in range(n):
            if k in (i, j):
                continue
            if (
                mim[coord] < mim[uptri_index(i + 1, k + 1, n)]
                and mim[coord] < mim[uptri_index(j + 1, k + 1, n)]
            ):
                exclude[coord] = True
                break

    if _has_list(whitelist):
        for code in arc_hash(whitelist, nodes, uptri=True, sort=True):
            exclude[code] = False
    if _has_list(blacklist):
        for code in arc_hash(blacklist, nodes, uptri=True, sort=True):
            exclude[code] = True

    return _arc_set(~exclude, nodes)


def chow_liu(
    data: Mapping,
    nodes=None,
    estimator=Estimator.DISCRETE_MAXIMUM_LIKELIHOOD,
    whitelist=None,
    blacklist=None,
    conditional=None,
):
    """Maximum-weight spanning tree over the pairwise mutual information.

    ``data`` maps labels to columns, taken in the order of ``nodes``
    (by default that of ``data``). Whitelisted arcs are included first and
    blacklisted ones never; the pair with the smallest mutual information
    is never considered. ``conditional`` is a discrete variable to condition
    on. Raises :class:`ValueError` if the result is not a spanning tree.
    """
    nodes = list(data) if nodes is None else list(nodes)
    n = len(nodes)
    clevels = None if conditional is None else _levels(conditional)
    mim = mi_matrix(
        [data[label] for label in nodes], None, estimator, conditional, clevels
    )
    pairs = _pairs(n)
    include = np.zeros(mim.size, dtype=bool)
    parent = list(range(n))

    def find(k):
        while parent[k] != k:
            parent[k] = parent[parent[k]]
            k = parent[k]
        return k

    def join(a, b):
        parent[find(a)] = find(b)

    narcs = 0
    if _has_list(whitelist):
        for code in arc_hash(whitelist, nodes, uptri=True, sort=True):
            if not include[code]:
                narcs += 1
            include[code] = True
            join(*pairs[code])

    banned = set(arc_hash(blacklist, nodes, uptri=True)) if _has_list(blacklist) else set()

    order = np.argsort(mim, kind="stable")
    for code in order[::-1][:-1]:
        code = int(code)
        if narcs >= n - 1:
            break
        if include[code] or code in banned:
            continue
        a, b = pairs[code]
        if find(a) == find(b):
            continue
        include[code] = True
        join(a, b)
        narcs += 1

    if narcs != n - 1:
        raise ValueError(
            f"learned {narcs} arcs instead of {n - 1}, "
            "this is not a tree spanning all the nodes."
        )
    return _arc_set(include, nodes)


def tree_directions(arcs, nodes, root):
    """Orient the arcs of an undirected tree away from ``root``.

    ``arcs`` lists each undirected arc in both directions; the arcs whose
    tail is closer to the root are returned.
    """
    nodes = list(nodes)
    position = {label: k for k, label in enumerate(nodes)}

    def locate(label):
        try:
            return position[label]
        except KeyError:
            raise ValueError(f"unknown node {label!r}") from None

    arcs = [tuple(arc) for arc in arcs]
    coded = [(locate(a), locate(b)) for a, b in arcs]
    n = len(nodes)
    depth = [0] * n
    depth[locate(root)] = 1
    traversed = 1
    for d in range(1, n + 1):
        for a, b in coded:
            if depth[b] == d and depth[a] == 0:
                depth[a] = d + 1
                traversed += 1
        if traversed == n:
            break
    return [arc for arc, (a, b) in zip(arcs, coded) if depth[a] < depth[b]]