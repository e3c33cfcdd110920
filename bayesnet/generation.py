"""Random generation of directed acyclic graphs.

Graphs are held as :class:`BayesianNetwork` objects whose node information
is cached from an adjacency matrix, where ``amat[i, j] == 1`` stands for
the arc ``nodes[i] -> nodes[j]``.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np

from bayesnet.fitted import NodeInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BayesianNetwork:
    """A network structure with its arc set and cached node information."""

    nodes: Mapping[str, NodeInfo]
    arcs: tuple = ()
    learning: dict = field(default_factory=dict)


def _generator(rng) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _node_list(nodes) -> list:
    nodes = list(nodes)
    if not nodes:
        raise ValueError("at least one node is needed")
    if len(set(nodes)) != len(nodes):
        raise ValueError("node labels must be unique")
    return nodes


def _check_num(num) -> int:
    if int(num) != num or num < 1:
        raise ValueError("the number of graphs must be a positive integer")
    return int(num)


def _learning(algo, args, test="none", ntests=0.0) -> dict:
    return {
        "whitelist": None,
        "blacklist": None,
        "test": test,
        "ntests": float(ntests),
        "algo": algo,
        "args": dict(args),
    }


def amat_to_arcs(amat, nodes):
    """The arcs ``(from, to)`` of an adjacency matrix, row by row."""
    nodes = list(nodes)
    matrix = np.asarray(amat)
    if matrix.shape != (len(nodes), len(nodes)):
        raise ValueError("the adjacency matrix must have one row and column per node")
    return [
        (nodes[i], nodes[j])
        for i in range(len(nodes))
        for j in range(len(nodes))
        if matrix[i, j] > 0
    ]


def _node_info(k, matrix, nodes) -> NodeInfo:
    parents = {i for i in range(len(nodes)) if matrix[i, k] > 0}
    children = {j for j in range(len(nodes)) if matrix[k, j] > 0}
    spouses = {i for c in children for i in range(len(nodes)) if matrix[i, c] > 0}
    blanket = (parents | children | spouses) - {k}

    def labels(indices):
        return tuple(nodes[i] for i in sorted(indices))

    return NodeInfo(
        parents=labels(parents),
        children=labels(children),
        nbr=labels(parents | children),
        mb=labels(blanket),
    )


def _cache_structure(matrix, nodes) -> dict:
    return {label: _node_info(k, matrix, nodes) for k, label in enumerate(nodes)}


def _network(matrix, nodes, algo, args) -> BayesianNetwork:
    return BayesianNetwork(
        nodes=_cache_structure(matrix, nodes),
        arcs=tuple(amat_to_arcs(matrix, nodes)),
        learning=_learning(algo, args),
    )


def _collect(networks: list, num: int):
    return networks if num > 1 else networks[0]


def empty_graph(nodes, num=1):
    """An empty graph, or a list of ``num`` of them if ``num > 1``."""
    nodes = _node_list(nodes)
    num = _check_num(num)
    matrix = np.zeros((len(nodes), len(nodes)), dtype=int)
    network = _network(matrix, nodes, "empty", {})
    return _collect([network] * num, num)


def ordered_graph(nodes, num=1, prob=0.5, rng=None):
    """Graphs respecting the order of ``nodes``, each arc present with probability ``prob``."""
    nodes = _node_list(nodes)
    num = _check_num(num)
    rng = _generator(rng)
    n = len(nodes)
    networks = []
    for _ in range(num):
        matrix = np.zeros((n, n), dtype=int)
        for i in range(n):
            for j in range(i + 1, n):
                matrix[i, j] = 1 if rng.random() < prob else 0
        networks.append(_network(matrix, nodes, "ordered", {"prob": prob}))
    return _collect(networks, num)


def _has_path(start, stop, matrix, undirected) -> bool:
    adjacency = (matrix + matrix.T) > 0 if undirected else matrix > 0
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for nxt in np.flatnonzero(adjacency[current]):
            nxt = int(nxt)
            if nxt == stop:
                return True
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return False


def _ic_step(matrix, nodes, limits, connected, rng) -> bool:
    """One step of the Markov chain: add or remove a random arc if allowed."""
    max_degree, max_in, max_out = limits
    a, b = (int(v) for v in rng.choice(len(nodes), size=2, replace=False))

    if matrix[a, b] == 1:
        if connected:
            matrix[a, b] = 0
            path = _has_path(a, b, matrix, undirected=True)
            matrix[a, b] = 1
        else:
            path = True
        if not path:
            logger.debug("not removing arc %s -> %s (graph not connected).", nodes[a], nodes[b])
            return False
        logger.debug("removing arc %s -> %s.", nodes[a], nodes[b])
        matrix[a, b] = 0
        return True

    degree_a = matrix[a].sum() + matrix[:, a].sum()
    degree_b = matrix[b].sum() + matrix[:, b].sum()
    if (
        degree_a >= max_degree
        or degree_b >= max_degree
        or matrix[a].sum() >= max_out
        or matrix[:, b].sum() >= max_in
    ):
        logger.debug("not adding arc %s -> %s (constraints!).", nodes[a], nodes[b])
        return False
    if _has_path(b, a, matrix, undirected=False):
        logger.debug("not adding arc %s -> %s (cycles!).", nodes[a], nodes[b])
        return False
    logger.debug("adding arc %s -> %s.", nodes[a], nodes[b])
    matrix[a, b] = 1
    return True


def _two_nodes(nodes, num, args, rng):
    forward = np.array([[0, 1], [0, 0]])
    backward = np.array([[0, 0], [1, 0]])
    net_a = _network(forward, nodes, "empty", args)
    net_b = _network(backward, nodes, "empty", args)
    networks = [net_a if rng.random() <= 0.5 else net_b for _ in range(num)]
    return _collect(networks, num)


def ide_cozman_graph(
    nodes,
    num=1,
    burn_in=0,
    max_in_degree=math.inf,
    max_out_degree=math.inf,
    max_degree=math.inf,
    connected=True,
    rng=None,
):
    """Graphs sampled uniformly by a Markov chain, subject to degree limits.

    With ``connected`` the chain of Ide and Cozman keeps every graph
    connected; otherwise Melancon's chain samples any acyclic graph. The
    chain starts from the path through ``nodes`` in order and runs
    ``burn_in`` steps before the first graph is kept; each further graph
    follows one more step.
    """
    nodes = _node_list(nodes)
    num = _check_num(num)
    if int(burn_in) != burn_in or burn_in < 0:
        raise ValueError("the number of burn-in iterations must be a non-negative integer")
    burn_in = int(burn_in)
    rng = _generator(rng)
    n = len(nodes)
    args = {
        "burn.in": burn_in,
        "max.in.degree": max_in_degree,
        "max.out.degree": max_out_degree,
        "max.degree": max_degree,
    }

    if n == 1:
        return empty_graph(nodes, num)
    if n == 2 and connected:
        return _two_nodes(nodes, num, args, rng)

    label = "ic-dag" if connected else "melancon"
    limits = (max_degree, max_in_degree, max_out_degree)
    matrix = np.zeros((n, n), dtype=int)
    for i in range(1, n):
        matrix[i - 1, i] = 1

    for _ in range(burn_in):
        _ic_step(matrix, nodes, limits, connected, rng)

    networks: list = []
    for k in range(num):
        changed = _ic_step(matrix, nodes, limits, connected, rng)
        if changed or k == 0:
            networks.append(_network(matrix.copy(), nodes, label, args))
        else:
            networks.append(networks[-1])
    return _collect(networks, num)