"""Graph priors for score-based structure learning."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass

from bayesnet.arcs import arc_hash, uptri_index

_PARENT = 1
_CHILD = 2


@dataclass(frozen=True)
class CompletedPrior:
    """Arc probabilities completed as per Castelo and Siebes.

    Each arc ``(from, to)`` has ``from`` before ``to`` in the node order;
    ``fwd`` is the probability of ``from -> to``, ``bkwd`` that of
    ``to -> from``, and ``aid`` the undirected arc identifier, in increasing
    order.
    """

    arcs: tuple = ()
    aid: tuple = ()
    fwd: tuple = ()
    bkwd: tuple = ()

    def __len__(self):
        return len(self.arcs)


def _positions(nodes):
    index: dict = {}
    for position, label in enumerate(nodes, start=1):
        index.setdefault(label, position)
    return index


def _locate(label, index):
    try:
        return index[label]
    except KeyError:
        raise KeyError(f"unknown node {label!r}") from None


def _log(value):
    if value > 0:
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def graph_prior(prior, target, parents, children, beta, nodes):
    """Log prior contribution of ``target`` and its neighbourhood.

    ``prior`` is ``None``, ``"uniform"``, ``"vsp"`` (``beta`` is the
    inclusion probability of each arc) or ``"cs"`` (``beta`` is a
    :class:`CompletedPrior`, or ``None``). Other labels contribute zero.
    """
    if prior is None or prior == "uniform":
        return 0.0
    if prior == "vsp":
        b = float(beta)
        return len(tuple(parents)) * math.log(b / (1 - b))
    if prior == "cs":
        if beta is None:
            return 0.0
        return castelo_prior(beta, target, parents, children, nodes)
    return 0.0


def castelo_prior(beta: CompletedPrior, target, parents, children, nodes):
    """Castelo-Siebes log prior over the arcs between ``target`` and later nodes.

    Each term is divided by the non-informative 1/3, so arcs without a
    specified probability contribute zero.
    """
    nodes = list(nodes)
    index = _positions(nodes)
    t = _locate(target, index)
    nnodes = len(nodes)

    adjacent: dict = {}
    for label in parents:
        adjacent[_locate(label, index)] = _PARENT
    for label in children:
        adjacent[_locate(label, index)] = _CHILD

    result = 0.0
    k = 0
    nbeta = len(beta.aid)
    for i in range(t + 1, nnodes + 1):
        current = uptri_index(t, i, nnodes)
        prior = 1 / 3
        # identifiers are sorted, so the lookup resumes where it stopped.
        while k < nbeta:
            if beta.aid[k] > current:
                break
            if beta.aid[k] == current:
                kind = adjacent.get(i)
                if kind == _PARENT:
                    prior = beta.bkwd[k]
                elif kind == _CHILD:
                    prior = beta.fwd[k]
                else:
                    prior = 1 - beta.bkwd[k] - beta.fwd[k]
                break
            k += 1
        result += _log(prior / (1 / 3))
    return result


def castelo_completion(prior, nodes):
    """Complete a set of ``(from, to, probability)`` triples into a :class:`CompletedPrior`.

    An arc listed in one direction only leaves the remaining probability
    split evenly between the reverse direction and no arc. Raises
    :class:`ValueError` if the two directions of an arc sum to more than one.
    """
    nodes = list(nodes)
    index = _positions(nodes)
    entries = [(source, target, float(p)) for source, target, p in prior]
    hashes = arc_hash([(s, t) for s, t, _ in entries], nodes, uptri=True)
    counts = Counter(hashes)
    order = sorted(range(len(entries)), key=hashes.__getitem__)

    arcs, aid, fwd, bkwd = [], [], [], []
    i = 0
    while i < len(order):
        cur = order[i]
        source, target, p = entries[cur]
        if counts[hashes[cur]] > 1 and i < len(order) - 1:
            i += 1
            other = entries[order[i]][2]
        else:
            other = (1 - p) / 2
        if index[source] < index[target]:
            arc, forward, backward = (source, target), p, other
        else:
            arc, forward, backward = (target, source), other, p
        if forward + backward > 1:
            raise ValueError(
                f"the probabilities for arc {arc[0]} -> {arc[1]} "
                f"sum to {forward + backward:f}."
            )
        arcs.append(arc)
        aid.append(hashes[cur])
        fwd.append(forward)
        bkwd.append(backward)
        i += 1

    return CompletedPrior(
        arcs=tuple(arcs), aid=tuple(aid), fwd=tuple(fwd), bkwd=tuple(bkwd)
    )