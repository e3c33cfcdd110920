"""Queries on the structure held by learned or fitted networks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class NodeInfo:
    """Cached structural information about one node.

    ``nbr`` is set for learned structures, which may hold undirected arcs;
    it is ``None`` for fitted networks.
    """

    parents: tuple = ()
    children: tuple = ()
    nbr: tuple | None = None
    mb: tuple = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "mb", tuple(self.mb))
        if self.nbr is not None:
            object.__setattr__(self, "nbr", tuple(self.nbr))


def root_nodes(nodes: Mapping[str, NodeInfo], leaves=False):
    """Labels of the root nodes, or of the leaf nodes if ``leaves``.

    Nodes incident on an undirected arc are never returned.
    """
    result = []
    for label, info in nodes.items():
        primary = info.children if leaves else info.parents
        if primary:
            continue
        if info.nbr is not None:
            other = info.parents if leaves else info.children
            if len(info.nbr) != len(other):
                continue
        result.append(label)
    return result


def fit2arcs(fitted: Mapping[str, NodeInfo]):
    """The arc set of a fitted network, as ``(parent, child)`` pairs."""
    return [(label, child) for label, info in fitted.items() for child in info.children]


def _mark(labels, position: dict, status: list, value: int) -> None:
    for label in labels:
        try:
            k = position[label]
        except KeyError:
            raise KeyError(f"unknown node {label!r}") from None
        if status[k] == 0:
            status[k] = value


_PARENT, _CHILD, _BLANKET, _TARGET = 3, 4, 1, 5


def fitted_mb(fitted: Mapping[str, NodeInfo], target):
    """Markov blanket of ``target``: parents, children and the children's other parents."""
    labels = list(fitted)
    position = {label: k for k, label in enumerate(labels)}
    if target not in position:
        raise KeyError(f"unknown node {target!r}")
    status = [0] * len(labels)
    t = position[target]
    status[t] = _TARGET
    info = fitted[target]
    _mark(info.parents, position, status, _PARENT)
    _mark(info.children, position, status, _CHILD)
    for k, label in enumerate(labels):
        if status[k] == _CHILD:
            _mark(fitted[label].parents, position, status, _BLANKET)
    status[t] = 0
    return [label for label, s in zip(labels, status) if s != 0]


def num_arcs(nodes: Mapping[str, NodeInfo], fitted=None):
    """Number of arcs, counting each undirected arc once.

    ``fitted`` tells whether ``nodes`` comes from a fitted network (arcs are
    counted from the parents) or a learned structure (from the neighbours);
    by default it is fitted when no node carries neighbours.
    """
    infos = list(nodes.values())
    if fitted is None:
        fitted = all(info.nbr is None for info in infos)
    if fitted:
        return sum(len(info.parents) for info in infos)
    if any(info.nbr is None for info in infos):
        raise ValueError("learned structures must list the neighbours of every node")
    return sum(len(info.nbr) for info in infos) // 2