from collections import deque

import pytest

from bayesnet.arcs import unique_arcs
from bayesnet.fitted import num_arcs
from bayesnet.generation import (
    BayesianNetwork,
    amat_to_arcs,
    empty_graph,
    ide_cozman_graph,
    ordered_graph,
)

NODES = ["A", "B", "C", "D", "E"]


def _acyclic(network):
    indegree = {label: len(info.parents) for label, info in network.nodes.items()}
    queue = deque(label for label, d in indegree.items() if d == 0)
    seen = 0
    while queue:
        label = queue.popleft()
        seen += 1
        for child in network.nodes[label].children:
            indegree[child] -= 1
            if indegree[child] == 0:
                queue.append(child)
    return seen == len(network.nodes)


def _connected(network):
    labels = list(network.nodes)
    seen = {labels[0]}
    queue = deque([labels[0]])
    while queue:
        label = queue.popleft()
        for other in network.nodes[label].nbr:
            if other not in seen:
                seen.add(other)
                queue.append(other)
    return len(seen) == len(labels)


def _consistent(network):
    for source, target in network.arcs:
        assert target in network.nodes[source].children
        assert source in network.nodes[target].parents
    assert num_arcs(network.nodes) == len(network.arcs)


def test_amat_to_arcs():
    assert amat_to_arcs([[0, 1], [0, 0]], ["A", "B"]) == [("A", "B")]


def test_amat_to_arcs_wrong_shape():
    with pytest.raises(ValueError):
        amat_to_arcs([[0, 1], [0, 0]], ["A", "B", "C"])


def test_empty_graph_single():
    network = empty_graph(NODES)
    assert isinstance(network, BayesianNetwork)
    assert network.arcs == ()
    assert list(network.nodes) == NODES
    assert all(info.parents == () and info.mb == () for info in network.nodes.values())
    assert network.learning["algo"] == "empty"
    assert network.learning["test"] == "none"
    assert network.learning["ntests"] == 0.0


def test_empty_graph_many():
    networks = empty_graph(NODES, 3)
    assert len(networks) == 3
    assert all(net.arcs == () for net in networks)


def test_empty_nodes_rejected():
    with pytest.raises(ValueError):
        empty_graph([])


def test_bad_num_rejected():
    with pytest.raises(ValueError):
        ordered_graph(NODES, 0)


def test_ordered_graph_complete():
    network = ordered_graph(NODES, prob=1.0, rng=1)
    assert list(network.arcs) == unique_arcs(None, NODES)
    assert network.learning["args"] == {"prob": 1.0}
    assert network.learning["algo"] == "ordered"
    _consistent(network)


def test_ordered_graph_empty():
    network = ordered_graph(NODES, prob=0.0, rng=1)
    assert network.arcs == ()


def test_ordered_graph_respects_order():
    networks = ordered_graph(NODES, num=5, prob=0.5, rng=7)
    assert len(networks) == 5
    for network in networks:
        for source, target in network.arcs:
            assert NODES.index(source) < NODES.index(target)
        _consistent(network)


def test_ide_cozman_one_node():
    network = ide_cozman_graph(["A"], burn_in=10, rng=0)
    assert network.arcs == ()


def test_ide_cozman_two_nodes_connected():
    networks = ide_cozman_graph(["A", "B"], num=20, burn_in=5, rng=3)
    for network in networks:
        assert network.arcs in ((("A", "B"),), (("B", "A"),))


@pytest.mark.parametrize("connected", [True, False])
def test_ide_cozman_acyclic(connected):
    networks = ide_cozman_graph(NODES, num=30, burn_in=50, connected=connected, rng=11)
    assert len(networks) == 30
    for network in networks:
        assert _acyclic(network)
        _consistent(network)
        if connected:
            assert _connected(network)
    label = "ic-dag" if connected else "melancon"
    assert networks[0].learning["algo"] == label


def test_ide_cozman_degree_limits():
    networks = ide_cozman_graph(
        NODES, num=30, burn_in=100, max_in_degree=1, max_degree=2, rng=5
    )
    for network in networks:
        for info in network.nodes.values():
            assert len(info.parents) <= 1
            assert len(info.parents) + len(info.children) <= 2


def test_ide_cozman_reproducible():
    first = ide_cozman_graph(NODES, burn_in=40, rng=42)
    second = ide_cozman_graph(NODES, burn_in=40, rng=42)
    assert first.arcs == second.arcs


def test_ide_cozman_no_burn_in_starts_near_chain():
    network = ide_cozman_graph(NODES, burn_in=0, max_degree=2, connected=True, rng=2)
    assert _connected(network)
    assert len(network.arcs) in (len(NODES) - 1, len(NODES) - 2 + 1)


def test_ide_cozman_bad_burn_in():
    with pytest.raises(ValueError):
        ide_cozman_graph(NODES, burn_in=-1)


def test_markov_blanket_cached():
    network = ordered_graph(["A", "B", "C"], prob=1.0, rng=0)
    assert network.nodes["A"].mb == ("B", "C")
    assert network.nodes["C"].parents == ("A", "B")