import numpy as np
import pytest

from bayesnet.correlation import gaussian_mi
from bayesnet.mutual_information import (
    conditional_mutual_information,
    mutual_information,
)
from bayesnet.structure import (
    Estimator,
    aracne,
    chow_liu,
    mi_matrix,
    tree_directions,
)

GAUSS = Estimator.GAUSSIAN_MAXIMUM_LIKELIHOOD


@pytest.fixture
def chain():
    rng = np.random.default_rng(42)
    x = rng.normal(size=500)
    y = x + 0.5 * rng.normal(size=500)
    z = y + 0.5 * rng.normal(size=500)
    return {"x": x, "y": y, "z": z}


@pytest.fixture
def discrete_chain(chain):
    return {label: (values > 0).astype(int) for label, values in chain.items()}


def _is_symmetric(arcs):
    return all((b, a) in arcs for a, b in arcs)


def test_mi_matrix_gaussian_matches_pairwise(chain):
    cols = list(chain.values())
    mim = mi_matrix(cols, None, GAUSS)
    expected = [
        gaussian_mi(cols[0], cols[1]),
        gaussian_mi(cols[0], cols[2]),
        gaussian_mi(cols[1], cols[2]),
    ]
    assert mim.tolist() == pytest.approx(expected)


def test_mi_matrix_discrete_matches_pairwise(discrete_chain):
    cols = list(discrete_chain.values())
    mim = mi_matrix(cols, [2, 2, 2])
    assert mim[0] == pytest.approx(mutual_information(cols[0], cols[1], 2, 2)[0])
    assert mim[2] == pytest.approx(mutual_information(cols[1], cols[2], 2, 2)[0])


def test_mi_matrix_conditional(discrete_chain):
    cols = list(discrete_chain.values())
    cond = np.arange(len(cols[0])) % 3
    mim = mi_matrix(cols, [2, 2, 2], Estimator.DISCRETE_MAXIMUM_LIKELIHOOD, cond)
    expected = conditional_mutual_information(cols[0], cols[2], cond, 2, 2, 3)[0]
    assert mim[1] == pytest.approx(expected)


def test_mi_matrix_rejects_unknown_estimator(chain):
    with pytest.raises(ValueError):
        mi_matrix(list(chain.values()), None, 3)


def test_mi_matrix_rejects_wrong_levels(discrete_chain):
    with pytest.raises(ValueError):
        mi_matrix(list(discrete_chain.values()), [2, 2])


def test_aracne_drops_weakest_arc(chain):
    arcs = aracne(chain, GAUSS)
    assert set(arcs) == {("x", "y"), ("y", "x"), ("y", "z"), ("z", "y")}


def test_aracne_whitelist_adds_back(chain):
    arcs = aracne(chain, GAUSS, whitelist=[("z", "x")])
    assert ("x", "z") in arcs and ("z", "x") in arcs
    assert len(arcs) == 6


def test_aracne_blacklist_removes(chain):
    arcs = aracne(chain, GAUSS, blacklist=[("y", "x")])
    assert set(arcs) == {("y", "z"), ("z", "y")}


def test_chow_liu_gaussian_chain(chain):
    arcs = chow_liu(chain, None, GAUSS)
    assert set(arcs) == {("x", "y"), ("y", "x"), ("y", "z"), ("z", "y")}


def test_chow_liu_whitelist(chain):
    arcs = chow_liu(chain, None, GAUSS, whitelist=[("x", "z")])
    assert ("x", "z") in arcs
    assert len(arcs) == 4
    assert _is_symmetric(arcs)


def test_chow_liu_blacklist_leaves_no_tree(chain):
    with pytest.raises(ValueError):
        chow_liu(chain, None, GAUSS, blacklist=[("x", "y")])


def test_chow_liu_conditional_is_spanning_tree(discrete_chain):
    cond = np.arange(500) % 2
    arcs = chow_liu(discrete_chain, ["x", "y", "z"], conditional=cond)
    assert len(arcs) == 4
    assert _is_symmetric(arcs)
    assert {a for a, _ in arcs} == {"x", "y", "z"}


def test_tree_directions_from_middle(chain):
    arcs = chow_liu(chain, None, GAUSS)
    directed = tree_directions(arcs, ["x", "y", "z"], "y")
    assert set(directed) == {("y", "x"), ("y", "z")}


def test_tree_directions_from_end(chain):
    arcs = chow_liu(chain, None, GAUSS)
    directed = tree_directions(arcs, ["x", "y", "z"], "x")
    assert set(directed) == {("x", "y"), ("y", "z")}


def test_tree_directions_unknown_root():
    with pytest.raises(ValueError):
        tree_directions([("a", "b"), ("b", "a")], ["a", "b"], "c")