import pytest
from hypothesis import given
from hypothesis import strategies as st

from bayesnet.jonckheere import cjt, jt, jt_mean, jt_stat, jt_var

X = [0, 0, 1, 1, 2, 2, 0, 1, 2, 2]
Y = [0, 1, 1, 2, 2, 2, 0, 0, 1, 2]


def test_mean_of_single_group_is_zero():
    assert jt_mean(7, [7]) == 0.0


def test_variance_is_symmetric_in_margins():
    assert jt_var(10, [3, 3, 4], [2, 5, 3]) == pytest.approx(
        jt_var(10, [2, 5, 3], [3, 3, 4])
    )


def test_constant_response_gives_zero():
    assert jt([0, 0, 1, 1], [1, 1, 1, 1], 2, 2) == 0.0


def test_increasing_trend_is_positive():
    assert jt([0, 0, 1, 1, 2, 2], [0, 0, 1, 1, 2, 2], 3, 3) > 0


def test_reversing_response_order_flips_sign():
    reversed_y = [2 - v for v in Y]
    assert jt(X, reversed_y, 3, 3) == pytest.approx(-jt(X, Y, 3, 3))


def test_swapping_variables_keeps_value():
    assert jt(Y, X, 3, 3) == pytest.approx(jt(X, Y, 3, 3))


def test_single_stratum_matches_unconditional():
    assert cjt(X, Y, [0] * len(X), 3, 3, 1) == pytest.approx(jt(X, Y, 3, 3))


def test_unobserved_strata_are_ignored():
    z = [0] * len(X)
    assert cjt(X, Y, z, 3, 3, 4) == pytest.approx(cjt(X, Y, z, 3, 3, 1))


def test_stat_default_row_totals():
    table = [[2, 1, 0], [1, 1, 1], [0, 1, 3]]
    assert jt_stat(table) == pytest.approx(jt_stat(table, [3, 3, 4]))


def test_codes_out_of_range():
    with pytest.raises(ValueError):
        jt([0, 1, 3], [0, 1, 1], 3, 2)


def test_length_mismatch():
    with pytest.raises(ValueError):
        jt([0, 1], [0, 1, 1], 2, 2)


def test_row_totals_must_match_table():
    with pytest.raises(ValueError):
        jt_stat([[1, 2], [3, 4]], [3])


@given(
    st.lists(
        st.tuples(st.integers(0, 2), st.integers(0, 2)), min_size=1, max_size=30
    )
)
def test_centered_stat_is_half_concordance_difference(pairs):
    table = [[0] * 3 for _ in range(3)]
    for a, b in pairs:
        table[a][b] += 1
    ni = [sum(row) for row in table]
    score = 0
    for xa, ya in pairs:
        for xb, yb in pairs:
            if xa > xb:
                score += (ya > yb) - (ya < yb)
    centered = jt_stat(table, ni) - jt_mean(len(pairs), ni)
    assert centered == pytest.approx(score / 2, abs=1e-9)