import numpy as np
import pytest

from bayesnet.linalg import det, finv, ginv, qr_ols, quadratic, rotate, svd


def _spd(n, seed=0):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(n + 3, n))
    return a.T @ a + np.eye(n)


def test_svd_reconstructs_matrix():
    a = np.array([[2.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 4.0]])
    u, d, vt = svd(a)
    assert np.allclose(u @ np.diag(d) @ vt, a)
    assert list(d) == sorted(d, reverse=True)


def test_svd_rejects_vector():
    with pytest.raises(ValueError):
        svd([1.0, 2.0])


def test_det_diagonal_and_scale():
    m = np.diag([2.0, 3.0, 5.0])
    assert det(m) == pytest.approx(30.0)
    assert det(m, 2) == pytest.approx(30.0 * 8)


def test_det_singular_is_zero():
    m = [[1.0, 2.0], [2.0, 4.0]]
    assert det(m) == pytest.approx(0.0, abs=1e-12)


def test_det_does_not_modify_input():
    m = np.array([[1.0, 2.0], [3.0, 4.0]])
    det(m, 4)
    assert np.array_equal(m, np.array([[1.0, 2.0], [3.0, 4.0]]))


def test_det_requires_square():
    with pytest.raises(ValueError):
        det([[1.0, 2.0, 3.0]])


def test_ginv_of_invertible_is_inverse():
    m = _spd(4)
    assert np.allclose(ginv(m) @ m, np.eye(4))


def test_ginv_penrose_conditions_for_singular():
    v = np.array([1.0, 2.0, 3.0])
    m = np.outer(v, v)
    g = ginv(m)
    assert np.allclose(m @ g @ m, m)
    assert np.allclose(g @ m @ g, g)
    assert np.allclose((m @ g).T, m @ g)


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6])
def test_finv_inverts_spd(n):
    m = _spd(n, seed=n)
    assert np.allclose(finv(m) @ m, np.eye(n))


def test_finv_rejects_non_positive_definite_large():
    m = -np.eye(5)
    with pytest.raises(np.linalg.LinAlgError):
        finv(m)


def test_quadratic_identity_is_dot_product():
    x = [1.0, 2.0, 3.0]
    y = [4.0, 5.0, 6.0]
    assert quadratic(x, np.eye(3), y) == pytest.approx(float(np.dot(x, y)))


def test_quadratic_size_mismatch():
    with pytest.raises(ValueError):
        quadratic([1.0, 2.0], np.eye(3), [1.0, 2.0, 3.0])


def test_rotate_with_identities_adds_scaled_mean():
    x = np.array([1.0, -1.0])
    mu = np.array([0.5, 2.0])
    result = rotate(np.eye(2), np.eye(2), x, 2.0, mu)
    assert np.allclose(result, x + 2.0 * mu)


def test_rotate_zero_weight_is_product():
    s1 = np.array([[0.0, 1.0], [1.0, 0.0]])
    s2 = np.array([[2.0, 0.0], [0.0, 3.0]])
    result = rotate(s1, s2, [1.0, 1.0], 0.0, [9.0, 9.0])
    assert np.allclose(result, s1 @ s2 @ np.array([1.0, 1.0]))


def test_qr_ols_exact_fit():
    x = np.arange(6, dtype=float)
    design = np.column_stack([np.ones(6), x])
    y = 1.5 + 2.0 * x
    fitted, sd = qr_ols(design, y)
    assert np.allclose(fitted, y)
    assert sd == pytest.approx(0.0, abs=1e-10)


def test_qr_ols_residuals_orthogonal_to_design():
    rng = np.random.default_rng(3)
    design = np.column_stack([np.ones(20), rng.normal(size=20)])
    y = rng.normal(size=20)
    fitted, sd = qr_ols(design, y)
    residuals = y - fitted
    assert np.allclose(design.T @ residuals, 0.0, atol=1e-10)
    assert sd == pytest.approx(np.sqrt(np.sum(residuals ** 2) / 19))


def test_qr_ols_single_observation():
    fitted, sd = qr_ols([[1.0]], [7.0])
    assert list(fitted) == [7.0]
    assert sd == 0.0


def test_qr_ols_shape_mismatch():
    with pytest.raises(ValueError):
        qr_ols(np.ones((3, 2)), [1.0, 2.0])