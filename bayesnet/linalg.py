"""Dense linear algebra helpers used by the tests and scores."""

from __future__ import annotations

import numpy as np
import scipy.linalg

MACHINE_TOL = float(np.finfo(float).eps) ** 0.5
"""Tolerance below which variances and singular values count as zero."""


def _square(matrix, what="matrix") -> np.ndarray:
    array = np.array(matrix, dtype=float)
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise ValueError(f"the {what} must be square")
    return array


def svd(a):
    """Full singular value decomposition ``a = u @ diag(d) @ vt``.

    Returns ``(u, d, vt)`` with singular values in decreasing order; raises
    :class:`numpy.linalg.LinAlgError` if the decomposition fails.
    """
    array = np.array(a, dtype=float)
    if array.ndim != 2:
        raise ValueError("the matrix must be two-dimensional")
    u, d, vt = np.linalg.svd(array, full_matrices=True)
    return u, d, vt


def det(matrix, scale=1):
    """Determinant of ``matrix * scale``; zero for singular matrices."""
    array = _square(matrix) * scale
    if array.shape[0] == 0:
        return 1.0
    return float(np.linalg.det(array))


def ginv(matrix):
    """Moore-Penrose generalised inverse of a square matrix.

    Singular values below ``n * d_max * MACHINE_TOL**2`` are treated as zero.
    """
    array = _square(matrix)
    n = array.shape[0]
    if n == 0:
        return array.copy()
    u, d, vt = svd(array)
    threshold = n * d[0] * MACHINE_TOL * MACHINE_TOL
    inverted = np.zeros_like(d)
    keep = d > threshold
    inverted[keep] = 1.0 / d[keep]
    return (vt.T * inverted) @ u.T


def finv(matrix):
    """Inverse of a symmetric positive definite matrix.

    Small matrices (2x2 to 4x4) are inverted directly; larger ones through
    a Cholesky factorisation, which raises
    :class:`numpy.linalg.LinAlgError` if the matrix is not positive definite.
    """
    array = _square(matrix)
    n = array.shape[0]
    if n in (2, 3, 4):
        return np.linalg.inv(array)
    factor = scipy.linalg.cho_factor(array, lower=False)
    inverse = scipy.linalg.cho_solve(factor, np.eye(n))
    return (inverse + inverse.T) / 2


def quadratic(x, sigma, y):
    """The bilinear form ``x^T sigma y``."""
    sigma = _square(sigma, "weight matrix")
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != (sigma.shape[0],) or y.shape != (sigma.shape[0],):
        raise ValueError("vectors must match the size of the matrix")
    return float(x @ sigma @ y)


def rotate(s1, s2, x, a, mu):
    """Compute ``s1 @ (s2 @ x + a * mu)``."""
    s1 = _square(s1)
    s2 = _square(s2)
    x = np.asarray(x, dtype=float)
    mu = np.asarray(mu, dtype=float)
    if s1.shape != s2.shape or x.shape != (s1.shape[0],) or mu.shape != x.shape:
        raise ValueError("matrices and vectors must have matching sizes")
    return s1 @ (s2 @ x + a * mu)


def qr_ols(design, y):
    """Least-squares fit of ``y`` on the columns of ``design``.

    Returns ``(fitted, sd)``: the fitted values and the standard deviation
    of the residuals (with ``n - 1`` degrees of freedom). A single
    observation is fitted exactly with zero standard deviation.
    """
    y = np.asarray(y, dtype=float)
    design = np.asarray(design, dtype=float)
    if design.ndim == 1:
        design = design[:, np.newaxis]
    if y.ndim != 1 or design.ndim != 2 or design.shape[0] != y.shape[0]:
        raise ValueError("the design matrix must have one row per observation")
    nrow = y.shape[0]
    if nrow == 0:
        raise ValueError("no observations to fit")
    if nrow == 1:
        return y.copy(), 0.0
    coefficients, *_ = np.linalg.lstsq(design, y, rcond=None)
    fitted = design @ coefficients
    residuals = y - fitted
    sd = float(np.sqrt(np.sum(residuals * residuals) / (nrow - 1)))
    return fitted, sd