"""Linear and partial correlation coefficients and Gaussian mutual information."""

from __future__ import annotations

import math
import warnings

import numpy as np

from bayesnet.linalg import MACHINE_TOL, svd


def _safe_cor(cov, xvar, yvar):
    if xvar < MACHINE_TOL or yvar < MACHINE_TOL:
        return 0.0
    return float(cov / math.sqrt(xvar * yvar))


def _bounded(r):
    if r > 1:
        warnings.warn(
            "fixed correlation coefficient greater than 1, "
            "probably due to floating point errors.",
            stacklevel=3,
        )
        return 1.0
    if r < -1:
        warnings.warn(
            "fixed correlation coefficient lesser than -1, "
            "probably due to floating point errors.",
            stacklevel=3,
        )
        return -1.0
    return r


def _pair(x, y):
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.ndim != 1 or x.shape != y.shape:
        raise ValueError("x and y must be vectors of the same length")
    if x.size == 0:
        raise ValueError("no observations")
    return x, y


def fast_cor(x, y):
    """Pearson correlation of ``x`` and ``y``; zero if either is constant."""
    x, y = _pair(x, y)
    dx = x - x.mean()
    dy = y - y.mean()
    r = _safe_cor(float(np.sum(dx * dy)), float(np.sum(dx * dx)), float(np.sum(dy * dy)))
    return _bounded(r)


def fast_cor2(x, y, xm, ym, xsd, ysd):
    """Pearson correlation given the means and the sums of squared deviations."""
    x, y = _pair(x, y)
    cov = float(np.sum((x - xm) * (y - ym)))
    return _bounded(_safe_cor(cov, xsd, ysd))


def fast_pcor(cov, strict=False):
    """Partial correlation of the first two variables given all the others.

    ``cov`` is their covariance matrix, inverted through its SVD. If the
    decomposition fails, ``strict`` raises; otherwise independence is
    assumed with a warning.
    """
    cov = np.array(cov, dtype=float)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1] or cov.shape[0] < 2:
        raise ValueError("the covariance matrix must be square with at least two rows")
    ncols = cov.shape[0]
    try:
        u, d, vt = svd(cov)
    except np.linalg.LinAlgError as exc:
        if strict:
            raise np.linalg.LinAlgError(
                "failed to compute the pseudoinverse of the covariance matrix."
            ) from exc
        warnings.warn(
            "failed to compute the pseudoinverse of the covariance matrix, "
            "assuming independence.",
            stacklevel=2,
        )
        return 0.0
    threshold = ncols * d[0] * MACHINE_TOL * MACHINE_TOL
    keep = d > threshold
    k11 = float(np.sum(u[0, keep] * vt[keep, 0] / d[keep]))
    k12 = float(np.sum(u[0, keep] * vt[keep, 1] / d[keep]))
    k22 = float(np.sum(u[1, keep] * vt[keep, 1] / d[keep]))
    return _bounded(_safe_cor(-k12, k11, k22))


def gaussian_mi(x, y):
    """Mutual information of two jointly Gaussian variables."""
    r = fast_cor(x, y)
    return -0.5 * math.log(1 - r * r)