"""Mutual information between discrete variables.

Variables are sequences of integer level codes in ``range(n)``, where ``n``
is the number of levels.
"""

from __future__ import annotations

import numpy as np


def _codes(values, nlevels, name):
    array = np.asarray(values, dtype=int)
    if array.ndim != 1:
        raise ValueError(f"{name} must be a vector of level codes")
    if nlevels < 1:
        raise ValueError(f"{name} must have at least one level")
    if array.size and (array.min() < 0 or array.max() >= nlevels):
        raise ValueError(f"{name} has codes outside range({nlevels})")
    return array


def _check_lengths(*arrays):
    sizes = {array.shape[0] for array in arrays}
    if len(sizes) != 1:
        raise ValueError("all variables must have the same number of observations")
    if sizes.pop() == 0:
        raise ValueError("no observations")


def _mi_sum(joint, row, col, total):
    """Sum of n * log(n * total / (row * col)) over the non-empty cells."""
    mask = joint > 0
    n = joint[mask]
    expected = (row * col)[mask]
    scale = total[mask] if np.ndim(total) else total
    return float(np.sum(n * np.log(n * scale / expected)))


def _observed_df(ni, nj):
    rows = int(np.count_nonzero(ni))
    cols = int(np.count_nonzero(nj))
    return max(rows - 1, 0) * max(cols - 1, 0)


def mutual_information(x, y, nx, ny, adjusted=False):
    """Mutual information of ``x`` and ``y`` with its degrees of freedom.

    Returns ``(mi, df)``. With ``adjusted``, fewer than five observations
    per cell on average yield ``(0.0, 1.0)``, and the degrees of freedom
    count only the levels actually observed.
    """
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    _check_lengths(x, y)
    num = x.shape[0]
    if adjusted and num < 5 * nx * ny:
        return 0.0, 1.0
    joint = np.zeros((nx, ny))
    np.add.at(joint, (x, y), 1)
    ni = joint.sum(axis=1)
    nj = joint.sum(axis=0)
    mi = _mi_sum(joint, ni[:, None], nj[None, :], num) / num
    df = _observed_df(ni, nj) if adjusted else (nx - 1) * (ny - 1)
    return mi, float(df)


def mi_test(x, y, nx, ny, gsquare=False):
    """Statistic and degrees of freedom of the mutual information test.

    With ``gsquare`` the statistic is rescaled by ``2 * n`` to match the
    G-squared test.
    """
    mi, df = mutual_information(x, y, nx, ny)
    if gsquare:
        mi *= 2 * len(x)
    return mi, df


def conditional_mutual_information(x, y, z, nx, ny, nz, adjusted=False):
    """Mutual information of ``x`` and ``y`` given ``z``, with its degrees of freedom.

    Returns ``(cmi, df)``; ``adjusted`` behaves as in
    :func:`mutual_information`, applied within each level of ``z``.
    """
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    z = _codes(z, nz, "z")
    _check_lengths(x, y, z)
    num = x.shape[0]
    if adjusted and num < 5 * nx * ny * nz:
        return 0.0, 1.0
    joint = np.zeros((nx, ny, nz))
    np.add.at(joint, (x, y, z), 1)
    ni = joint.sum(axis=1)
    nj = joint.sum(axis=0)
    nk = joint.sum(axis=(0, 1))
    cmi = _mi_sum(
        joint,
        ni[:, None, :],
        nj[None, :, :],
        np.broadcast_to(nk[None, None, :], joint.shape),
    ) / num
    if adjusted:
        df = sum(_observed_df(ni[:, k], nj[:, k]) for k in range(nz))
    else:
        df = (nx - 1) * (ny - 1) * nz
    return cmi, float(df)