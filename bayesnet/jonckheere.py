"""Jonckheere-Terpstra test for ordered discrete variables.

Variables are sequences of integer level codes in ``range(n)``, where ``n``
is the number of levels; the order of the codes is the order of the levels.
"""

from __future__ import annotations

import math

import numpy as np

from bayesnet.linalg import MACHINE_TOL


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


def _ratio(numerator, denominator):
    """Floating-point division that yields NaN or infinity instead of raising."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


def jt_stat(table, ni=None):
    """Jonckheere-Terpstra statistic of a contingency table.

    Rows are the groups (levels of the first variable), columns the ordered
    responses; ``ni`` are the row totals, computed from the table if omitted.
    """
    table = np.asarray(table, dtype=float)
    if table.ndim != 2:
        raise ValueError("the contingency table must be two-dimensional")
    ni = table.sum(axis=1) if ni is None else np.asarray(ni, dtype=float)
    if ni.shape != (table.shape[0],):
        raise ValueError("there must be one row total for each row of the table")
    result = 0.0
    for i in range(1, table.shape[0]):
        ni2 = ni[i] * (ni[i] + 1) / 2
        for j in range(i):
            pair = table[i] + table[j]
            below = np.cumsum(pair) - pair
            w = float(np.sum((below + (pair + 1) / 2) * table[i]))
            result += w - ni2
    return result


def jt_mean(num, ni):
    """Expected value of the statistic under independence."""
    return (float(num) * float(num) - sum(float(v) * float(v) for v in ni)) / 4


def jt_var(num, ni, nj):
    """Asymptotic variance of the statistic under independence.

    ``ni`` and ``nj`` are the row and column totals of the table.
    """
    n = float(num)
    rows = [float(v) for v in ni]
    cols = [float(v) for v in nj]

    u1 = n * (n - 1) * (2 * n + 5)
    u1 -= sum(v * (v - 1) * (2 * v + 5) for v in rows)
    u1 -= sum(v * (v - 1) * (2 * v + 5) for v in cols)

    u2 = sum(v * (v - 1) * (v - 2) for v in rows) * sum(
        v * (v - 1) * (v - 2) for v in cols
    )
    u3 = sum(v * (v - 1) for v in rows) * sum(v * (v - 1) for v in cols)

    t1 = 72.0
    t2 = 36 * n * (n - 1) * (n - 2)
    t3 = 8 * n * (n - 1)

    return u1 / t1 + _ratio(u2, t2) + _ratio(u3, t3)


def jt(x, y, nx, ny):
    """Standardised Jonckheere-Terpstra statistic of ``y`` across the groups in ``x``.

    A variance below the numerical tolerance yields zero, implying
    independence.
    """
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    _check_lengths(x, y)
    num = x.shape[0]
    table = np.zeros((nx, ny))
    np.add.at(table, (x, y), 1)
    ni = table.sum(axis=1)
    nj = table.sum(axis=0)
    stat = jt_stat(table, ni)
    mean = jt_mean(num, ni)
    var = jt_var(num, ni, nj)
    if var < MACHINE_TOL:
        return 0.0
    return (stat - mean) / math.sqrt(var)


def cjt(x, y, z, nx, ny, nz):
    """Standardised Jonckheere-Terpstra statistic stratified over the levels of ``z``.

    Unobserved strata are skipped, and strata with an undefined or
    negligible variance do not contribute to it.
    """
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    z = _codes(z, nz, "z")
    _check_lengths(x, y, z)
    table = np.zeros((nz, nx, ny))
    np.add.at(table, (z, x, y), 1)
    nrowt = table.sum(axis=2)
    ncolt = table.sum(axis=1)
    ncond = table.sum(axis=(1, 2))

    stat = 0.0
    total_var = 0.0
    for stratum, rows, cols, count in zip(table, nrowt, ncolt, ncond):
        if count == 0:
            continue
        stat += jt_stat(stratum, rows) - jt_mean(count, rows)
        var = jt_var(count, rows, cols)
        if not math.isnan(var) and var > MACHINE_TOL:
            total_var += var

    if total_var < MACHINE_TOL:
        return 0.0
    return stat / math.sqrt(total_var)