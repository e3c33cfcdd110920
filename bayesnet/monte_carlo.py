"""Monte Carlo and semiparametric independence tests.

Discrete variables are sequences of integer level codes in ``range(n)``.
Discrete tests resample contingency tables with the observed margins;
Gaussian tests permute the second variable. Nonparametric tests count the
resampled statistics at least as extreme as the observed one, and stop
early once there are enough of them to exceed ``alpha``. Semiparametric
tests estimate the degrees of freedom of a chi-square null distribution
as the mean of the resampled statistics.
"""

from __future__ import annotations

import enum
import math
import warnings
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy.stats import chi2

from bayesnet.jonckheere import jt_mean, jt_stat, jt_var
from bayesnet.linalg import MACHINE_TOL, svd


class Test(enum.Enum):
    """Test statistics supported by the resampling tests."""

    MUTUAL_INFORMATION = "mi"
    PEARSON_X2 = "x2"
    SP_MUTUAL_INFORMATION = "sp-mi"
    SP_PEARSON_X2 = "sp-x2"
    JT = "jt"
    GAUSSIAN_MUTUAL_INFORMATION = "mi-g"
    LINEAR_CORRELATION = "cor"
    FISHER_Z = "zf"


_DISCRETE = frozenset(
    {
        Test.MUTUAL_INFORMATION,
        Test.PEARSON_X2,
        Test.SP_MUTUAL_INFORMATION,
        Test.SP_PEARSON_X2,
        Test.JT,
    }
)
_GAUSSIAN = frozenset(
    {Test.GAUSSIAN_MUTUAL_INFORMATION, Test.LINEAR_CORRELATION, Test.FISHER_Z}
)
_SEMIPARAMETRIC = frozenset({Test.SP_MUTUAL_INFORMATION, Test.SP_PEARSON_X2})


@dataclass(frozen=True)
class MCResult:
    """Observed statistic, p-value and, for semiparametric tests, degrees of freedom."""

    observed: float
    pvalue: float
    df: float | None = None


def _generator(rng) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _check_test(test, allowed) -> Test:
    test = Test(test)
    if test not in allowed:
        raise ValueError(f"test {test.value!r} is not supported here")
    return test


def _check_samples(b):
    if int(b) != b or b < 1:
        raise ValueError("the number of Monte Carlo samples must be a positive integer")
    return int(b)


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


def _exceedances(draw: Callable[[], float], exceeds: Callable[[float], bool], b, alpha):
    """Count resampled statistics that exceed the observed one, stopping early."""
    enough = math.ceil(alpha * b) + 1
    count = 0
    for _ in range(b):
        if exceeds(draw()):
            count += 1
            if count >= enough:
                break
    return count


def _random_table(rows, cols, rng: np.random.Generator) -> np.ndarray:
    """A random table with the given margins, uniform under independence."""
    table = np.zeros((rows.size, cols.size), dtype=np.int64)
    remaining = cols.astype(np.int64)
    for i, total in enumerate(rows.astype(np.int64)):
        if total == 0:
            continue
        draw = rng.multivariate_hypergeometric(remaining, int(total))
        table[i] = draw
        remaining = remaining - draw
    return table


def _mi(table, rows, cols, total):
    mask = table > 0
    n = table[mask].astype(float)
    expected = np.outer(rows, cols).astype(float)[mask]
    return float(np.sum(n * np.log(n * total / expected)))


def _x2(table, rows, cols, total):
    mask = table > 0
    expected = np.outer(rows, cols).astype(float)[mask] / total
    diff = table[mask] - expected
    return float(np.sum(diff * diff / expected))


def _jt_centered(table, rows, total):
    return jt_stat(table, rows) - jt_mean(total, rows)


def _standardise(value, var):
    if math.isnan(var) or var < 0:
        return math.nan
    if var == 0:
        if value == 0 or math.isnan(value):
            return math.nan
        return math.copysign(math.inf, value)
    return value / math.sqrt(var)


def _run_discrete(test, statistic, draw, b, alpha, finish_jt):
    observed = statistic()
    df = None
    if test in (Test.MUTUAL_INFORMATION, Test.PEARSON_X2):
        count = _exceedances(draw, lambda s: s > observed, b, alpha)
        if test is Test.MUTUAL_INFORMATION:
            observed *= 2
        pvalue = count / b
    elif test in _SEMIPARAMETRIC:
        total = sum(draw() for _ in range(b))
        if test is Test.SP_MUTUAL_INFORMATION:
            observed *= 2
            df = total * 2 / b
        else:
            df = total / b
        pvalue = float(chi2.sf(observed, df))
    else:
        count = _exceedances(draw, lambda s: abs(s) >= abs(observed), b, alpha)
        observed = finish_jt(observed)
        pvalue = count / b
    return MCResult(observed=float(observed), pvalue=float(pvalue), df=df)


def discrete_mc(x, nx, y, ny, b, alpha, test, rng=None):
    """Monte Carlo or semiparametric test of independence of ``x`` and ``y``."""
    test = _check_test(test, _DISCRETE)
    b = _check_samples(b)
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    _check_lengths(x, y)
    rng = _generator(rng)
    num = x.shape[0]

    table = np.zeros((nx, ny), dtype=np.int64)
    np.add.at(table, (x, y), 1)
    rows = table.sum(axis=1)
    cols = table.sum(axis=0)

    if test in (Test.MUTUAL_INFORMATION, Test.SP_MUTUAL_INFORMATION):
        def stat(t):
            return _mi(t, rows, cols, num)
    elif test in (Test.PEARSON_X2, Test.SP_PEARSON_X2):
        def stat(t):
            return _x2(t, rows, cols, num)
    else:
        def stat(t):
            return _jt_centered(t, rows, num)

    return _run_discrete(
        test,
        lambda: stat(table),
        lambda: stat(_random_table(rows, cols, rng)),
        b,
        alpha,
        lambda value: _standardise(value, jt_var(num, rows, cols)),
    )


def conditional_discrete_mc(x, nx, y, ny, z, nz, b, alpha, test, rng=None):
    """Monte Carlo or semiparametric test of independence of ``x`` and ``y`` given ``z``."""
    test = _check_test(test, _DISCRETE)
    b = _check_samples(b)
    x = _codes(x, nx, "x")
    y = _codes(y, ny, "y")
    z = _codes(z, nz, "z")
    _check_lengths(x, y, z)
    rng = _generator(rng)

    tables = np.zeros((nz, nx, ny), dtype=np.int64)
    np.add.at(tables, (z, x, y), 1)
    rows = tables.sum(axis=2)
    cols = tables.sum(axis=1)
    cond = tables.sum(axis=(1, 2))
    strata = list(zip(rows, cols, cond))

    if test in (Test.MUTUAL_INFORMATION, Test.SP_MUTUAL_INFORMATION):
        def stat(ts):
            return sum(_mi(t, r, c, n) for t, (r, c, n) in zip(ts, strata) if n > 0)
    elif test in (Test.PEARSON_X2, Test.SP_PEARSON_X2):
        def stat(ts):
            return sum(_x2(t, r, c, n) for t, (r, c, n) in zip(ts, strata) if n > 0)
    else:
        def stat(ts):
            return sum(
                _jt_centered(t, r, n) for t, (r, c, n) in zip(ts, strata) if n > 0
            )

    def draw():
        return stat([_random_table(r, c, rng) for r, c, _ in strata])

    def finish_jt(value):
        total_var = 0.0
        for r, c, n in strata:
            var = jt_var(n, r, c)
            if not math.isnan(var):
                total_var += var
        return _standardise(value, total_var)

    return _run_discrete(test, lambda: stat(tables), draw, b, alpha, finish_jt)


def _correlation(x, y):
    dx = x - x.mean()
    dy = y - y.mean()
    xvar = float(np.sum(dx * dx))
    yvar = float(np.sum(dy * dy))
    if xvar < MACHINE_TOL or yvar < MACHINE_TOL:
        return 0.0
    r = float(np.sum(dx * dy)) / math.sqrt(xvar * yvar)
    return min(1.0, max(-1.0, r))


def gaussian_mc(x, y, b, alpha, test, rng=None):
    """Permutation test of independence of two continuous variables."""
    test = _check_test(test, _GAUSSIAN)
    b = _check_samples(b)
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.ndim != 1 or x.shape != y.shape:
        raise ValueError("x and y must be vectors of the same length")
    num = x.size
    if num == 0:
        raise ValueError("no observations")
    if test is Test.FISHER_Z and num - 3 < 1:
        raise ValueError("sample size too small to compute the Fisher's Z transform.")
    rng = _generator(rng)

    dx = x - x.mean()
    dy = y - y.mean()
    observed_cov = float(np.sum(dx * dy))

    count = _exceedances(
        lambda: float(np.sum(dx * rng.permutation(dy))),
        lambda s: abs(s) > abs(observed_cov),
        b,
        alpha,
    )

    r = _correlation(x, y)
    if test is Test.GAUSSIAN_MUTUAL_INFORMATION:
        observed = -num * math.log(1 - r * r) if r * r < 1 else math.inf
    elif test is Test.LINEAR_CORRELATION:
        observed = r
    else:
        observed = _fisher_z(r, num - 3)
    return MCResult(observed=float(observed), pvalue=count / b)


def _fisher_z(r, dof):
    if r >= 1:
        return math.inf
    if r <= -1:
        return -math.inf
    return math.log((1 + r) / (1 - r)) / 2 * math.sqrt(dof)


def _partial_cor(covariance):
    """Partial correlation of the first two variables from their covariance matrix."""
    ncols = covariance.shape[0]
    u, d, vt = svd(covariance)
    threshold = ncols * d[0] * MACHINE_TOL * MACHINE_TOL
    keep = d > threshold
    k11 = float(np.sum(u[0, keep] * vt[keep, 0] / d[keep]))
    k12 = float(np.sum(u[0, keep] * vt[keep, 1] / d[keep]))
    k22 = float(np.sum(u[1, keep] * vt[keep, 1] / d[keep]))
    if k11 < MACHINE_TOL or k22 < MACHINE_TOL:
        return 0.0
    return -k12 / math.sqrt(k11 * k22)


def conditional_gaussian_mc(columns: Sequence, b, alpha, test, rng=None):
    """Permutation test of independence of the first two columns given the others.

    The second column is permuted while all the others stay fixed.
    """
    test = _check_test(test, _GAUSSIAN)
    b = _check_samples(b)
    data = np.asarray(columns, dtype=float)
    if data.ndim != 2 or data.shape[0] < 2:
        raise ValueError("at least two columns of equal length are needed")
    ncols, num = data.shape
    if num < 2:
        raise ValueError("at least two observations are needed")
    if test is Test.FISHER_Z and num - 1 - ncols < 1:
        raise ValueError("sample size too small to compute the Fisher's Z transform.")
    rng = _generator(rng)

    centered = data - data.mean(axis=1, keepdims=True)
    covariance = centered @ centered.T / (num - 1)

    try:
        observed = _partial_cor(covariance)
    except np.linalg.LinAlgError as exc:
        raise np.linalg.LinAlgError(
            "failed to decompose the covariance matrix."
        ) from exc

    errors = 0

    def draw():
        nonlocal errors
        permuted = rng.permutation(centered[1])
        updated = covariance.copy()
        row = centered @ permuted / (num - 1)
        row[1] = covariance[1, 1]
        updated[1, :] = row
        updated[:, 1] = row
        try:
            return _partial_cor(updated)
        except np.linalg.LinAlgError:
            errors += 1
            return 0.0

    count = _exceedances(draw, lambda s: abs(s) > abs(observed), b, alpha)

    if errors > 0:
        warnings.warn(
            f"unable to compute {errors} permutations due to errors in the SVD.",
            stacklevel=2,
        )

    if test is Test.GAUSSIAN_MUTUAL_INFORMATION:
        observed = -num * math.log(1 - observed * observed) if observed ** 2 < 1 else math.inf
    elif test is Test.FISHER_Z:
        observed = _fisher_z(observed, num - 1 - ncols)
    return MCResult(observed=float(observed), pvalue=count / b)