"""Log-likelihood of discrete and Gaussian nodes given their parents.

Discrete variables are sequences of integer level codes in ``range(n)``;
every function returns ``(loglik, nparams)``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

import numpy as np

from bayesnet.linalg import MACHINE_TOL, qr_ols

_LOG_2PI = math.log(2 * math.pi)


def _codes(values, nlevels, name):
    array = np.asarray(values, dtype=int)
    if array.ndim != 1:
        raise ValueError(f"{name} must be a vector of level codes")
    if nlevels < 1:
        raise ValueError(f"{name} must have at least one level")
    if array.size == 0:
        raise ValueError("no observations")
    if array.min() < 0 or array.max() >= nlevels:
        raise ValueError(f"{name} has codes outside range({nlevels})")
    return array


def _vector(values):
    array = np.asarray(values, dtype=float)
    if array.ndim != 1:
        raise ValueError("observations must be a vector")
    if array.size == 0:
        raise ValueError("no observations")
    return array


def _normal_loglik(x, mean, sd):
    # singular models have zero density.
    if sd < MACHINE_TOL:
        return -math.inf
    z = (x - mean) / sd
    return float(np.sum(-0.5 * _LOG_2PI - math.log(sd) - 0.5 * z * z))


def discrete_loglik(x, nlevels):
    """Multinomial log-likelihood of ``x`` at the maximum likelihood estimates."""
    x = _codes(x, nlevels, "x")
    counts = np.bincount(x, minlength=nlevels).astype(float)
    observed = counts[counts > 0]
    loglik = float(np.sum(observed * np.log(observed / x.size)))
    return loglik, float(nlevels - 1)


def conditional_discrete_loglik(x, config, nx, nconfig):
    """Log-likelihood of ``x`` given the parents' configurations ``config``."""
    x = _codes(x, nx, "x")
    config = _codes(config, nconfig, "config")
    if x.shape != config.shape:
        raise ValueError("x and config must have the same number of observations")
    joint = np.zeros((nx, nconfig))
    np.add.at(joint, (x, config), 1)
    totals = np.broadcast_to(joint.sum(axis=0), joint.shape)
    mask = joint > 0
    loglik = float(np.sum(joint[mask] * np.log(joint[mask] / totals[mask])))
    return loglik, float((nx - 1) * nconfig)


def gaussian_loglik(x):
    """Gaussian log-likelihood of ``x`` with sample mean and standard deviation."""
    x = _vector(x)
    num = x.size
    mean = float(np.mean(x))
    if num > 1:
        sd = math.sqrt(float(np.sum((x - mean) ** 2)) / (num - 1))
    else:
        sd = math.nan
    return _normal_loglik(x, mean, sd), 1.0


def conditional_gaussian_loglik(x, parents):
    """Log-likelihood of ``x`` regressed on the parent columns.

    ``parents`` is a sequence of columns, one per parent, each as long as
    ``x``; the regression includes an intercept.
    """
    x = _vector(x)
    columns = np.asarray(parents, dtype=float)
    if columns.ndim == 1 and columns.size:
        columns = columns[np.newaxis, :]
    if columns.ndim != 2 or columns.shape[0] == 0 or columns.shape[1] != x.size:
        raise ValueError("parents must be one or more columns as long as x")
    design = np.column_stack([np.ones(x.size), columns.T])
    fitted, sd = qr_ols(design, x)
    return _normal_loglik(x, fitted, sd), float(design.shape[1])


def _configurations(columns, levels):
    config = np.zeros(len(columns[0]), dtype=int)
    radix = 1
    for values, nlevels in zip(columns, levels):
        codes = _codes(values, nlevels, "parent")
        if codes.shape != config.shape:
            raise ValueError("all variables must have the same number of observations")
        config += codes * radix
        radix *= nlevels
    return config, radix


def discrete_node_loglik(target, parents: Sequence, data: Mapping, nlevels: Mapping):
    """Log-likelihood of a discrete node given its parents.

    ``data`` maps labels to level codes and ``nlevels`` maps labels to the
    number of levels; every combination of the parents' levels counts as a
    configuration, observed or not.
    """
    x = data[target]
    parents = list(parents)
    if not parents:
        return discrete_loglik(x, nlevels[target])
    config, nconfig = _configurations(
        [data[p] for p in parents], [nlevels[p] for p in parents]
    )
    return conditional_discrete_loglik(x, config, nlevels[target], nconfig)


def gaussian_node_loglik(target, parents: Sequence, data: Mapping):
    """Log-likelihood of a Gaussian node given its parents; ``data`` maps labels to values."""
    x = data[target]
    parents = list(parents)
    if not parents:
        return gaussian_loglik(x)
    return conditional_gaussian_loglik(x, [data[p] for p in parents])