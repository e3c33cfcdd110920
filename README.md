# bayesnet

Numerical building blocks for learning and sampling Bayesian networks.
It works on plain Python sequences, mappings and NumPy arrays.

## What is inside

- `bayesnet.arcs`: arc sets as lists of `(from, to)` pairs. Covers hashing
  (`arc_hash`, `amat_hash`, `uptri_index`), de-duplication (`unique_arcs`),
  detection of undirected arcs (`which_undirected`, `is_dag`) and membership
  queries (`is_row_equal`, `is_listed`).
- `bayesnet.fitted`: queries on network structures held as mappings from
  node labels to `NodeInfo` records: `root_nodes`, `fit2arcs`, `fitted_mb`
  and `num_arcs`.
- `bayesnet.htest`: the `HTest` result record and `create_htest`, which
  picks a one- or two-sided alternative from the test label.
- `bayesnet.linalg`: `svd`, `det`, `ginv` (Moore–Penrose inverse), `finv`
  (inverse of a symmetric positive definite matrix), `quadratic`, `rotate`
  and `qr_ols` (least-squares fitted values and residual standard deviation).
  `MACHINE_TOL` is the tolerance used throughout the package.
- `bayesnet.correlation`: `fast_cor`, `fast_cor2`, `fast_pcor` (partial
  correlation from a covariance matrix) and `gaussian_mi`.
- `bayesnet.mutual_information`: `mutual_information`,
  `conditional_mutual_information` (both optionally with adjusted degrees of
  freedom) and `mi_test`, which can rescale to the G-squared statistic.
- `bayesnet.jonckheere`: the Jonckheere–Terpstra statistic (`jt_stat`), its
  mean and variance (`jt_mean`, `jt_var`), and the standardised
  unconditional and stratified tests (`jt`, `cjt`).
- `bayesnet.loglik`: log-likelihoods of discrete and Gaussian variables,
  alone or given their parents (`discrete_loglik`,
  `conditional_discrete_loglik`, `gaussian_loglik`,
  `conditional_gaussian_loglik`, `discrete_node_loglik`,
  `gaussian_node_loglik`). Each returns `(loglik, nparams)`.
- `bayesnet.priors`: graph priors (`graph_prior` with `"uniform"`, `"vsp"`
  or `"cs"`), the Castelo–Siebes prior (`castelo_prior`) and prior
  completion into a `CompletedPrior` (`castelo_completion`).
- `bayesnet.monte_carlo`: Monte Carlo, semiparametric and permutation
  independence tests for discrete and Gaussian data (`discrete_mc`,
  `conditional_discrete_mc`, `gaussian_mc`, `conditional_gaussian_mc`),
  selected with the `Test` enum and returning `MCResult` records.
- `bayesnet.structure`: pairwise mutual information (`mi_matrix`, with the
  `Estimator` enum), ARACNE (`aracne`), Chow–Liu trees (`chow_liu`) and tree
  orientation from a root (`tree_directions`).
- `bayesnet.generation`: random directed acyclic graphs returned as
  `BayesianNetwork` objects: `empty_graph`, `ordered_graph` and
  `ide_cozman_graph` (Ide–Cozman sampling of connected graphs, or Melançon
  sampling when `connected=False`), plus `amat_to_arcs`. The steps of the
  Markov chain are logged at debug level on the `bayesnet.generation` logger.

## Conventions

Discrete variables are sequences of integer level codes in `range(n)`, where
`n` is the number of levels. Procedures that draw random numbers take an
`rng` argument: a `numpy.random.Generator`, a seed, or `None` for a fresh
generator, so results can be reproduced.

## Installation

```
pip install .
```

Install the test extra to run the test suite:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np
from bayesnet.mutual_information import mutual_information
from bayesnet.structure import chow_liu, tree_directions
from bayesnet.generation import ordered_graph

x = [0, 0, 1, 1, 0, 1]
y = [0, 0, 1, 1, 1, 0]
mi, df = mutual_information(x, y, 2, 2)

data = {
    "A": [0, 0, 1, 1, 0, 1, 1, 0],
    "B": [0, 0, 1, 1, 0, 1, 0, 0],
    "C": [0, 1, 1, 1, 0, 1, 0, 0],
}
undirected = chow_liu(data)
directed = tree_directions(undirected, list(data), "A")

rng = np.random.default_rng(42)
bn = ordered_graph(["A", "B", "C"], 1, 0.5, rng)
print(bn.arcs)
```

## What it does not do

This is a library of functions, not a complete learning toolkit. It has no
command-line interface, reads and writes no files, and does not fit network
parameters or run score-based searches such as hill climbing. Nor does it
compute moments or variability measures of arc-presence distributions. Data
loading, search loops and model fitting are left to the calling code.