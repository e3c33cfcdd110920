"""Building blocks for Bayesian networks: arc sets, independence tests, scores, priors, structure learning and random graphs."""

__version__ = "0.1.0"

__all__ = [
    "arcs",
    "fitted",
    "htest",
    "linalg",
    "correlation",
    "mutual_information",
    "jonckheere",
    "loglik",
    "priors",
    "monte_carlo",
    "structure",
    "generation",
]