[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bayesnet"
version = "0.1.0"
description = "Building blocks for Bayesian network structure learning: arc sets, independence tests, scores, priors and random graphs."
requires-python = ">=3.10"
keywords = [
    "bayesian networks",
    "structure learning",
    "mutual information",
    "conditional independence",
    "graphical models",
    "chow-liu",
    "aracne",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["bayesnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
