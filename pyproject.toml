[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sparsemcmc"
version = "0.1.0"
description = "Compressed-column sparse matrices and samplers for Bayesian mixed-model MCMC"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["sparse", "csc", "mcmc", "wishart", "pedigree", "mixed models", "truncated normal"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sparsemcmc"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
