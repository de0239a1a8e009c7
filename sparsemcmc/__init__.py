"""Compressed-column sparse matrices, densities and samplers for mixed-model MCMC."""

__version__ = "0.1.0"