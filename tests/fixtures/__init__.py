"""Test fixtures for countsplit.

Provides simulated count matrix generators.
"""

from .count_matrices import (
    create_poisson_counts,
    create_negative_binomial_counts,
    create_sparse_counts,
    create_labelled_counts,
)

__all__ = [
    "create_poisson_counts",
    "create_negative_binomial_counts",
    "create_sparse_counts",
    "create_labelled_counts",
]
