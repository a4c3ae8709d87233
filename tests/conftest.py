"""Pytest configuration and shared fixtures for countsplit tests."""

import sys
from pathlib import Path

import pytest
import numpy as np

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures import (
    create_poisson_counts,
    create_negative_binomial_counts,
    create_sparse_counts,
    create_labelled_counts,
)


# ============================================================================
# Count Matrix Fixtures
# ============================================================================


@pytest.fixture
def small_counts() -> np.ndarray:
    """Small dense count matrix with a few zeros."""
    return np.array([
        [0, 3, 1, 7],
        [2, 0, 0, 4],
        [5, 1, 0, 0],
        [1, 9, 2, 3],
        [0, 0, 0, 12],
    ])


@pytest.fixture
def poisson_counts() -> np.ndarray:
    """1000 x 200 matrix of Poisson(5) counts."""
    return create_poisson_counts(n_cells=1000, n_genes=200, mean=5.0, seed=1)


@pytest.fixture
def nb_counts() -> np.ndarray:
    """1000 x 200 matrix of NB(mean=5, overdispersion=5) counts."""
    return create_negative_binomial_counts(
        n_cells=1000, n_genes=200, mean=5.0, overdispersion=5.0, seed=2
    )


@pytest.fixture
def sparse_counts():
    """Sparse CSR count matrix with about 10% nonzero entries."""
    return create_sparse_counts(n_cells=300, n_genes=50, density=0.1, seed=3)


@pytest.fixture
def labelled_counts():
    """DataFrame of counts with cell and gene labels."""
    return create_labelled_counts(n_cells=50, n_genes=8, seed=4)
