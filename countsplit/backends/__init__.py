"""
Matrix backends for countsplit.

This module provides the representation-agnostic view of a count matrix used
by the splitter, with one backend for dense inputs and one for sparse inputs.
"""

import numpy as np
import pandas as pd
import scipy.sparse as sp

from .base import MatrixBackend, validate_counts
from .dense import DenseBackend
from .sparse import SparseBackend


def get_backend(X) -> MatrixBackend:
    """
    Wrap X in the backend matching its representation.

    Raises:
    -------
    TypeError
        If X is not a numpy array, pandas DataFrame or scipy sparse matrix.
    """
    if sp.issparse(X):
        return SparseBackend(X)
    if isinstance(X, (np.ndarray, pd.DataFrame)):
        return DenseBackend(X)
    raise TypeError(
        f"X must be a numpy array, pandas DataFrame or scipy sparse matrix, got {type(X)}"
    )


__all__ = [
    'MatrixBackend',
    'DenseBackend',
    'SparseBackend',
    'get_backend',
    'validate_counts'
]
