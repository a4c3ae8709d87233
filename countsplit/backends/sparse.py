"""Sparse backend for scipy.sparse matrices and arrays."""

from typing import List, Tuple

import numpy as np
import scipy.sparse as sp

from ..exceptions import DimensionMismatchError
from .base import MatrixBackend, validate_counts


class SparseBackend(MatrixBackend):
    """
    Backend for scipy.sparse count matrices.

    Works on a CSC copy of X so nonzero entries come out column by column;
    folds are converted back to the input's format (and to sparse arrays
    when X is a sparse array). Explicitly stored zeros are dropped and never
    sampled.
    """

    def __init__(self, X):
        super().__init__(X)
        if X.ndim != 2:
            raise DimensionMismatchError(
                f"Input matrix must be two-dimensional, got shape {X.shape}"
            )
        csc = X.tocsc(copy=True)
        csc.sum_duplicates()
        csc.data = validate_counts(csc.data)
        csc.eliminate_zeros()
        self.csc = csc
        self.dtype = csc.data.dtype
        self.format = X.format
        self._csc_class = sp.csc_array if isinstance(X, sp.sparray) else sp.csc_matrix

    @property
    def shape(self) -> Tuple[int, int]:
        return self.csc.shape

    def nonzero(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        counts_per_col = np.diff(self.csc.indptr)
        cols = np.repeat(np.arange(self.shape[1]), counts_per_col)
        return self.csc.indices.copy(), cols, self.csc.data.copy()

    def build(self, rows: np.ndarray, cols: np.ndarray, values: np.ndarray):
        out = self._csc_class(
            (np.asarray(values, dtype=self.dtype), (rows, cols)),
            shape=self.shape
        )
        out.eliminate_zeros()
        if self.format != 'csc':
            out = out.asformat(self.format)
        return out

    def conserves(self, matrices: List) -> bool:
        folds = [m.tocsc() for m in matrices]
        if any(f.shape != self.shape or np.any(f.data < 0) for f in folds):
            return False
        total = folds[0].astype(np.int64)
        for f in folds[1:]:
            total = total + f.astype(np.int64)
        return (total - self.csc.astype(np.int64)).count_nonzero() == 0
