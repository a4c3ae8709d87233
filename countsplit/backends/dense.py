"""Dense backend for numpy arrays and pandas DataFrames."""

from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import DimensionMismatchError
from .base import MatrixBackend, validate_counts


class DenseBackend(MatrixBackend):
    """
    Backend for np.ndarray and pd.DataFrame count matrices.

    DataFrame inputs give DataFrame folds carrying the same index and columns.
    """

    def __init__(self, X: Union[np.ndarray, pd.DataFrame]):
        super().__init__(X)
        if isinstance(X, pd.DataFrame):
            raw = X.to_numpy()
            self._index = X.index
            self._columns = X.columns
        else:
            raw = np.asarray(X)
            self._index = None
            self._columns = None

        if raw.ndim != 2:
            raise DimensionMismatchError(
                f"Input matrix must be two-dimensional, got shape {raw.shape}"
            )
        self.values = validate_counts(raw)
        self.dtype = self.values.dtype

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    @property
    def row_labels(self) -> Optional[pd.Index]:
        return self._index

    @property
    def col_labels(self) -> Optional[pd.Index]:
        return self._columns

    def nonzero(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        # nonzero of the transpose walks column by column
        cols, rows = np.nonzero(self.values.T)
        return rows, cols, self.values[rows, cols]

    def build(self, rows: np.ndarray, cols: np.ndarray, values: np.ndarray):
        out = np.zeros(self.shape, dtype=self.dtype)
        out[rows, cols] = values
        if self._columns is not None:
            return pd.DataFrame(out, index=self._index, columns=self._columns)
        return out

    def conserves(self, matrices: List[Union[np.ndarray, pd.DataFrame]]) -> bool:
        arrays = [np.asarray(m) for m in matrices]
        if any(a.shape != self.shape or np.any(a < 0) for a in arrays):
            return False
        total = np.sum(arrays, axis=0, dtype=np.int64)
        return bool(np.array_equal(total, self.values))
