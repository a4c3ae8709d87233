"""
Abstract matrix backend.

A backend wraps one count matrix and exposes the narrow set of capabilities
the splitter needs: its shape and labels, its nonzero entries in
column-major order, and construction of new matrices of the same concrete
representation.
"""

import numbers
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..exceptions import NonIntegerInputError

INT64_MAX = np.iinfo(np.int64).max


def validate_counts(values: np.ndarray) -> np.ndarray:
    """
    Check that `values` holds non-negative integers and return them as integers.

    Integer dtypes are returned unchanged, booleans and integer-valued floats
    are converted to int64.

    Raises:
    -------
    NonIntegerInputError
        If values are non-numeric, negative, non-finite, fractional or too
        large for int64.
    """
    values = np.asarray(values)
    if values.dtype == object:
        # Strings such as "3" must not be coerced into counts
        if not all(isinstance(v, numbers.Real) for v in values.flat):
            raise NonIntegerInputError("Input matrix must contain numeric values")
        values = values.astype(float)

    if values.dtype.kind == 'b':
        return values.astype(np.int64)
    if values.dtype.kind in 'iu':
        if values.dtype.kind == 'i' and np.any(values < 0):
            raise NonIntegerInputError("Input matrix must contain non-negative values")
        if values.dtype.kind == 'u' and np.any(values > np.uint64(INT64_MAX)):
            raise NonIntegerInputError(
                f"Input matrix values must not exceed {INT64_MAX}"
            )
        return values
    if values.dtype.kind != 'f':
        raise NonIntegerInputError(
            f"Input matrix must contain integer counts, got dtype {values.dtype}"
        )

    if not np.all(np.isfinite(values)):
        raise NonIntegerInputError("Input matrix must contain finite values")
    if np.any(values < 0):
        raise NonIntegerInputError("Input matrix must contain non-negative values")
    if not np.array_equal(values, np.floor(values)):
        raise NonIntegerInputError("Input matrix must contain integer values")
    # float(INT64_MAX) rounds up to 2**63, which no longer fits in int64
    if np.any(values >= 2.0 ** 63):
        raise NonIntegerInputError(
            f"Input matrix values must not exceed {INT64_MAX}"
        )
    return values.astype(np.int64)


class MatrixBackend(ABC):
    """
    Uniform access to a dense or sparse count matrix.

    Subclasses validate the matrix on construction and set `dtype` to the
    integer dtype the fold matrices are built with.
    """

    def __init__(self, X: Any):
        self.X = X
        self.dtype = np.dtype(np.int64)

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        """(n_rows, n_columns) of the wrapped matrix."""

    @property
    def row_labels(self) -> Optional[pd.Index]:
        return None

    @property
    def col_labels(self) -> Optional[pd.Index]:
        return None

    @abstractmethod
    def nonzero(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return (rows, cols, values) of the strictly positive entries.

        Entries are ordered by column, then by row.
        """

    @abstractmethod
    def build(self, rows: np.ndarray, cols: np.ndarray, values: np.ndarray) -> Any:
        """Build a matrix shaped like X, zero except `values` at (rows, cols)."""

    @abstractmethod
    def conserves(self, matrices: List[Any]) -> bool:
        """True when `matrices` are non-negative and sum to X element-wise."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape}, dtype={self.dtype})"
