"""
Per-column distribution selection.

Turns the user supplied overdispersion argument into a DispatchPlan that
tags each column as Poisson or negative binomial. The plan is computed once
per call so the thinning kernels never branch per element.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import (
    DegenerateOverdispersionError,
    DimensionMismatchError,
    InvalidParameterError,
)

logger = logging.getLogger(__name__)

Overdispersion = Optional[Union[float, Sequence[Optional[float]], np.ndarray, pd.Series]]


@dataclass(frozen=True)
class DispatchPlan:
    """
    Per-column thinning plan.

    Attributes
    ----------
    is_poisson : np.ndarray of bool, shape (n_columns,)
        True where the column is thinned with the Poisson engine.
    overdispersion : np.ndarray of float, shape (n_columns,)
        Negative binomial size parameter per column; +inf on Poisson columns.
    """

    is_poisson: np.ndarray
    overdispersion: np.ndarray

    @property
    def n_columns(self) -> int:
        return self.is_poisson.shape[0]

    @property
    def n_poisson(self) -> int:
        return int(self.is_poisson.sum())

    @property
    def n_negative_binomial(self) -> int:
        return self.n_columns - self.n_poisson

    def per_entry(self, cols: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Broadcast the plan to entries living in columns `cols`."""
        return self.is_poisson[cols], self.overdispersion[cols]

    def __repr__(self) -> str:
        return (f"DispatchPlan(n_columns={self.n_columns}, n_poisson={self.n_poisson}, "
                f"n_negative_binomial={self.n_negative_binomial})")


def _is_non_numeric(value) -> bool:
    return isinstance(value, (str, bytes, bool, np.bool_))


def _as_float_array(overdispersion) -> np.ndarray:
    if isinstance(overdispersion, pd.Series):
        overdispersion = overdispersion.to_numpy()
    message = f"overdispersion must be numeric, got {overdispersion!r}"
    try:
        raw = np.asarray(overdispersion)
    except (TypeError, ValueError):
        raise InvalidParameterError(message) from None
    # None entries stay allowed, they become the NaN sentinel below
    if raw.dtype.kind in 'USb' or (
        raw.dtype == object and any(_is_non_numeric(v) for v in raw.flat)
    ):
        raise InvalidParameterError(message)
    try:
        return raw.astype(float)
    except (TypeError, ValueError):
        raise InvalidParameterError(message) from None


def build_dispatch_plan(
    overdispersion: Overdispersion,
    n_columns: int,
    col_labels: Optional[pd.Index] = None
) -> DispatchPlan:
    """
    Build the per-column dispatch plan.

    Parameters:
    -----------
    overdispersion : None, float, sequence, np.ndarray or pd.Series
        - None: every column is Poisson.
        - scalar: applied to every column.
        - sequence of length n_columns: one value per column.
        Within any of these, None, NaN and +inf mean "Poisson for this
        column". A pd.Series whose index holds exactly the column labels is
        aligned on those labels; otherwise values are taken by position.

    n_columns : int
        Number of columns of the count matrix.

    col_labels : pd.Index, optional
        Column labels of the count matrix, used to align a pd.Series.

    Returns:
    --------
    DispatchPlan

    Raises:
    -------
    DimensionMismatchError
        If a vector of the wrong length (or dimensionality) is supplied.
    DegenerateOverdispersionError
        If a finite non-positive value (or -inf) is supplied.
    InvalidParameterError
        If the values are not numeric.
    """
    if overdispersion is None:
        values = np.full(n_columns, np.inf)
    else:
        if (isinstance(overdispersion, pd.Series) and col_labels is not None
                and len(overdispersion) == n_columns
                and overdispersion.index.is_unique
                and set(overdispersion.index) == set(col_labels)):
            overdispersion = overdispersion.reindex(col_labels)

        values = _as_float_array(overdispersion)
        if values.ndim == 0:
            values = np.full(n_columns, float(values))
        elif values.ndim != 1:
            raise DimensionMismatchError(
                f"overdispersion must be a scalar or a vector, got shape {values.shape}"
            )
        elif values.shape[0] != n_columns:
            raise DimensionMismatchError(
                f"overdispersion has length {values.shape[0]} but X has {n_columns} columns"
            )
        else:
            values = values.copy()

    # NaN and +inf are the Poisson sentinel
    is_poisson = np.isnan(values) | np.isposinf(values)
    degenerate = ~is_poisson & (values <= 0)
    if np.any(degenerate):
        bad = np.flatnonzero(degenerate)
        raise DegenerateOverdispersionError(
            f"overdispersion must be positive; got {values[bad[:5]].tolist()} "
            f"at column(s) {bad[:5].tolist()}"
            + (f" and {bad.shape[0] - 5} more" if bad.shape[0] > 5 else "")
        )
    values[is_poisson] = np.inf

    is_poisson.setflags(write=False)
    values.setflags(write=False)
    plan = DispatchPlan(is_poisson=is_poisson, overdispersion=values)
    logger.debug("Built %r", plan)
    return plan

