"""
Diagnostics for count splitting folds.

Under a correctly specified model the folds are independent, so the
per-column correlation between two folds is centred on zero and the share of
counts in each fold matches epsilon. Splitting overdispersed data as if it
were Poisson leaves a positive correlation between folds.
"""

import warnings
from typing import Any, Sequence, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp


def _column_sums(M: Any, squared: bool = False) -> np.ndarray:
    if sp.issparse(M):
        M = M.tocsc().astype(np.float64)
        if squared:
            M = M.multiply(M)
        return np.asarray(M.sum(axis=0)).ravel()
    A = np.asarray(M, dtype=np.float64)
    if squared:
        A = A * A
    return A.sum(axis=0)


def _cross_sums(A: Any, B: Any) -> np.ndarray:
    if sp.issparse(A) or sp.issparse(B):
        A = sp.csc_matrix(A, dtype=np.float64)
        B = sp.csc_matrix(B, dtype=np.float64)
        return np.asarray(A.multiply(B).sum(axis=0)).ravel()
    return (np.asarray(A, dtype=np.float64) * np.asarray(B, dtype=np.float64)).sum(axis=0)


def fold_correlation(fold_a: Any, fold_b: Any) -> Union[np.ndarray, pd.Series]:
    """
    Per-column Pearson correlation between two folds.

    Parameters:
    -----------
    fold_a, fold_b : np.ndarray, pd.DataFrame or scipy sparse matrix
        Two folds of the same shape, typically from `countsplit`.

    Returns:
    --------
    np.ndarray or pd.Series
        One correlation per column, indexed by the column labels when
        `fold_a` is a DataFrame. Columns constant in either fold get NaN.
    """
    if fold_a.shape != fold_b.shape:
        raise ValueError(f"Folds must have the same shape, got {fold_a.shape} and {fold_b.shape}")
    n = fold_a.shape[0]
    if n < 2:
        raise ValueError("At least two rows are needed to compute a correlation")

    mean_a = _column_sums(fold_a) / n
    mean_b = _column_sums(fold_b) / n
    var_a = _column_sums(fold_a, squared=True) / n - mean_a ** 2
    var_b = _column_sums(fold_b, squared=True) / n - mean_b ** 2
    cov = _cross_sums(fold_a, fold_b) / n - mean_a * mean_b

    defined = (var_a > 0) & (var_b > 0)
    corr = np.full(mean_a.shape, np.nan)
    corr[defined] = cov[defined] / np.sqrt(var_a[defined] * var_b[defined])
    if not defined.all():
        warnings.warn(
            f"{int((~defined).sum())} column(s) are constant in a fold; "
            f"their correlation is undefined and set to NaN",
            UserWarning
        )

    if isinstance(fold_a, pd.DataFrame):
        return pd.Series(corr, index=fold_a.columns, name='fold_correlation')
    return corr


def fold_proportions(X: Any, folds: Sequence[Any]) -> np.ndarray:
    """
    Fraction of the total count of X that ended up in each fold.

    Parameters:
    -----------
    X : np.ndarray, pd.DataFrame or scipy sparse matrix
        The matrix that was split.

    folds : sequence of matrices
        Folds returned by `countsplit`.

    Returns:
    --------
    np.ndarray
        Array of length len(folds); approaches epsilon for large totals.
    """
    total = _column_sums(X).sum()
    if total == 0:
        warnings.warn("X contains no counts; fold proportions are undefined", UserWarning)
        return np.full(len(folds), np.nan)
    return np.array([_column_sums(f).sum() / total for f in folds])
