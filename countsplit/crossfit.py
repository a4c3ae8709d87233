"""
Cross-fitting over count splitting folds.

With K folds, a common workflow estimates latent structure on all folds but
one and tests on the held-out fold, cycling through every fold. This module
provides the helpers for that workflow.
"""

from functools import reduce
from typing import Any, Iterator, List, Sequence, Tuple

import scipy.sparse as sp

from .exceptions import InvalidParameterError


def fold_complement(folds: Sequence[Any], k: int) -> Any:
    """
    Sum every fold except fold `k`.

    Parameters:
    -----------
    folds : sequence of matrices
        Folds returned by `countsplit`.

    k : int
        Index of the fold to leave out. Negative indices count from the end.

    Returns:
    --------
    Matrix of the same representation as the folds.

    Raises:
    -------
    IndexError
        If k is out of range.
    """
    n_folds = len(folds)
    if n_folds < 2:
        raise InvalidParameterError(f"Need at least 2 folds, got {n_folds}")
    if not -n_folds <= k < n_folds:
        raise IndexError(f"Fold index {k} out of range for {n_folds} folds")
    k = k % n_folds

    rest = [f for i, f in enumerate(folds) if i != k]
    total = reduce(lambda a, b: a + b, rest)
    if sp.issparse(folds[0]) and total.format != folds[0].format:
        total = total.asformat(folds[0].format)
    return total


class CrossFitIterator:
    """
    Iterator over (train, test) pairs built from a list of folds.

    Pair k holds the sum of all folds except k as the training matrix and
    fold k as the test matrix. Training matrices are computed on demand.
    """

    def __init__(self, folds: Sequence[Any]):
        if len(folds) < 2:
            raise InvalidParameterError(f"Need at least 2 folds, got {len(folds)}")
        self.folds: List[Any] = list(folds)

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        # Fresh generator per call, so nested loops do not share a cursor
        return (self[i] for i in range(len(self)))

    def __len__(self) -> int:
        return len(self.folds)

    def __getitem__(self, index: int) -> Tuple[Any, Any]:
        """Allow direct indexing access."""
        if not -len(self.folds) <= index < len(self.folds):
            raise IndexError("Index out of range")
        return fold_complement(self.folds, index), self.folds[index]

    def __repr__(self) -> str:
        return f"CrossFitIterator(n_folds={len(self.folds)})"
