"""
Output assembly.

Turns the per-entry fold draws into K matrices of the input's representation
and checks that they add back up to the input.
"""

import logging
from typing import Any, List

import numpy as np

from .backends import MatrixBackend
from .exceptions import InvariantViolationError

logger = logging.getLogger(__name__)


def assemble_folds(
    backend: MatrixBackend,
    rows: np.ndarray,
    cols: np.ndarray,
    draws: np.ndarray,
    check_invariants: bool = True
) -> List[Any]:
    """
    Build the fold matrices from the sampled fold counts.

    Parameters:
    -----------
    backend : MatrixBackend
        Backend wrapping the input matrix.

    rows, cols : np.ndarray
        Positions of the nonzero entries of the input, as returned by
        `backend.nonzero()`.

    draws : np.ndarray
        Array of shape (n_entries, n_folds); column k holds fold k's counts.

    check_invariants : bool, default=True
        Whether to verify that the folds are non-negative and sum to X.

    Returns:
    --------
    List
        The n_folds matrices, in fold order.

    Raises:
    -------
    InvariantViolationError
        If `check_invariants` is True and the folds do not sum to X.
    """
    folds = [backend.build(rows, cols, draws[:, k]) for k in range(draws.shape[1])]

    if check_invariants:
        if not backend.conserves(folds):
            raise InvariantViolationError(
                "Fold matrices do not sum to the input matrix"
            )
        logger.debug("Verified conservation for %d folds of shape %s", len(folds), backend.shape)
    return folds
