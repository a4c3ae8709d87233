"""
Fold allocation for countsplit.

Validates the number of folds and the fold proportion vector (epsilon) and
returns them in a normalized form used by the thinning engines.
"""

import logging
import numbers
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

# Allowed deviation of sum(epsilon) from 1
EPSILON_TOLERANCE = 1e-6


def resolve_folds(
    folds: int = 2,
    epsilon: Optional[Union[Sequence[float], np.ndarray]] = None
) -> Tuple[int, np.ndarray]:
    """
    Validate the fold count and fold proportions.

    Parameters:
    -----------
    folds : int, default=2
        Number of folds to split the data into. Must be an integer >= 2.

    epsilon : sequence of float, optional
        Expected fraction of each count routed to each fold. Must have
        length `folds`, every entry strictly between 0 and 1, and sum to 1.
        Defaults to the uniform vector (1/folds, ..., 1/folds).

    Returns:
    --------
    Tuple[int, np.ndarray]
        - folds: the validated fold count
        - epsilon: read-only float64 array of length `folds`, renormalized
          to sum to 1

    Raises:
    -------
    InvalidParameterError
        If any of the constraints above is violated.
    """
    if isinstance(folds, (bool, np.bool_)) or not isinstance(folds, numbers.Integral):
        raise InvalidParameterError(f"folds must be an integer, got {folds!r}")
    folds = int(folds)
    if folds < 2:
        raise InvalidParameterError(f"folds must be >= 2, got {folds}")

    if epsilon is None:
        eps = np.full(folds, 1.0 / folds)
    else:
        try:
            eps = np.asarray(epsilon, dtype=float)
        except (TypeError, ValueError):
            raise InvalidParameterError(
                f"epsilon must be a sequence of numbers, got {epsilon!r}"
            ) from None
        if eps.ndim != 1:
            raise InvalidParameterError(
                f"epsilon must be one-dimensional, got shape {eps.shape}"
            )
        if eps.shape[0] != folds:
            raise InvalidParameterError(
                f"epsilon must have length folds={folds}, got length {eps.shape[0]}"
            )
        if not np.all(np.isfinite(eps)) or np.any(eps <= 0) or np.any(eps >= 1):
            raise InvalidParameterError(
                f"every epsilon entry must lie in (0, 1), got {eps.tolist()}"
            )
        if abs(eps.sum() - 1.0) > EPSILON_TOLERANCE:
            raise InvalidParameterError(
                f"epsilon must sum to 1, got sum {eps.sum():.6g}"
            )
        # Renormalize so samplers see proportions summing to 1 exactly
        eps = eps / eps.sum()

    eps.setflags(write=False)
    logger.debug("Resolved %d folds with epsilon=%s", folds, eps.tolist())
    return folds, eps
