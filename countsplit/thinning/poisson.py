"""
Poisson thinning.

If X ~ Poisson(lambda) then, conditional on X = x, drawing the fold counts
from Multinomial(x; epsilon) yields independent folds with
X^(k) ~ Poisson(epsilon_k * lambda).
"""

import numpy as np

from ._common import as_counts, empty_draw


def poisson_thin(
    values: np.ndarray,
    epsilon: np.ndarray,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Split Poisson counts into len(epsilon) folds.

    Parameters:
    -----------
    values : np.ndarray
        One-dimensional array of non-negative integer counts.

    epsilon : np.ndarray
        Fold proportions, validated by `resolve_folds`.

    rng : np.random.Generator
        Random stream to draw from. Not touched when every value is zero.

    Returns:
    --------
    np.ndarray
        Integer array of shape (len(values), len(epsilon)) whose rows sum to
        `values`.
    """
    values = as_counts(values)
    n_folds = len(epsilon)
    out, positive = empty_draw(values, n_folds)
    if not positive.any():
        return out

    x = values[positive]
    if n_folds == 2:
        first = rng.binomial(x, epsilon[0])
        out[positive, 0] = first
        out[positive, 1] = x - first
    else:
        out[positive] = rng.multinomial(x, epsilon)
    return out
