"""
Negative binomial thinning.

If X ~ NB(mean mu, size b) then, conditional on X = x, the fold counts drawn
from DirichletMultinomial(x; epsilon_1 * b, ..., epsilon_K * b) are
independent with X^(k) ~ NB(epsilon_k * mu, epsilon_k * b).

The Dirichlet-multinomial draw is realized as a chain of beta-binomial
splits (stick breaking): fold 1 is peeled off the total first, then fold 2
off the remainder, and so on, each split using the fold's concentration
against the concentration of every fold still to come. The last fold takes
whatever is left.
"""

from typing import Union

import numpy as np

from ..exceptions import DegenerateOverdispersionError
from ._common import as_counts, empty_draw


def _beta_binomial(
    n: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
    rng: np.random.Generator
) -> np.ndarray:
    theta = rng.beta(a, b)
    return rng.binomial(n, theta)


def negative_binomial_thin(
    values: np.ndarray,
    epsilon: np.ndarray,
    overdispersion: Union[float, np.ndarray],
    rng: np.random.Generator
) -> np.ndarray:
    """
    Split negative binomial counts into len(epsilon) folds.

    Parameters:
    -----------
    values : np.ndarray
        One-dimensional array of non-negative integer counts.

    epsilon : np.ndarray
        Fold proportions, validated by `resolve_folds`.

    overdispersion : float or np.ndarray
        Negative binomial size parameter, either one value for all entries
        or one value per entry. Must be finite and positive.

    rng : np.random.Generator
        Random stream to draw from. Not touched when every value is zero.

    Returns:
    --------
    np.ndarray
        Integer array of shape (len(values), len(epsilon)) whose rows sum to
        `values`.

    Raises:
    -------
    DegenerateOverdispersionError
        If any overdispersion value is not finite and positive.
    """
    values = as_counts(values)
    n_folds = len(epsilon)
    phi = np.broadcast_to(np.asarray(overdispersion, dtype=float), values.shape)
    if not np.all(np.isfinite(phi) & (phi > 0)):
        raise DegenerateOverdispersionError(
            "negative binomial thinning needs finite, positive overdispersion"
        )

    out, positive = empty_draw(values, n_folds)
    if not positive.any():
        return out

    remaining = values[positive].copy()
    phi = phi[positive]
    # tail[k] is the proportion still to be allocated after fold k
    tail = np.cumsum(epsilon[::-1])[::-1]
    for k in range(n_folds - 1):
        draw = _beta_binomial(remaining, epsilon[k] * phi, tail[k + 1] * phi, rng)
        out[positive, k] = draw
        remaining -= draw
    out[positive, n_folds - 1] = remaining
    return out
