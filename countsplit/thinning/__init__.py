"""
Thinning engines for countsplit.

Each engine takes a vector of counts and returns an (n_entries, n_folds)
array of fold counts summing to the input, drawn from the exact conditional
distribution of the folds given their total.
"""

from .poisson import poisson_thin
from .negative_binomial import negative_binomial_thin

__all__ = [
    'poisson_thin',
    'negative_binomial_thin'
]
