"""
countsplit: Count splitting for Poisson and negative binomial count matrices.

countsplit decomposes a non-negative integer count matrix X into K folds that
sum to X and are mutually independent under a Poisson or negative binomial
model. One fold can then be used to estimate latent structure (clusters,
pseudotime) and another to test hypotheses about it, avoiding double dipping.

Individual modules can be imported directly:
    from countsplit import countsplit, CountSplitter
    from countsplit.crossfit import fold_complement, CrossFitIterator
    from countsplit.metrics import fold_correlation, fold_proportions
    from countsplit.thinning import poisson_thin, negative_binomial_thin
"""

__version__ = "0.1.0"

from .exceptions import (
    CountSplitError,
    InvalidParameterError,
    DimensionMismatchError,
    NonIntegerInputError,
    DegenerateOverdispersionError,
    InvariantViolationError,
)
from .folds import resolve_folds
from .dispatch import DispatchPlan, build_dispatch_plan
from .splitter import countsplit, train_test_countsplit, CountSplitter
from .crossfit import fold_complement, CrossFitIterator
from .metrics import fold_correlation, fold_proportions

__all__ = [
    'countsplit',
    'train_test_countsplit',
    'CountSplitter',
    'resolve_folds',
    'DispatchPlan',
    'build_dispatch_plan',
    'fold_complement',
    'CrossFitIterator',
    'fold_correlation',
    'fold_proportions',
    'CountSplitError',
    'InvalidParameterError',
    'DimensionMismatchError',
    'NonIntegerInputError',
    'DegenerateOverdispersionError',
    'InvariantViolationError',
]
