"""
Exception hierarchy for countsplit.

Every error raised for invalid input derives from CountSplitError, which is
itself a ValueError so callers that already catch ValueError keep working.
"""


class CountSplitError(ValueError):
    """Base class for all countsplit errors."""


class InvalidParameterError(CountSplitError):
    """Raised when the fold count, fold proportions or another option is invalid."""


class DimensionMismatchError(CountSplitError):
    """Raised when an argument does not match the shape of the count matrix."""


class NonIntegerInputError(CountSplitError):
    """Raised when the count matrix holds negative, non-finite or fractional values."""


class DegenerateOverdispersionError(CountSplitError):
    """
    Raised when a finite, non-positive overdispersion value is supplied.

    Missing values (None, NaN) and +inf are not errors: they mark a column
    as Poisson.
    """


class InvariantViolationError(CountSplitError, RuntimeError):
    """Raised when the assembled folds do not sum back to the input matrix."""


__all__ = [
    'CountSplitError',
    'InvalidParameterError',
    'DimensionMismatchError',
    'NonIntegerInputError',
    'DegenerateOverdispersionError',
    'InvariantViolationError',
]
