"""
Count splitting of integer count matrices.

This module provides the `countsplit` function and the sklearn-style
`CountSplitter` class. Both decompose a count matrix X into K folds
X^(1), ..., X^(K) that sum to X and are mutually independent when X follows
the assumed Poisson or negative binomial model, so that one fold can be used
to estimate latent structure (clusters, trajectories) and another to test
hypotheses about it.
"""

import logging
import numbers
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator
from tqdm import tqdm

from .assembly import assemble_folds
from .backends import get_backend
from .crossfit import CrossFitIterator
from .dispatch import DispatchPlan, Overdispersion, build_dispatch_plan
from .exceptions import InvalidParameterError
from .folds import resolve_folds
from .thinning import negative_binomial_thin, poisson_thin

logger = logging.getLogger(__name__)

CountMatrix = Union[np.ndarray, pd.DataFrame, sp.spmatrix, sp.sparray]
Seed = Optional[Union[int, np.random.SeedSequence, np.random.Generator]]

# Number of consecutive columns sharing one random sub-stream
DEFAULT_BLOCK_SIZE = 256


def _validate_block_size(block_size: int) -> int:
    if (isinstance(block_size, (bool, np.bool_)) or not isinstance(block_size, numbers.Integral)
            or block_size < 1):
        raise InvalidParameterError(f"block_size must be a positive integer, got {block_size!r}")
    return int(block_size)


def _spawn_generators(seed: Seed, n_blocks: int) -> List[np.random.Generator]:
    """
    Derive one independent generator per column block from `seed`.

    A Generator is spawned from directly (its own state is not advanced);
    anything else seeds a SeedSequence whose children drive the blocks.
    """
    if isinstance(seed, np.random.Generator):
        logger.debug("Spawning %d block generators from a Generator", n_blocks)
        return seed.spawn(n_blocks)

    if isinstance(seed, np.random.SeedSequence):
        root = seed
    else:
        if isinstance(seed, (bool, np.bool_)) or not (seed is None or isinstance(seed, numbers.Integral)):
            raise InvalidParameterError(
                f"seed must be None, an int, a SeedSequence or a Generator, got {seed!r}"
            )
        if seed is not None and seed < 0:
            raise InvalidParameterError(f"seed must be non-negative, got {seed}")
        root = np.random.SeedSequence(None if seed is None else int(seed))
    logger.debug("Spawning %d block generators from entropy %s", n_blocks, root.entropy)
    return [np.random.default_rng(child) for child in root.spawn(n_blocks)]


def _thin_block(
    values: np.ndarray,
    cols: np.ndarray,
    epsilon: np.ndarray,
    plan: DispatchPlan,
    rng: np.random.Generator
) -> np.ndarray:
    """Split the nonzero entries of one column block; Poisson entries are drawn first."""
    out = np.empty((values.shape[0], epsilon.shape[0]), dtype=np.int64)
    is_poisson, phi = plan.per_entry(cols)
    if is_poisson.any():
        out[is_poisson] = poisson_thin(values[is_poisson], epsilon, rng)
    is_nb = ~is_poisson
    if is_nb.any():
        out[is_nb] = negative_binomial_thin(values[is_nb], epsilon, phi[is_nb], rng)
    return out


def countsplit(
    X: CountMatrix,
    folds: int = 2,
    epsilon: Optional[Sequence[float]] = None,
    overdispersion: Overdispersion = None,
    seed: Seed = None,
    *,
    block_size: int = DEFAULT_BLOCK_SIZE,
    n_jobs: Optional[int] = None,
    check_invariants: bool = True,
    verbose: bool = False
) -> List[CountMatrix]:
    """
    Split a count matrix into independent folds.

    Each nonzero count x in column j is divided among the folds by drawing
    from the exact conditional distribution of the folds given their sum:
    Multinomial(x; epsilon) for Poisson columns and
    DirichletMultinomial(x; epsilon * overdispersion[j]) for negative
    binomial columns. Zero entries stay zero in every fold.

    Parameters:
    -----------
    X : np.ndarray, pd.DataFrame or scipy sparse matrix
        Count matrix of shape (n_samples, n_features). Must contain
        non-negative integer values (integer-valued floats are accepted).

    folds : int, default=2
        Number of folds (>= 2).

    epsilon : sequence of float, optional
        Expected fraction of each count assigned to each fold. Length
        `folds`, entries in (0, 1), summing to 1. Defaults to uniform.

    overdispersion : None, float or sequence of float, optional
        Negative binomial size parameter. None treats every column as
        Poisson; a scalar applies to every column; a vector gives one value
        per column. None, NaN and inf entries mark Poisson columns.

    seed : int, np.random.SeedSequence or np.random.Generator, optional
        Source of randomness. The same int seed always gives the same folds;
        None draws fresh entropy.

    block_size : int, default=256
        Number of consecutive columns sharing one derived random stream.
        Results depend on the seed and block_size but not on n_jobs.

    n_jobs : int, optional
        Number of threads used to process column blocks. None or 1 runs
        sequentially.

    check_invariants : bool, default=True
        Verify that the folds sum to X before returning them.

    verbose : bool, default=False
        Show a progress bar over column blocks (sequential runs only).

    Returns:
    --------
    List
        `folds` matrices with the shape, labels and representation of X.

    Raises:
    -------
    InvalidParameterError
        If folds, epsilon, block_size or seed are invalid.
    DimensionMismatchError
        If X is not two-dimensional or overdispersion has the wrong length.
    NonIntegerInputError
        If X contains negative, non-finite or non-integer values.
    DegenerateOverdispersionError
        If a finite non-positive overdispersion is supplied.
    TypeError
        If X is not a numpy array, pandas DataFrame or scipy sparse matrix.

    Examples
    --------
    >>> X = np.random.default_rng(0).poisson(5, size=(100, 20))
    >>> train, test = countsplit(X, folds=2, seed=1)
    >>> bool((train + test == X).all())
    True
    """
    n_folds, eps = resolve_folds(folds, epsilon)
    block_size = _validate_block_size(block_size)
    backend = get_backend(X)
    n_rows, n_cols = backend.shape
    plan = build_dispatch_plan(overdispersion, n_cols, backend.col_labels)

    n_blocks = -(-n_cols // block_size)
    generators = _spawn_generators(seed, n_blocks)

    rows, cols, values = backend.nonzero()
    bounds = np.searchsorted(cols, np.arange(n_blocks + 1) * block_size, side='left')
    logger.debug(
        "Splitting %r into %d folds: %d nonzero entries, %d blocks, %r",
        backend, n_folds, values.shape[0], n_blocks, plan
    )

    tasks = [
        (values[bounds[b]:bounds[b + 1]], cols[bounds[b]:bounds[b + 1]], generators[b])
        for b in range(n_blocks)
    ]
    if n_jobs is None or n_jobs == 1:
        task_iter = tasks
        if verbose:
            task_iter = tqdm(tasks, desc=f"Count splitting ({n_folds} folds)", unit='block')
        results = [_thin_block(v, c, eps, plan, rng) for v, c, rng in task_iter]
    else:
        results = Parallel(n_jobs=n_jobs, prefer='threads')(
            delayed(_thin_block)(v, c, eps, plan, rng) for v, c, rng in tasks
        )

    if results:
        draws = np.concatenate(results, axis=0)
    else:
        draws = np.zeros((0, n_folds), dtype=np.int64)

    return assemble_folds(backend, rows, cols, draws, check_invariants=check_invariants)


def train_test_countsplit(
    X: CountMatrix,
    epsilon: float = 0.5,
    overdispersion: Overdispersion = None,
    seed: Seed = None,
    **kwargs
) -> Tuple[CountMatrix, CountMatrix]:
    """
    Split X into a training and a test fold.

    Shortcut for the two-fold case with proportions (epsilon, 1 - epsilon).
    Extra keyword arguments are passed to `countsplit`.

    Returns:
    --------
    Tuple
        - X_train: fold with expected fraction `epsilon` of each count
        - X_test: the remaining counts (X - X_train)
    """
    if not isinstance(epsilon, numbers.Real) or not (0 < epsilon < 1):
        raise InvalidParameterError(f"epsilon must be between 0 and 1, got {epsilon}")
    X_train, X_test = countsplit(
        X, folds=2, epsilon=[epsilon, 1 - epsilon],
        overdispersion=overdispersion, seed=seed, **kwargs
    )
    return X_train, X_test


class CountSplitter(BaseEstimator):
    """
    CountSplitter class for splitting count matrices into independent folds.

    This class wraps `countsplit` in an estimator-style object so split
    settings can be configured once, inspected with get_params/set_params
    and reused across matrices.

    Features:
    - Poisson (multinomial) and negative binomial (Dirichlet-multinomial) thinning
    - Per-column overdispersion, with NaN/inf marking Poisson columns
    - Support for dense arrays, labelled DataFrames and sparse matrices
    - Reproducible, thread-parallel sampling over column blocks
    """

    def __init__(
        self,
        folds: int = 2,
        epsilon: Optional[Sequence[float]] = None,
        overdispersion: Overdispersion = None,
        random_state: Seed = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
        n_jobs: Optional[int] = None,
        check_invariants: bool = True,
        verbose: bool = False
    ):
        """
        Initialize the CountSplitter class.

        Parameters:
        -----------
        folds : int, default=2
            Number of folds (>= 2).

        epsilon : sequence of float, optional
            Fold proportions, uniform if omitted.

        overdispersion : None, float or sequence of float, optional
            Negative binomial size parameter(s); None for Poisson.

        random_state : int, np.random.SeedSequence or np.random.Generator, optional
            Random seed for reproducible splits.

        block_size : int, default=256
            Number of consecutive columns sharing one random stream.

        n_jobs : int, optional
            Number of threads used to process column blocks.

        check_invariants : bool, default=True
            Verify that the folds sum to X.

        verbose : bool, default=False
            Whether to show a progress bar.
        """
        # Validate eagerly; stored values stay as given for get_params
        resolve_folds(folds, epsilon)
        _validate_block_size(block_size)

        self.folds = folds
        self.epsilon = epsilon
        self.overdispersion = overdispersion
        self.random_state = random_state
        self.block_size = block_size
        self.n_jobs = n_jobs
        self.check_invariants = check_invariants
        self.verbose = verbose

    def split(self, X: CountMatrix) -> List[CountMatrix]:
        """
        Split X into `folds` independent count matrices.

        Parameters:
        -----------
        X : np.ndarray, pd.DataFrame or scipy sparse matrix
            Count matrix of shape (n_samples, n_features).

        Returns:
        --------
        List
            The fold matrices, same shape and representation as X.
        """
        return countsplit(
            X,
            folds=self.folds,
            epsilon=self.epsilon,
            overdispersion=self.overdispersion,
            seed=self.random_state,
            block_size=self.block_size,
            n_jobs=self.n_jobs,
            check_invariants=self.check_invariants,
            verbose=self.verbose
        )

    def cross_fit(self, X: CountMatrix) -> CrossFitIterator:
        """
        Split X and iterate over (train, test) pairs.

        Pair k uses fold k as the test set and the sum of the other folds as
        the training set.
        """
        return CrossFitIterator(self.split(X))

    def get_n_splits(self, X: Any = None) -> int:
        """Return the number of folds."""
        return int(self.folds)
