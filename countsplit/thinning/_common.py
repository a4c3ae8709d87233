import numpy as np


def as_counts(values) -> np.ndarray:
    """Return `values` as a one-dimensional int64 array."""
    values = np.asarray(values)
    if values.ndim != 1:
        raise ValueError(f"values must be one-dimensional, got shape {values.shape}")
    return values.astype(np.int64, copy=False)


def empty_draw(values: np.ndarray, n_folds: int):
    """Allocate the (n_entries, n_folds) result and the mask of entries to sample."""
    out = np.zeros((values.shape[0], n_folds), dtype=np.int64)
    return out, values > 0
