"""Unit tests for fold diagnostics."""

import pytest
import numpy as np
import pandas as pd
import scipy.sparse as sp

from countsplit.metrics import fold_correlation, fold_proportions


class TestFoldCorrelation:
    """Tests for fold_correlation."""

    def test_matches_numpy(self):
        """Test per-column correlations agree with np.corrcoef."""
        rng = np.random.default_rng(0)
        a = rng.poisson(3, size=(200, 5))
        b = a + rng.poisson(1, size=(200, 5))
        corr = fold_correlation(a, b)
        expected = [np.corrcoef(a[:, j], b[:, j])[0, 1] for j in range(5)]
        np.testing.assert_allclose(corr, expected, rtol=1e-8)

    def test_identical_folds(self):
        """Test a fold is perfectly correlated with itself."""
        a = np.random.default_rng(1).poisson(4, size=(100, 3))
        np.testing.assert_allclose(fold_correlation(a, a), 1.0)

    def test_sparse_matches_dense(self):
        """Test sparse and dense folds give the same correlations."""
        rng = np.random.default_rng(2)
        a = rng.poisson(0.5, size=(300, 4))
        b = rng.poisson(0.5, size=(300, 4))
        np.testing.assert_allclose(
            fold_correlation(sp.csr_matrix(a), sp.csc_matrix(b)),
            fold_correlation(a, b),
            rtol=1e-8,
        )

    def test_constant_column_warns(self):
        """Test constant columns give NaN with a warning."""
        a = np.array([[1, 0], [2, 0], [3, 0]])
        b = np.array([[1, 1], [0, 2], [1, 3]])
        with pytest.warns(UserWarning, match="constant"):
            corr = fold_correlation(a, b)
        assert np.isnan(corr[1])
        assert np.isfinite(corr[0])

    def test_dataframe_returns_series(self, labelled_counts):
        """Test DataFrame folds give a Series indexed by gene."""
        corr = fold_correlation(labelled_counts, labelled_counts)
        assert isinstance(corr, pd.Series)
        assert corr.index.equals(labelled_counts.columns)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="same shape"):
            fold_correlation(np.ones((3, 2)), np.ones((3, 3)))

    def test_single_row(self):
        with pytest.raises(ValueError, match="two rows"):
            fold_correlation(np.ones((1, 2)), np.ones((1, 2)))


class TestFoldProportions:
    """Tests for fold_proportions."""

    def test_proportions_sum_to_one(self, small_counts):
        """Test fold shares add up to 1."""
        folds = [small_counts // 2, small_counts - small_counts // 2]
        props = fold_proportions(small_counts, folds)
        assert props.shape == (2,)
        assert props.sum() == pytest.approx(1.0)

    def test_sparse(self, small_counts):
        """Test sparse inputs are supported."""
        X = sp.csr_matrix(small_counts)
        props = fold_proportions(X, [X, X * 0])
        np.testing.assert_allclose(props, [1.0, 0.0])

    def test_empty_total_warns(self):
        """Test an all-zero X gives NaN with a warning."""
        X = np.zeros((2, 2))
        with pytest.warns(UserWarning):
            props = fold_proportions(X, [X, X])
        assert np.all(np.isnan(props))
