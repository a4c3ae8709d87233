"""Unit tests for matrix backends and output assembly."""

import pytest
import numpy as np
import pandas as pd
import scipy.sparse as sp

from countsplit.assembly import assemble_folds
from countsplit.backends import DenseBackend, SparseBackend, get_backend, validate_counts
from countsplit.exceptions import (
    DimensionMismatchError,
    InvariantViolationError,
    NonIntegerInputError,
)


class TestValidateCounts:
    """Tests for validate_counts."""

    def test_integer_dtype_kept(self):
        """Test integer inputs keep their dtype."""
        out = validate_counts(np.array([1, 2, 3], dtype=np.int32))
        assert out.dtype == np.int32

    def test_integer_valued_floats_converted(self):
        """Test integer-valued floats become int64."""
        out = validate_counts(np.array([1.0, 0.0, 4.0]))
        assert out.dtype == np.int64
        np.testing.assert_array_equal(out, [1, 0, 4])

    def test_booleans_converted(self):
        """Test booleans are treated as 0/1 counts."""
        out = validate_counts(np.array([True, False]))
        np.testing.assert_array_equal(out, [1, 0])

    @pytest.mark.parametrize("values", [
        np.array([1, -1]),
        np.array([1.5, 2.0]),
        np.array([np.nan, 1.0]),
        np.array([np.inf, 1.0]),
        np.array([-2.0, 1.0]),
        np.array(["a", "b"]),
        np.array([1 + 1j]),
    ])
    def test_invalid_values(self, values):
        """Test negative, fractional, non-finite and non-numeric values are rejected."""
        with pytest.raises(NonIntegerInputError):
            validate_counts(values)

    def test_object_array_of_numbers(self):
        """Test object arrays holding numbers are accepted."""
        out = validate_counts(np.array([1, 2.0], dtype=object))
        np.testing.assert_array_equal(out, [1, 2])

    @pytest.mark.parametrize("values", [
        np.array(["3", "1"], dtype=object),
        np.array([b"3", 1], dtype=object),
        np.array([None, 1], dtype=object),
    ])
    def test_object_array_of_strings_rejected(self, values):
        """Test object arrays are not coerced from strings or None."""
        with pytest.raises(NonIntegerInputError, match="numeric"):
            validate_counts(values)

    @pytest.mark.parametrize("values", [
        np.array([1e19, 1.0]),
        np.array([2.0 ** 63]),
        np.array([2 ** 63, 1], dtype=np.uint64),
        np.array([10 ** 19], dtype=object),
    ])
    def test_values_beyond_int64_rejected(self, values):
        """Test counts that do not fit in int64 are rejected before casting."""
        with pytest.raises(NonIntegerInputError, match="exceed"):
            validate_counts(values)

    def test_large_values_within_int64_accepted(self):
        """Test the largest representable counts still pass."""
        out = validate_counts(np.array([2.0 ** 62, 1.0]))
        assert out[0] == 2 ** 62
        out = validate_counts(np.array([2 ** 63 - 1], dtype=np.uint64))
        assert out.dtype == np.uint64


class TestGetBackend:
    """Tests for get_backend dispatch."""

    def test_dense(self, small_counts):
        """Test arrays get the dense backend."""
        assert isinstance(get_backend(small_counts), DenseBackend)

    def test_dataframe(self, labelled_counts):
        """Test DataFrames get the dense backend with labels."""
        backend = get_backend(labelled_counts)
        assert isinstance(backend, DenseBackend)
        assert backend.row_labels.equals(labelled_counts.index)
        assert backend.col_labels.equals(labelled_counts.columns)

    def test_sparse(self, sparse_counts):
        """Test sparse matrices get the sparse backend."""
        backend = get_backend(sparse_counts)
        assert isinstance(backend, SparseBackend)
        assert backend.row_labels is None

    def test_unsupported_type(self):
        """Test lists are rejected with a TypeError."""
        with pytest.raises(TypeError, match="numpy array"):
            get_backend([[1, 2], [3, 4]])

    @pytest.mark.parametrize("shape", [(5,), (2, 2, 2)])
    def test_non_two_dimensional(self, shape):
        """Test inputs must be matrices."""
        with pytest.raises(DimensionMismatchError):
            get_backend(np.ones(shape, dtype=int))


class TestNonzero:
    """Tests for nonzero iteration order and equivalence."""

    def test_column_major_order(self, small_counts):
        """Test entries come out column by column, rows ascending."""
        rows, cols, values = get_backend(small_counts).nonzero()
        assert np.all(np.diff(cols) >= 0)
        for j in np.unique(cols):
            assert np.all(np.diff(rows[cols == j]) > 0)
        np.testing.assert_array_equal(values, small_counts[rows, cols])
        assert np.all(values > 0)
        assert values.shape[0] == np.count_nonzero(small_counts)

    @pytest.mark.parametrize("fmt", ["csr", "csc", "coo", "lil"])
    def test_dense_and_sparse_agree(self, small_counts, fmt):
        """Test dense and sparse backends list the same entries in the same order."""
        dense = get_backend(small_counts).nonzero()
        sparse = get_backend(sp.csr_matrix(small_counts).asformat(fmt)).nonzero()
        for a, b in zip(dense, sparse):
            np.testing.assert_array_equal(a, b)

    def test_explicit_zeros_skipped(self):
        """Test explicitly stored zeros are not listed."""
        X = sp.csr_matrix((np.array([0, 3]), np.array([0, 1]), np.array([0, 2])), shape=(1, 2))
        rows, cols, values = get_backend(X).nonzero()
        np.testing.assert_array_equal(values, [3])
        np.testing.assert_array_equal(cols, [1])

    def test_sparse_input_not_modified(self):
        """Test validation works on a copy of the sparse input."""
        X = sp.csr_matrix(np.array([[1.0, 0.0], [0.0, 2.0]]))
        get_backend(X)
        assert X.dtype == np.float64

    def test_sparse_negative_rejected(self):
        """Test negative stored values are rejected."""
        with pytest.raises(NonIntegerInputError):
            get_backend(sp.csr_matrix(np.array([[-1, 2]])))


class TestBuild:
    """Tests for building matrices of the input representation."""

    def test_dense_build(self, small_counts):
        """Test the dense backend builds arrays of the input shape."""
        backend = get_backend(small_counts)
        rows, cols, values = backend.nonzero()
        out = backend.build(rows, cols, values)
        assert isinstance(out, np.ndarray)
        np.testing.assert_array_equal(out, small_counts)

    def test_dataframe_build(self, labelled_counts):
        """Test the dense backend re-attaches labels."""
        backend = get_backend(labelled_counts)
        out = backend.build(*backend.nonzero())
        assert isinstance(out, pd.DataFrame)
        pd.testing.assert_frame_equal(out, labelled_counts)

    @pytest.mark.parametrize("fmt", ["csr", "csc", "coo"])
    def test_sparse_build_keeps_format(self, small_counts, fmt):
        """Test the sparse backend returns the input's format."""
        X = sp.csr_matrix(small_counts).asformat(fmt)
        backend = get_backend(X)
        out = backend.build(*backend.nonzero())
        assert out.format == fmt
        np.testing.assert_array_equal(out.toarray(), small_counts)

    def test_sparse_array_flavour_kept(self, small_counts):
        """Test sparse arrays give sparse arrays."""
        backend = get_backend(sp.csr_array(small_counts))
        out = backend.build(*backend.nonzero())
        assert isinstance(out, sp.sparray)
        assert out.format == "csr"

    def test_sparse_build_drops_zeros(self, small_counts):
        """Test zero fold entries are not stored."""
        backend = get_backend(sp.csc_matrix(small_counts))
        rows, cols, values = backend.nonzero()
        out = backend.build(rows, cols, np.zeros_like(values))
        assert out.nnz == 0


class TestAssembleFolds:
    """Tests for assemble_folds."""

    def test_assembles_in_fold_order(self, small_counts):
        """Test fold k is built from column k of the draws."""
        backend = get_backend(small_counts)
        rows, cols, values = backend.nonzero()
        draws = np.column_stack([values, np.zeros_like(values)])
        first, second = assemble_folds(backend, rows, cols, draws)
        np.testing.assert_array_equal(first, small_counts)
        assert not second.any()

    def test_violation_detected(self, small_counts):
        """Test folds that do not sum to X raise."""
        backend = get_backend(small_counts)
        rows, cols, values = backend.nonzero()
        draws = np.column_stack([values, values])
        with pytest.raises(InvariantViolationError):
            assemble_folds(backend, rows, cols, draws)

    def test_sparse_violation_detected(self, sparse_counts):
        """Test the sparse conservation check catches mismatches."""
        backend = get_backend(sparse_counts)
        rows, cols, values = backend.nonzero()
        draws = np.column_stack([values, values])
        with pytest.raises(InvariantViolationError):
            assemble_folds(backend, rows, cols, draws)

    def test_check_can_be_disabled(self, small_counts):
        """Test check_invariants=False skips verification."""
        backend = get_backend(small_counts)
        rows, cols, values = backend.nonzero()
        draws = np.column_stack([values, values])
        folds = assemble_folds(backend, rows, cols, draws, check_invariants=False)
        assert len(folds) == 2
