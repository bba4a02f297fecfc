"""Tests for the SparseEntries container."""

import numpy as np
import numpy.testing as npt
import pytest

from tangentparam import SparseEntries


@pytest.fixture
def entries():
    return SparseEntries.from_triples([(0, 1, 0.5), (2, 0, 1.0), (0, 1, 0.25)])


class TestSparseEntries:
    def test_len_and_getitem(self, entries):
        assert len(entries) == 3
        assert entries[1] == (2, 0, 1.0)

    def test_iteration_yields_triples(self, entries):
        assert list(entries) == [(0, 1, 0.5), (2, 0, 1.0), (0, 1, 0.25)]

    def test_index_array_interleaves(self, entries):
        npt.assert_array_equal(entries.index_array(), [0, 1, 2, 0, 0, 1])
        npt.assert_array_equal(entries.values, [0.5, 1.0, 0.25])

    def test_coo_sums_duplicates(self, entries):
        dense = entries.tocoo().toarray()
        assert dense.shape == (3, 2)
        npt.assert_allclose(dense[0, 1], 0.75)
        npt.assert_allclose(dense[2, 0], 1.0)

    def test_explicit_shape(self, entries):
        assert entries.tocsr((5, 7)).shape == (5, 7)

    def test_zeros_preallocates(self):
        e = SparseEntries.zeros(4, dtype=np.float32)
        assert len(e) == 4
        assert e.vals.dtype == np.float32
        npt.assert_array_equal(e.rows, 0)

    def test_empty(self):
        e = SparseEntries.from_triples([])
        assert len(e) == 0
        assert e.tocoo().shape == (0, 0)
        assert e.index_array().shape == (0,)

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="equal length"):
            SparseEntries([0, 1], [0], [1.0, 2.0])

    def test_find_row(self, entries):
        assert entries.find_row(lambda rows: rows == 2) == 1
        assert entries.find_row(lambda rows: rows == 7) is None
