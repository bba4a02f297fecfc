"""
Structured container for the non-zeros of a sparse linear operator.

Entries are held once, as parallel ``rows``, ``cols`` and ``vals`` arrays.
Other layouts are views generated on demand:

    entries[i]            -> (row, col, val)
    list(entries)         -> [(row, col, val), ...]
    entries.index_array() -> [r0, c0, r1, c1, ...]
    entries.tocsr(shape)  -> scipy.sparse.csr_matrix
"""

from typing import Optional

import numpy as np
import scipy.sparse


class SparseEntries:
    """(row, col, val) triples of a sparse operator.

    Parameters
    ----------
    rows, cols : array_like of int
        Row and column index of every entry.
    vals : array_like of float
        Entry values.
    dtype : numpy dtype
        Value dtype (default float64).
    """

    def __init__(self, rows, cols, vals, dtype=np.float64):
        self.rows = np.asarray(rows, dtype=np.int64).reshape(-1)
        self.cols = np.asarray(cols, dtype=np.int64).reshape(-1)
        self.vals = np.asarray(vals, dtype=dtype).reshape(-1)
        if not (self.rows.shape == self.cols.shape == self.vals.shape):
            raise ValueError(
                f"rows, cols and vals must have equal length, got "
                f"{self.rows.shape[0]}, {self.cols.shape[0]}, {self.vals.shape[0]}"
            )

    @classmethod
    def zeros(cls, n: int, dtype=np.float64) -> 'SparseEntries':
        """Pre-sized container of ``n`` entries, all indices and values zero."""
        return cls(np.zeros(n, dtype=np.int64), np.zeros(n, dtype=np.int64),
                   np.zeros(n, dtype=dtype), dtype=dtype)

    @classmethod
    def from_triples(cls, triples, dtype=np.float64) -> 'SparseEntries':
        """Build from an iterable of ``(row, col, val)`` triples."""
        triples = list(triples)
        if not triples:
            return cls.zeros(0, dtype=dtype)
        rows, cols, vals = zip(*triples)
        return cls(rows, cols, vals, dtype=dtype)

    def __len__(self) -> int:
        return self.rows.shape[0]

    def __getitem__(self, i):
        return int(self.rows[i]), int(self.cols[i]), self.vals[i].item()

    def __iter__(self):
        for r, c, v in zip(self.rows.tolist(), self.cols.tolist(), self.vals.tolist()):
            yield r, c, v

    def __repr__(self) -> str:
        return f"SparseEntries(n={len(self)}, dtype={self.vals.dtype})"

    @property
    def values(self) -> np.ndarray:
        return self.vals

    def index_array(self) -> np.ndarray:
        """Row/column pairs interleaved into one flat array of length 2n."""
        out = np.empty(2 * len(self), dtype=np.int64)
        out[0::2] = self.rows
        out[1::2] = self.cols
        return out

    def find_row(self, predicate) -> Optional[int]:
        """Index of the first entry whose row satisfies ``predicate``, or None.

        ``predicate`` receives the whole ``rows`` array and returns a mask.
        """
        hits = np.flatnonzero(predicate(self.rows))
        if hits.size == 0:
            return None
        return int(hits[0])

    def _default_shape(self):
        if len(self) == 0:
            return (0, 0)
        return (int(self.rows.max()) + 1, int(self.cols.max()) + 1)

    def tocoo(self, shape=None) -> scipy.sparse.coo_matrix:
        """COO matrix view. Duplicate entries are kept, and sum on conversion."""
        if shape is None:
            shape = self._default_shape()
        return scipy.sparse.coo_matrix((self.vals, (self.rows, self.cols)), shape=shape)

    def tocsr(self, shape=None) -> scipy.sparse.csr_matrix:
        return self.tocoo(shape).tocsr()
