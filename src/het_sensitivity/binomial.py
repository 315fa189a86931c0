"""Fair-coin binomial table for alt-allele depth at heterozygous sites."""

from __future__ import annotations

from typing import List, Tuple, Union

import numpy as np

from .exceptions import InvalidInputError
from .validation import require_int


class TriangularTable:
    """Read-only lower-triangular table ``table[n, m]`` for 0 <= m <= n < N.

    Rows are stored back to back in one flat array; row n starts at
    ``n * (n + 1) // 2``.
    """

    def __init__(self, values: np.ndarray, n_rows: int):
        values = np.array(values, dtype=float)
        expected = n_rows * (n_rows + 1) // 2
        if values.shape != (expected,):
            raise InvalidInputError(
                f"Triangular table with {n_rows} rows needs {expected} values, got {values.size}"
            )
        self._values = values
        self._values.flags.writeable = False
        self._n_rows = n_rows

    @staticmethod
    def offset(n: int) -> int:
        return n * (n + 1) // 2

    @property
    def values(self) -> np.ndarray:
        return self._values

    def __len__(self) -> int:
        return self._n_rows

    def row(self, n: int) -> np.ndarray:
        if not 0 <= n < self._n_rows:
            raise IndexError(f"row {n} out of range for table with {self._n_rows} rows")
        start = self.offset(n)
        return self._values[start:start + n + 1]

    def __getitem__(self, key: Union[int, Tuple[int, int]]):
        if isinstance(key, tuple):
            n, m = key
            if not 0 <= m <= n:
                raise IndexError(f"entry ({n}, {m}) is outside the triangle")
            return float(self.row(n)[m])
        return self.row(key)

    def to_nested(self) -> List[List[float]]:
        return [self.row(n).tolist() for n in range(self._n_rows)]


def het_alt_depth_distribution(n_depths: int) -> TriangularTable:
    """Table of binomial probabilities nCm * (0.5)^n.

    Entry ``[n, m]`` is the probability that m of n reads at a heterozygous
    site carry the alt allele, for n = 0, 1, ..., ``n_depths`` - 1 and
    m = 0, 1, ..., n. Each row is built from the previous one using
    nCm = (n-1)C(m-1) * (n/m), so no factorials are evaluated.
    """
    n_depths = require_int(n_depths, "n_depths", minimum=1)
    values = np.empty(TriangularTable.offset(n_depths))
    values[0] = 1.0

    for n in range(1, n_depths):
        prev = values[TriangularTable.offset(n - 1):TriangularTable.offset(n)]
        row = values[TriangularTable.offset(n):TriangularTable.offset(n + 1)]
        row[0] = 0.5 * prev[0]
        row[1:n] = 0.5 * n * prev[:n - 1] / np.arange(1, n)
        # m = n equals the m = 0 element
        row[n] = row[0]

    return TriangularTable(values, n_depths)
