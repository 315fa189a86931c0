"""Empirical survival function of sampled quality sums."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import List, Optional, Sequence

import numpy as np

from .cancellation import CancellationToken, check_cancelled
from .exceptions import InvalidInputError
from .validation import require_int

logger = logging.getLogger(__name__)


def _as_thresholds(thresholds: Sequence[float]) -> np.ndarray:
    try:
        array = np.asarray(thresholds, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("thresholds must be a sequence of numbers") from exc

    if array.ndim != 1:
        raise InvalidInputError("thresholds must be one-dimensional", {"shape": array.shape})
    if np.any(np.isnan(array)):
        raise InvalidInputError("thresholds contain NaN")
    if array.size > 1 and np.any(np.diff(array) < 0):
        first = int(np.flatnonzero(np.diff(array) < 0)[0]) + 1
        raise InvalidInputError(
            f"thresholds must be non-decreasing; index {first} is below its predecessor",
            {"index": first},
        )
    return array


def _as_rows(sums) -> List[np.ndarray]:
    if isinstance(sums, np.ndarray):
        if sums.ndim != 2:
            raise InvalidInputError("sums must be two-dimensional", {"shape": sums.shape})
        rows = list(sums)
    else:
        rows = [np.asarray(row) for row in sums]

    for m, row in enumerate(rows):
        if row.ndim != 1:
            raise InvalidInputError(f"row {m} of sums must be one-dimensional")
        if row.size == 0:
            raise InvalidInputError(f"row {m} of sums has no samples", {"row": m})
    return rows


def _row_proportions(row: np.ndarray, thresholds: List[float]) -> np.ndarray:
    """Proportion of ``row`` strictly above each of the ascending ``thresholds``."""
    ordered = np.sort(row).tolist()
    sample_size = len(ordered)
    proportions = np.empty(len(thresholds))

    # j only moves forward because the thresholds are non-decreasing
    j = 0
    for n, threshold in enumerate(thresholds):
        while j < sample_size and ordered[j] <= threshold:
            j += 1
        proportions[n] = (sample_size - j) / sample_size
    return proportions


def _block_proportions(args):
    """Worker function for parallel exceedance rows."""
    rows, thresholds = args
    return np.vstack([_row_proportions(row, thresholds) for row in rows])


def proportions_above_thresholds(
    sums,
    thresholds: Sequence[float],
    n_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
) -> np.ndarray:
    """Count the proportion of each row of ``sums`` above each threshold.

    Args:
        sums: 2-D array or sequence of L rows of samples; rows may differ in length
        thresholds: N non-decreasing thresholds
        n_workers: Worker processes; rows are split into contiguous blocks
        cancel_token: Checked between rows (between blocks when parallel)

    Returns:
        Array of shape ``(L, N)`` whose ``[m, n]`` entry is the fraction of
        row m strictly greater than ``thresholds[n]``
    """
    threshold_array = _as_thresholds(thresholds)
    rows = _as_rows(sums)
    n_workers = require_int(n_workers, "n_workers", minimum=1)
    threshold_list = threshold_array.tolist()

    table = np.zeros((len(rows), threshold_array.size))
    if not rows:
        return table

    if n_workers == 1 or len(rows) == 1:
        for m, row in enumerate(rows):
            check_cancelled(cancel_token, "threshold crossing")
            table[m] = _row_proportions(row, threshold_list)
        return table

    blocks = [block for block in np.array_split(np.arange(len(rows)), n_workers) if len(block)]
    logger.debug(f"Computing {len(rows)} exceedance rows in {len(blocks)} blocks")

    executor = ProcessPoolExecutor(max_workers=n_workers)
    try:
        future_to_block = {
            executor.submit(_block_proportions, ([rows[m] for m in block], threshold_list)): block
            for block in blocks
        }
        for future in as_completed(future_to_block):
            check_cancelled(cancel_token, "threshold crossing")
            block = future_to_block[future]
            table[block[0]:block[-1] + 1] = future.result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    return table
