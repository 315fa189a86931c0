"""Turn coverage and base-quality histograms into dense distributions."""

from __future__ import annotations

from typing import Mapping, Sequence, Union

import numpy as np
import pandas as pd

from .exceptions import InvalidInputError
from .validation import as_nonnegative_vector, require_int

Histogram = Union[pd.Series, Mapping[int, float], Sequence[float]]


def _as_series(histogram: Histogram) -> pd.Series:
    if isinstance(histogram, pd.Series):
        return histogram.astype(float)
    if isinstance(histogram, Mapping):
        return pd.Series(dict(histogram), dtype=float)
    return pd.Series(list(histogram), dtype=float)


def histogram_to_distribution(histogram: Histogram, normalize: bool = True) -> np.ndarray:
    """Dense distribution indexed by bin (depth or quality score).

    ``histogram`` maps integer bins to counts. Bins missing between 0 and the
    largest bin get a count of zero. With ``normalize`` the counts are divided
    by their total.
    """
    try:
        series = _as_series(histogram)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("histogram counts must be numeric") from exc

    if series.empty:
        raise InvalidInputError("histogram is empty")

    try:
        bins = np.asarray(pd.to_numeric(series.index.to_numpy(), errors="raise"), dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("histogram bins must be integers") from exc

    if not np.all(np.isfinite(bins)) or np.any(np.mod(bins, 1) != 0):
        raise InvalidInputError("histogram bins must be integers")
    if np.any(bins < 0):
        raise InvalidInputError("histogram bins must be non-negative", {"min_bin": int(bins.min())})

    counts = as_nonnegative_vector(series.to_numpy(), "histogram counts")
    dense = (
        pd.Series(counts, index=bins.astype(np.int64))
        .groupby(level=0)
        .sum()
        .reindex(range(int(bins.max()) + 1), fill_value=0.0)
        .to_numpy(dtype=float)
    )

    total = dense.sum()
    if total <= 0:
        raise InvalidInputError("histogram has no counts")
    return dense / total if normalize else dense


def truncate_distribution(distribution: Sequence[float], max_index: int) -> np.ndarray:
    """Cap a distribution at ``max_index``, folding the tail mass into that bin."""
    values = as_nonnegative_vector(distribution, "distribution")
    max_index = require_int(max_index, "max_index")
    if values.size <= max_index + 1:
        return values.copy()

    truncated = values[:max_index + 1].copy()
    truncated[-1] += values[max_index + 1:].sum()
    return truncated
