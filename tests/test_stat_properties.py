"""Property-based tests for the sensitivity engine."""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from het_sensitivity.binomial import het_alt_depth_distribution
from het_sensitivity.exceedance import proportions_above_thresholds
from het_sensitivity.sensitivity import estimate_het_snp_sensitivity

weights = st.lists(
    st.floats(min_value=0.0, max_value=100.0, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=45,
).filter(lambda values: any(value > 0 for value in values))


@given(
    rows=st.lists(st.lists(st.integers(-50, 50), min_size=1, max_size=30), min_size=1, max_size=5),
    thresholds=st.lists(
        st.floats(min_value=-60, max_value=60, allow_nan=False, allow_infinity=False),
        max_size=12,
    ),
)
@settings(max_examples=50, deadline=None)
def test_proportions_match_direct_count(rows: list[list[int]], thresholds: list[float]) -> None:
    """The merge gives the same answer as counting samples strictly above each threshold."""

    thresholds = sorted(thresholds)
    table = proportions_above_thresholds(rows, thresholds)
    for m, row in enumerate(rows):
        expected = [sum(value > t for value in row) / len(row) for t in thresholds]
        np.testing.assert_allclose(table[m], expected)


@given(n_depths=st.integers(min_value=1, max_value=400))
@settings(max_examples=20, deadline=None)
def test_binomial_rows_sum_to_one(n_depths: int) -> None:
    table = het_alt_depth_distribution(n_depths)
    assert table.row(n_depths - 1).sum() == pytest.approx(1.0, abs=1e-9)


@given(
    depth=weights,
    quality=weights,
    log_odds=st.floats(min_value=-20, max_value=20, allow_nan=False),
    seed=st.integers(min_value=0, max_value=2**32 - 1),
)
@settings(max_examples=25, deadline=None)
def test_sensitivity_is_a_probability(depth, quality, log_odds, seed) -> None:
    depth = np.asarray(depth) / np.sum(depth)
    result = estimate_het_snp_sensitivity(depth, quality, 50, log_odds, random_state=seed)
    assert 0.0 <= result <= 1.0
