"""
Tests for histogram to distribution conversion.
"""

import numpy as np
import pandas as pd
import pytest

from het_sensitivity.exceptions import InvalidInputError
from het_sensitivity.histograms import histogram_to_distribution, truncate_distribution


class TestHistogramToDistribution:
    def test_mapping_with_gaps(self):
        distribution = histogram_to_distribution({1: 2, 4: 6})
        np.testing.assert_allclose(distribution, [0.0, 0.25, 0.0, 0.0, 0.75])

    def test_series_input(self):
        histogram = pd.Series([10, 30, 60], index=[0, 1, 2])
        np.testing.assert_allclose(histogram_to_distribution(histogram), [0.1, 0.3, 0.6])

    def test_sequence_input(self):
        np.testing.assert_allclose(histogram_to_distribution([0, 1, 3]), [0.0, 0.25, 0.75])

    def test_string_bins(self):
        np.testing.assert_allclose(histogram_to_distribution({"0": 1, "2": 1}), [0.5, 0.0, 0.5])

    def test_unnormalized_counts(self):
        np.testing.assert_array_equal(histogram_to_distribution({2: 5}, normalize=False), [0.0, 0.0, 5.0])

    def test_sums_to_one(self, rng):
        counts = pd.Series(rng.integers(0, 100, size=50), index=rng.permutation(200)[:50])
        counts.iloc[0] = 1
        assert histogram_to_distribution(counts).sum() == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "histogram",
        [{}, [], {-1: 3}, {1.5: 2}, {"x": 1}, {0: 0, 1: 0}, {0: -1, 1: 4}, {0: float("nan")}],
    )
    def test_invalid_histograms(self, histogram):
        with pytest.raises(InvalidInputError):
            histogram_to_distribution(histogram)


class TestTruncateDistribution:
    def test_tail_folded_into_last_bin(self):
        truncated = truncate_distribution([0.1, 0.2, 0.3, 0.4], 1)
        np.testing.assert_allclose(truncated, [0.1, 0.9])

    def test_short_distribution_unchanged(self):
        values = [0.5, 0.5]
        np.testing.assert_array_equal(truncate_distribution(values, 5), values)

    def test_negative_index(self):
        with pytest.raises(InvalidInputError):
            truncate_distribution([1.0], -1)
