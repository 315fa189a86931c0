"""
Theoretical sensitivity for heterozygous SNPs.

Given the distribution of read depth and of base quality in an experiment,
estimate the probability that a true heterozygous SNP is called:

    sensitivity = sum_n P(depth = n) * sum_{m <= n} P(m alt reads | n) * P(Q_m > T_n)

where the alt read count is Binomial(n, 0.5), Q_m is the sum of m base
qualities drawn from the quality distribution and T_n = 10 * (n * log10(2) +
logOddsThreshold) is the quality sum needed to call the SNP at depth n.
P(Q_m > T_n) is estimated by Monte Carlo.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .binomial import TriangularTable, het_alt_depth_distribution
from .cancellation import CancellationToken
from .exceedance import proportions_above_thresholds
from .exceptions import InvalidInputError
from .logging_config import time_it
from .rng import RandomState, as_random_state
from .sampler import DEFAULT_MAX_ITERATIONS, CumulativeSumSampler
from .validation import as_nonnegative_vector, require_int

logger = logging.getLogger(__name__)

LOG10_2 = math.log10(2)
DEPTH_MASS_TOLERANCE = 1e-6


def quality_sum_thresholds(n_depths: int, log_odds_threshold: float) -> np.ndarray:
    """Quality sum a SNP's alt reads must exceed to be called at each depth."""
    n_depths = require_int(n_depths, "n_depths")
    if math.isnan(log_odds_threshold):
        raise InvalidInputError("log_odds_threshold must not be NaN")
    return 10.0 * (np.arange(n_depths) * LOG10_2 + log_odds_threshold)


def combine_sensitivity(
    depth_distribution: np.ndarray,
    alt_depth_table: TriangularTable,
    exceedance: np.ndarray,
) -> float:
    """Depth-weighted sum of binomial probability times exceedance, over m <= n."""
    result = 0.0
    for n, weight in enumerate(depth_distribution):
        if weight == 0:
            continue
        result += weight * float(np.dot(alt_depth_table.row(n), exceedance[:n + 1, n]))
    return result


class HetSensitivityEstimator:
    """Het SNP sensitivity for one pair of depth and quality distributions.

    The quality sums are sampled once, on first use, and shared by every
    log-odds threshold evaluated afterwards, so a sensitivity curve is
    monotone in the threshold.

    Args:
        depth_distribution: P(depth = n) for n = 0, 1, ..., N - 1
        quality_distribution: Relative likelihood of quality q for q = 0, 1, ..., Q
        sample_size: Number of random quality sums for each m
        random_state: ``RandomState``, ``Generator``, integer seed or ``None`` for fresh entropy
        n_workers: Worker processes for sampling and threshold crossing
        cancel_token: Optional token checked between trial blocks and rows
    """

    def __init__(
        self,
        depth_distribution: Sequence[float],
        quality_distribution: Sequence[float],
        sample_size: int,
        random_state: Union[RandomState, np.random.Generator, int, None] = None,
        n_workers: int = 1,
        cancel_token: Optional[CancellationToken] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.depth_distribution = as_nonnegative_vector(depth_distribution, "depth distribution")
        self.sample_size = require_int(sample_size, "sample_size", minimum=1)
        self.random_state = as_random_state(random_state)
        self.n_workers = require_int(n_workers, "n_workers", minimum=1)
        self.cancel_token = cancel_token
        self._sampler = CumulativeSumSampler(
            quality_distribution,
            self.random_state,
            n_workers=self.n_workers,
            max_iterations=max_iterations,
        )
        self._quality_sums: Optional[np.ndarray] = None
        self._alt_depth_table: Optional[TriangularTable] = None

        depth_mass = float(self.depth_distribution.sum())
        self._proper_depth = abs(depth_mass - 1.0) <= DEPTH_MASS_TOLERANCE
        if not self._proper_depth:
            logger.warning(f"Depth distribution sums to {depth_mass:.6g}, not 1; it is used as given")

    @property
    def n_depths(self) -> int:
        return self.depth_distribution.size

    def quality_sums(self) -> np.ndarray:
        """Sampled sums of m qualities, shape ``(n_depths, sample_size)``."""
        if self._quality_sums is None:
            logger.debug(
                f"Sampling {self.sample_size} quality sums for up to {self.n_depths - 1} reads"
            )
            self._quality_sums = self._sampler.sample(
                self.n_depths, self.sample_size, cancel_token=self.cancel_token
            )
        return self._quality_sums

    def alt_depth_table(self) -> TriangularTable:
        if self._alt_depth_table is None:
            self._alt_depth_table = het_alt_depth_distribution(self.n_depths)
        return self._alt_depth_table

    def sensitivity(self, log_odds_threshold: float) -> float:
        """Probability of calling a het SNP at ``log_odds_threshold`` (log10 likelihood ratio)."""
        thresholds = quality_sum_thresholds(self.n_depths, log_odds_threshold)

        # exceedance[m, n] is the probability that a sum of m qualities exceeds thresholds[n]
        exceedance = proportions_above_thresholds(
            self.quality_sums(),
            thresholds,
            n_workers=self.n_workers,
            cancel_token=self.cancel_token,
        )
        result = combine_sensitivity(self.depth_distribution, self.alt_depth_table(), exceedance)
        if not self._proper_depth:
            return result
        # rounding in the binomial rows can push a proper distribution past 1
        return min(max(result, 0.0), 1.0)

    def sensitivity_curve(self, log_odds_thresholds: Iterable[float]) -> pd.DataFrame:
        """Sensitivity at each threshold, evaluated against one shared sample."""
        thresholds = [float(value) for value in log_odds_thresholds]
        if not thresholds:
            raise InvalidInputError("at least one log-odds threshold is required")
        return pd.DataFrame({
            "log_odds_threshold": thresholds,
            "sensitivity": [self.sensitivity(value) for value in thresholds],
        })


@time_it("het SNP sensitivity estimation")
def estimate_het_snp_sensitivity(
    depth_distribution: Sequence[float],
    quality_distribution: Sequence[float],
    sample_size: int,
    log_odds_threshold: float,
    random_state: Union[RandomState, np.random.Generator, int, None] = None,
    n_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
) -> float:
    """Estimate the sensitivity to heterozygous SNPs.

    Args:
        depth_distribution: P(depth = n) for n = 0, 1, ..., N - 1
        quality_distribution: Relative likelihood of quality q for q = 0, 1, ..., Q
        sample_size: Number of random sums of quality scores for each m
        log_odds_threshold: log10 of the likelihood ratio required to call a
            SNP, for example 5 if the variant likelihood must be 10^5 times greater
        random_state: ``RandomState``, ``Generator``, integer seed or ``None`` for fresh entropy
        n_workers: Worker processes for the Monte-Carlo stages
        cancel_token: Optional cancellation token

    Returns:
        Probability in [0, 1] that a het SNP is called. An improper depth
        distribution is used as given, so the value scales with its mass
    """
    estimator = HetSensitivityEstimator(
        depth_distribution,
        quality_distribution,
        sample_size,
        random_state=random_state,
        n_workers=n_workers,
        cancel_token=cancel_token,
    )
    return estimator.sensitivity(log_odds_threshold)
