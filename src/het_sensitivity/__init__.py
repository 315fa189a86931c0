"""het-sensitivity: theoretical sensitivity to heterozygous SNPs from depth and quality distributions."""

from __future__ import annotations

__version__ = "0.1.0"

# Estimation engine
from .sampler import WeightedSampler, CumulativeSumSampler
from .exceedance import proportions_above_thresholds
from .binomial import TriangularTable, het_alt_depth_distribution
from .sensitivity import (
    HetSensitivityEstimator,
    estimate_het_snp_sensitivity,
    quality_sum_thresholds,
)

# Inputs, randomness and cancellation
from .histograms import histogram_to_distribution, truncate_distribution
from .rng import RandomState, choose_rng
from .cancellation import CancellationToken

# Configuration
from .config import SensitivityConfig, load_config, dump_config

from .exceptions import (
    HetSensitivityError,
    InvalidInputError,
    ConfigurationError,
    EstimationCancelledError,
)

__all__ = [
    "__version__",
    # Engine
    "WeightedSampler",
    "CumulativeSumSampler",
    "proportions_above_thresholds",
    "TriangularTable",
    "het_alt_depth_distribution",
    "HetSensitivityEstimator",
    "estimate_het_snp_sensitivity",
    "quality_sum_thresholds",
    # Inputs
    "histogram_to_distribution",
    "truncate_distribution",
    "RandomState",
    "choose_rng",
    "CancellationToken",
    # Configuration
    "SensitivityConfig",
    "load_config",
    "dump_config",
    # Errors
    "HetSensitivityError",
    "InvalidInputError",
    "ConfigurationError",
    "EstimationCancelledError",
]
