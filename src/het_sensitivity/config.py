"""Configuration management for het-sensitivity runs."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import yaml

from .config_validator import ConfigValidator, histogram_bin
from .histograms import histogram_to_distribution, truncate_distribution
from .validation import as_nonnegative_vector


@dataclass
class DistributionConfig:
    """A distribution given either directly or as a histogram of counts."""
    distribution: Optional[List[float]] = None
    histogram: Optional[Dict[int, float]] = None

    def resolve(self) -> np.ndarray:
        if self.histogram is not None:
            return histogram_to_distribution(self.histogram)
        return as_nonnegative_vector(self.distribution, "distribution")


@dataclass
class SamplingConfig:
    """Configuration for Monte-Carlo sampling."""
    sample_size: int = 1000
    n_workers: int = 1


@dataclass
class SensitivityConfig:
    """Main run configuration."""
    run_id: str
    seed: int
    log_odds_threshold: float
    depth: DistributionConfig
    quality: DistributionConfig
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    max_depth: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def config_hash(self) -> str:
        """Compute deterministic hash of configuration."""
        config_str = json.dumps(self.to_dict(), sort_keys=True, default=str)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    def depth_distribution(self) -> np.ndarray:
        distribution = self.depth.resolve()
        if self.max_depth is not None:
            distribution = truncate_distribution(distribution, self.max_depth)
        return distribution

    def quality_distribution(self) -> np.ndarray:
        return self.quality.resolve()


def _histogram_keys_to_int(section: Dict[str, Any]) -> Dict[str, Any]:
    histogram = section.get("histogram")
    if histogram is None:
        return dict(section)
    return {**section, "histogram": {histogram_bin(key): value for key, value in histogram.items()}}


def config_from_dict(data: Dict[str, Any]) -> SensitivityConfig:
    """Validate a raw mapping and build a ``SensitivityConfig``."""
    ConfigValidator().validate_or_raise(data)

    return SensitivityConfig(
        run_id=data['run_id'],
        seed=data['seed'],
        log_odds_threshold=float(data['log_odds_threshold']),
        depth=DistributionConfig(**_histogram_keys_to_int(data['depth'])),
        quality=DistributionConfig(**_histogram_keys_to_int(data['quality'])),
        sampling=SamplingConfig(**(data.get('sampling') or {})),
        max_depth=data.get('max_depth'),
    )


def load_config(path: str | Path) -> SensitivityConfig:
    """Load configuration from YAML file."""
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    return config_from_dict(data)


def dump_config(config: SensitivityConfig, path: str | Path) -> None:
    """Save configuration to YAML file."""
    with open(path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False)
