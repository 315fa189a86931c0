"""
Configuration validation for het-sensitivity runs.

Checks the raw configuration mapping against the packaged JSON schema and
then applies the rules a schema cannot express, with warnings for settings
that are legal but likely to give noisy estimates.
"""

import json
import logging
from importlib import resources
from numbers import Integral
from typing import Any, Dict, List, Tuple

import jsonschema

from .exceptions import ConfigurationError

SCHEMA_NAME = "config.schema.json"
MIN_RECOMMENDED_SAMPLE_SIZE = 100
LARGE_DEPTH_WARNING = 2000


def histogram_bin(key: Any) -> int:
    """Histogram bin index for a config key; raises ``ValueError`` unless it is an integer."""
    if isinstance(key, bool):
        raise ValueError(f"bin {key!r} is not an integer")
    if isinstance(key, Integral):
        return int(key)
    if isinstance(key, float) and key.is_integer():
        return int(key)
    if isinstance(key, str):
        return int(key.strip())
    raise ValueError(f"bin {key!r} is not an integer")


def load_config_schema() -> Dict[str, Any]:
    with resources.as_file(resources.files("het_sensitivity.assets.schemas") / SCHEMA_NAME) as schema_path:
        with open(schema_path, "r", encoding="utf-8") as fh:
            return json.load(fh)


class ConfigValidator:
    """Validate configuration parameters for an estimation run."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.schema = load_config_schema()
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_config(self, config: Dict[str, Any]) -> Tuple[bool, List[str], List[str]]:
        """Validate complete configuration.

        Args:
            config: Configuration dictionary to validate

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        if not isinstance(config, dict):
            self.errors.append("Configuration must be a mapping")
            return False, self.errors, self.warnings

        validator = jsonschema.Draft7Validator(self.schema)
        for error in sorted(validator.iter_errors(config), key=lambda e: [str(part) for part in e.path]):
            location = ".".join(str(part) for part in error.path) or "<root>"
            self.errors.append(f"{location}: {error.message}")

        # Semantic checks assume the shape is right
        if not self.errors:
            self._validate_distribution_section(config["depth"], "depth")
            self._validate_distribution_section(config["quality"], "quality")
            self._validate_sampling_config(config.get("sampling") or {})
        if not self.errors:
            self._validate_depth_range(config)

        is_valid = len(self.errors) == 0
        return is_valid, self.errors, self.warnings

    def _validate_distribution_section(self, section: Dict[str, Any], name: str) -> None:
        has_distribution = section.get("distribution") is not None
        has_histogram = section.get("histogram") is not None

        if has_distribution == has_histogram:
            self.errors.append(f"{name}: exactly one of 'distribution' or 'histogram' is required")
            return

        values = section["distribution"] if has_distribution else list(section["histogram"].values())
        if not any(value > 0 for value in values):
            self.errors.append(f"{name}: at least one entry must be positive")

        if has_histogram:
            for key in section["histogram"]:
                try:
                    bin_index = histogram_bin(key)
                except (TypeError, ValueError):
                    self.errors.append(f"{name}.histogram: bin {key!r} is not an integer")
                    continue
                if bin_index < 0:
                    self.errors.append(f"{name}.histogram: bin {key!r} is negative")

        if name == "depth" and has_distribution:
            total = sum(values)
            if abs(total - 1.0) > 1e-6:
                self.warnings.append(
                    f"depth.distribution sums to {total:.6g}; it is used without normalization"
                )

    def _validate_sampling_config(self, sampling: Dict[str, Any]) -> None:
        sample_size = sampling.get("sample_size")
        if sample_size is not None and sample_size < MIN_RECOMMENDED_SAMPLE_SIZE:
            self.warnings.append(
                f"sampling.sample_size={sample_size} is small; estimates will be noisy"
            )

    def _validate_depth_range(self, config: Dict[str, Any]) -> None:
        max_depth = config.get("max_depth")
        depth = config["depth"]
        if depth.get("histogram"):
            try:
                largest = max(histogram_bin(key) for key in depth["histogram"])
            except (TypeError, ValueError):
                return
        else:
            largest = len(depth["distribution"]) - 1

        effective = largest if max_depth is None else min(largest, max_depth)
        if effective > LARGE_DEPTH_WARNING:
            self.warnings.append(
                f"maximum depth {effective} is large; consider setting max_depth"
            )

    def validate_or_raise(self, config: Dict[str, Any]) -> List[str]:
        """Raise ``ConfigurationError`` on errors, otherwise return the warnings."""
        is_valid, errors, warnings = self.validate_config(config)
        for warning in warnings:
            self.logger.warning(warning)
        if not is_valid:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(errors),
                {"errors": errors, "warnings": warnings},
            )
        return warnings
