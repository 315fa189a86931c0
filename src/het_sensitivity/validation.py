"""Input validation shared by the samplers and estimators."""

from __future__ import annotations

from numbers import Integral
from typing import Any, Sequence

import numpy as np

from .exceptions import InvalidInputError


def require_int(value: Any, name: str, minimum: int = 0) -> int:
    """Return ``value`` as ``int`` if it is an integer >= ``minimum``."""
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}", {name: value})
    if value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum}, got {value}", {name: value})
    return int(value)


def as_nonnegative_vector(values: Sequence[float], name: str) -> np.ndarray:
    """Convert ``values`` to a 1-D float array of finite, non-negative entries."""
    try:
        array = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a sequence of numbers") from exc

    if array.ndim != 1:
        raise InvalidInputError(f"{name} must be one-dimensional", {"shape": array.shape})
    if array.size == 0:
        raise InvalidInputError(f"{name} must not be empty")
    if not np.all(np.isfinite(array)):
        raise InvalidInputError(f"{name} contains non-finite entries")
    if np.any(array < 0):
        first = int(np.flatnonzero(array < 0)[0])
        raise InvalidInputError(
            f"{name} contains a negative entry at index {first}",
            {"index": first, "value": float(array[first])},
        )
    return array


def as_weight_vector(weights: Sequence[float], name: str = "weights") -> np.ndarray:
    """Like ``as_nonnegative_vector`` but also requires one positive weight."""
    array = as_nonnegative_vector(weights, name)
    if not np.any(array > 0):
        raise InvalidInputError(f"{name} must contain at least one positive entry")
    return array
