"""Deterministic random utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .exceptions import InvalidInputError
from .validation import require_int


@dataclass(slots=True)
class RandomState:
    """Wrapper for deterministic random number generation.

    ``seed`` is ``None`` when the state wraps a caller-supplied generator.
    """

    seed: Optional[int]
    generator: np.random.Generator

    @classmethod
    def create(cls, seed: int) -> "RandomState":
        seed = require_int(seed, "seed")
        generator = np.random.default_rng(seed)
        return cls(seed=seed, generator=generator)

    def spawn(self, offset: int) -> "RandomState":
        """Derive a child generator with deterministic offset."""

        bit_generator = self.generator.bit_generator.jumped(offset)
        seed = None if self.seed is None else self.seed + offset
        return RandomState(seed=seed, generator=np.random.Generator(bit_generator))

    def spawn_many(self, n: int) -> list["RandomState"]:
        """Independent child streams for ``n`` workers (offsets 1..n)."""

        return [self.spawn(offset) for offset in range(1, n + 1)]


def choose_rng(seed: int) -> RandomState:
    """Convenience helper to create a ``RandomState``."""

    return RandomState.create(seed)


def as_random_state(source: RandomState | np.random.Generator | int | None) -> RandomState:
    """Coerce a seed, generator or ``None`` (fresh entropy) into a ``RandomState``."""

    if isinstance(source, RandomState):
        return source
    if isinstance(source, np.random.Generator):
        return RandomState(seed=None, generator=source)
    if source is None:
        source = int(np.random.SeedSequence().generate_state(1)[0])
    try:
        return RandomState.create(source)
    except InvalidInputError as exc:
        raise InvalidInputError(
            f"random_state must be a RandomState, Generator, non-negative seed or None, got {source!r}",
            {"random_state": source},
        ) from exc
