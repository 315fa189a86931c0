"""
Weighted discrete sampling and Monte-Carlo prefix sums.

This module provides:
- ``WeightedSampler``: O(1) expected-time draws from {0..N-1} by stochastic
  acceptance (Lipowski & Lipowska, Physica A 391, 2193 (2012))
- ``CumulativeSumSampler``: samples of sums of 0, 1, ..., N-1 draws, split
  over worker processes with independent random streams
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Optional, Sequence

import numpy as np

from .cancellation import CancellationToken, check_cancelled
from .exceptions import InvalidInputError
from .rng import RandomState
from .validation import as_weight_vector, require_int

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1_000_000
DEFAULT_BLOCK_SIZE = 1_000


class WeightedSampler:
    """Draw indices from {0, 1, ..., N-1} according to relative weights.

    Each weight is scaled by the maximum weight to give an acceptance
    probability. A draw proposes a uniform candidate and accepts it with that
    probability, which works well when the ratio of maximum weight to average
    weight is not large.

    Args:
        weights: Non-negative relative weights, at least one positive
        rng: Random source owned by this sampler
        max_iterations: Cap on proposal rounds per draw
    """

    def __init__(
        self,
        weights: Sequence[float],
        rng: np.random.Generator,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        array = as_weight_vector(weights, "weights")
        self.max_iterations = require_int(max_iterations, "max_iterations", minimum=1)
        self._rng = rng
        self._n = array.size
        self._acceptance = array / array.max()
        self._acceptance.flags.writeable = False

    @property
    def n(self) -> int:
        return self._n

    @property
    def acceptance(self) -> np.ndarray:
        return self._acceptance

    def draw(self) -> int:
        """Draw a single index."""
        for _ in range(self.max_iterations):
            candidate = int(self._rng.integers(self._n))
            if self._rng.random() < self._acceptance[candidate]:
                return candidate
        raise InvalidInputError(
            f"No draw accepted after {self.max_iterations} proposals; weights are too skewed",
            {"max_iterations": self.max_iterations},
        )

    def draw_many(self, size: int) -> np.ndarray:
        """Draw ``size`` independent indices, vectorized over pending slots."""
        size = require_int(size, "size")
        result = np.empty(size, dtype=np.int64)
        pending = np.arange(size)
        rounds = 0

        while pending.size:
            if rounds >= self.max_iterations:
                raise InvalidInputError(
                    f"{pending.size} draws not accepted after {self.max_iterations} proposals; "
                    "weights are too skewed",
                    {"max_iterations": self.max_iterations, "pending": int(pending.size)},
                )
            rounds += 1
            candidates = self._rng.integers(self._n, size=pending.size)
            accepted = self._rng.random(pending.size) < self._acceptance[candidates]
            result[pending[accepted]] = candidates[accepted]
            pending = pending[~accepted]

        return result

    def sample_cumulative_sums(
        self,
        max_summands: int,
        sample_size: int,
        cancel_token: Optional[CancellationToken] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> np.ndarray:
        """Get samples of sums of 0, 1, ..., ``max_summands`` - 1 draws.

        Returns an integer array of shape ``(max_summands, sample_size)``.
        Column j is one trial: row m holds the running sum of its first m
        draws, so row 0 is all zeros and row m + 1 extends row m by one draw.
        """
        max_summands = require_int(max_summands, "max_summands")
        sample_size = require_int(sample_size, "sample_size", minimum=1)
        block_size = require_int(block_size, "block_size", minimum=1)

        sums = np.zeros((max_summands, sample_size), dtype=np.int64)
        n_draws = max_summands - 1
        if n_draws <= 0:
            return sums

        for start in range(0, sample_size, block_size):
            check_cancelled(cancel_token, "cumulative sum sampling")
            width = min(block_size, sample_size - start)
            # row k holds the (k+1)-th draw of every trial in the block
            draws = self.draw_many(n_draws * width).reshape(n_draws, width)
            sums[1:, start:start + width] = np.cumsum(draws, axis=0)

        return sums


def _sample_block(args):
    """Worker function for parallel cumulative-sum sampling."""
    weights, generator, max_summands, sample_size, max_iterations = args
    sampler = WeightedSampler(weights, generator, max_iterations=max_iterations)
    return sampler.sample_cumulative_sums(max_summands, sample_size)


class CumulativeSumSampler:
    """Monte-Carlo prefix sums of weighted draws.

    With ``n_workers`` > 1 the trials are split into contiguous blocks, block
    i is sampled in a worker process using the i-th stream spawned from
    ``random_state`` and the blocks are concatenated in order. The output
    therefore depends on the seed and worker count only.
    """

    def __init__(
        self,
        weights: Sequence[float],
        random_state: RandomState,
        n_workers: int = 1,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.weights = as_weight_vector(weights, "quality weights")
        self.random_state = random_state
        self.n_workers = require_int(n_workers, "n_workers", minimum=1)
        self.max_iterations = require_int(max_iterations, "max_iterations", minimum=1)

    def sample(
        self,
        max_summands: int,
        sample_size: int,
        cancel_token: Optional[CancellationToken] = None,
    ) -> np.ndarray:
        max_summands = require_int(max_summands, "max_summands")
        sample_size = require_int(sample_size, "sample_size", minimum=1)

        if self.n_workers == 1:
            sampler = WeightedSampler(self.weights, self.random_state.generator, self.max_iterations)
            return sampler.sample_cumulative_sums(max_summands, sample_size, cancel_token)

        block_sizes = [
            len(block) for block in np.array_split(np.arange(sample_size), self.n_workers) if len(block)
        ]
        streams = self.random_state.spawn_many(len(block_sizes))
        logger.debug(f"Sampling {sample_size} trials in {len(block_sizes)} blocks")

        results = [None] * len(block_sizes)
        executor = ProcessPoolExecutor(max_workers=self.n_workers)
        try:
            future_to_block = {
                executor.submit(
                    _sample_block,
                    (self.weights, stream.generator, max_summands, size, self.max_iterations),
                ): i
                for i, (stream, size) in enumerate(zip(streams, block_sizes))
            }
            # Place results by block index for determinism
            for future in as_completed(future_to_block):
                check_cancelled(cancel_token, "cumulative sum sampling")
                results[future_to_block[future]] = future.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        return np.concatenate(results, axis=1)
