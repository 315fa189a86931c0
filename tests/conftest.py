"""
Test configuration and fixtures for het-sensitivity tests.
"""

import logging
import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from het_sensitivity.rng import choose_rng


@pytest.fixture
def seed():
    """Fixed random seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(seed):
    """Seeded generator owned by a single test."""
    return np.random.default_rng(seed)


@pytest.fixture
def random_state(seed):
    return choose_rng(seed)


@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def point_mass_inputs():
    """Depth fixed at 30 reads and every base quality equal to 30."""
    depth = [0.0] * 30 + [1.0]
    quality = [0.0] * 30 + [1.0]
    return depth, quality


@pytest.fixture
def config_dict():
    """Minimal valid run configuration."""
    return {
        "run_id": "unit",
        "seed": 7,
        "log_odds_threshold": 5.0,
        "depth": {"distribution": [0.0] * 30 + [1.0]},
        "quality": {"histogram": {30: 10}},
        "sampling": {"sample_size": 200, "n_workers": 1},
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo ``setup_logging`` so handlers never outlive the test that added them."""
    yield
    logger = logging.getLogger("het_sensitivity")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
