# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import numpy as np
import pytest

from housing_market.config import MarketConfig
from housing_market.market import HousingMarket


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def small_config():
    """Five quality bands, calibrated constants otherwise."""
    return MarketConfig(n_quality=5)


@pytest.fixture
def market(small_config):
    """Empty market with five quality bands."""
    return HousingMarket(small_config)
