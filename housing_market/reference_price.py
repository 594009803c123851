"""
Reference price curve.

Maps a quality band to the price at the midpoint of that band's
probability mass under the fitted log-normal house price distribution.
The curve seeds the per-quality average sale price and normalises the
house price index; it is never mutated.
"""

from functools import lru_cache

import numpy as np
from scipy.stats import lognorm

from housing_market.config import MarketConfig
from housing_market.errors import validate_quality

DEFAULT_CONFIG = MarketConfig()


@lru_cache(maxsize=None)
def _curve(n_quality: int, log_median: float, shape: float) -> np.ndarray:
    quantiles = (np.arange(n_quality) + 0.5) / n_quality
    curve = lognorm.ppf(quantiles, s=shape, scale=np.exp(log_median))
    curve.setflags(write=False)
    return curve


def reference_prices(config: MarketConfig | None = None) -> np.ndarray:
    """
    Reference price for every quality band.

    Args:
        config: Market constants (defaults to the calibrated values)

    Returns:
        Read-only array of length n_quality, non-decreasing in quality
    """
    config = config or DEFAULT_CONFIG
    return _curve(config.n_quality, config.hpi_log_median, config.hpi_shape)


def reference_price(quality: int, config: MarketConfig | None = None) -> float:
    """
    Reference price of a house of the given quality.

    Args:
        quality: Quality band in [0, n_quality)
        config: Market constants (defaults to the calibrated values)

    Returns:
        Inverse CDF of the price distribution at (quality + 0.5) / n_quality

    Raises:
        InvalidQualityError: If quality is not an integer in [0, n_quality)
    """
    config = config or DEFAULT_CONFIG
    quality = validate_quality(quality, config.n_quality)
    return float(reference_prices(config)[quality])
