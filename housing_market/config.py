"""
Market configuration.

All decay and scale constants used by the clearing engine and the
statistics tracker live here. Defaults are the UK calibration:

- House price distribution: log-normal with median 195,000 and shape 0.555
  (ONS 2013 house price index data tables, table 34)
- 48 quality bands
- One tick is one month (30 days, 12 ticks per year)

Overrides are merged through OmegaConf so that the same dataclass can be
filled from a Hydra config group or a plain dict.
"""

import math
from dataclasses import dataclass
from typing import Any

from omegaconf import DictConfig, OmegaConf


@dataclass
class MarketConfig:
    """Constants shared by every component of one market instance."""

    n_quality: int = 48
    hpi_log_median: float = math.log(195000.0)
    hpi_shape: float = 0.555

    # Characteristic number of sales over which days-on-market and the
    # sold-to-list ratio are averaged
    stats_window: float = 200.0
    # Characteristic number of sales for per-quality price averaging
    price_decay_ticks: float = 8.0
    # Characteristic number of clearings for index appreciation
    appreciation_decay_ticks: float = 12.0

    days_per_tick: float = 30.0
    ticks_per_year: float = 12.0
    initial_days_on_market: float = 30.0
    min_initial_price: float = 0.01

    @property
    def market_decay(self) -> float:
        """E: decay for days-on-market and sold-to-list ratio."""
        return math.exp(-1.0 / self.stats_window)

    @property
    def price_decay(self) -> float:
        """G: decay for the per-quality average sale price."""
        return math.exp(-1.0 / self.price_decay_ticks)

    @property
    def appreciation_decay(self) -> float:
        """F: decay for the price index appreciation."""
        return math.exp(-1.0 / self.appreciation_decay_ticks)

    @property
    def hpi_mean(self) -> float:
        """Mean of the reference log-normal price distribution."""
        return math.exp(self.hpi_log_median + self.hpi_shape * self.hpi_shape / 2.0)

    def validate(self) -> "MarketConfig":
        """
        Check that the constants describe a usable market.

        Returns:
            self, so calls can be chained

        Raises:
            ValueError: If any constant is out of range
        """
        if self.n_quality < 1:
            raise ValueError(f"n_quality must be >= 1, got {self.n_quality}")
        if self.hpi_shape <= 0:
            raise ValueError(f"hpi_shape must be > 0, got {self.hpi_shape}")
        for name in ("stats_window", "price_decay_ticks", "appreciation_decay_ticks"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")
        if self.days_per_tick <= 0 or self.ticks_per_year <= 0:
            raise ValueError("days_per_tick and ticks_per_year must be > 0")
        if self.min_initial_price < 0:
            raise ValueError(
                f"min_initial_price must be >= 0, got {self.min_initial_price}"
            )
        return self


def load_config(overrides: DictConfig | dict[str, Any] | None = None) -> MarketConfig:
    """
    Build a MarketConfig from defaults plus optional overrides.

    Args:
        overrides: Mapping of field name to value (e.g. the ``market`` group
                   of a Hydra config). Unknown keys are rejected by OmegaConf.

    Returns:
        Validated MarketConfig instance
    """
    base = OmegaConf.structured(MarketConfig)
    if overrides is not None:
        base = OmegaConf.merge(base, overrides)
    config = OmegaConf.to_object(base)
    return config.validate()
