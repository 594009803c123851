"""
Rolling market statistics.

Three independent exponential moving averages, each with its own decay:

- Per-quality average sale price (decay G, slow)
- Average days on market (decay E)
- Average sold price / initial list price (decay E)

plus the house price index derived from the per-quality averages and an
EMA of its first difference (decay F) reported as annualised
appreciation.

A DiagnosticsSnapshot is taken at the start of every clearing cycle, so it
describes the book as left over from the previous tick.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from housing_market.config import MarketConfig
from housing_market.reference_price import reference_prices

if TYPE_CHECKING:
    from housing_market.bid_queue import BidQueue
    from housing_market.offer_book import OfferBook, SaleOffer

logger = logging.getLogger(__name__)


def _mean(values: np.ndarray) -> float:
    return float(values.mean()) if values.size > 0 else 0.0


@dataclass(frozen=True, eq=False)
class DiagnosticsSnapshot:
    """Pre-clearing state of the market for one tick."""

    tick: int = 0
    num_bids: int = 0
    num_offers: int = 0
    num_sales: int = 0
    average_bid_price: float = 0.0
    average_offer_price: float = 0.0
    average_sold_price_to_olp: float = 1.0
    bid_prices: np.ndarray = field(default_factory=lambda: np.zeros(0))
    offer_prices: np.ndarray = field(default_factory=lambda: np.zeros(0))


class MarketStatistics:
    """
    EMA state of one market instance.

    Never reset after construction. Updated by the clearing engine: a
    snapshot before matching, one record_sale() per transaction and one
    update_price_index() after all bids are drained.
    """

    def __init__(self, config: MarketConfig) -> None:
        self.config = config
        self.reference_prices = reference_prices(config)

        self.average_sale_price: np.ndarray = np.array(self.reference_prices, dtype=float)
        self.average_days_on_market: float = config.initial_days_on_market
        self.average_sold_price_to_olp: float = 1.0

        self.house_price_index: float = 1.0
        self.last_house_price_index: float = 1.0
        self.hpi_appreciation: float = 0.0

        self._sale_count = 0
        self.snapshot = DiagnosticsSnapshot()

    # =========================================================================
    # Updates
    # =========================================================================

    def record_snapshot(self, offers: "OfferBook", bids: "BidQueue", tick: int) -> DiagnosticsSnapshot:
        """
        Capture counts and price distributions of the book before clearing.

        Also resets the sales counter: num_sales in the new snapshot counts
        transactions since the previous snapshot.
        """
        bid_prices = bids.prices()
        offer_prices = offers.prices()
        bid_prices.setflags(write=False)
        offer_prices.setflags(write=False)

        self.snapshot = DiagnosticsSnapshot(
            tick=tick,
            num_bids=len(bid_prices),
            num_offers=len(offer_prices),
            num_sales=self._sale_count,
            average_bid_price=_mean(bid_prices),
            average_offer_price=_mean(offer_prices),
            average_sold_price_to_olp=self.average_sold_price_to_olp,
            bid_prices=bid_prices,
            offer_prices=offer_prices,
        )
        self._sale_count = 0
        return self.snapshot

    def record_sale(self, offer: "SaleOffer", tick: int) -> float:
        """
        Fold one completed sale into the EMAs.

        Args:
            offer: The matched offer (sale price is its current price)
            tick: Tick of the transaction

        Returns:
            Days the house spent on the market
        """
        cfg = self.config
        e = cfg.market_decay
        g = cfg.price_decay

        days_on_market = cfg.days_per_tick * (tick - offer.listed_tick)
        self.average_days_on_market = e * self.average_days_on_market + (1.0 - e) * days_on_market

        q = offer.quality
        self.average_sale_price[q] = g * self.average_sale_price[q] + (1.0 - g) * offer.current_price

        if offer.initial_price > cfg.min_initial_price:
            ratio = offer.current_price / offer.initial_price
            self.average_sold_price_to_olp = e * self.average_sold_price_to_olp + (1.0 - e) * ratio

        self._sale_count += 1
        return days_on_market

    def update_price_index(self) -> float:
        """
        Recompute the house price index and its appreciation EMA.

        HPI = sum(average_sale_price) / (n_quality * hpi_mean). Assumes houses
        are spread evenly over qualities.

        Returns:
            The new house price index
        """
        cfg = self.config
        f = cfg.appreciation_decay

        self.house_price_index = float(self.average_sale_price.sum()) / (cfg.n_quality * cfg.hpi_mean)
        delta = self.house_price_index - self.last_house_price_index
        self.hpi_appreciation = f * self.hpi_appreciation + (1.0 - f) * delta
        self.last_house_price_index = self.house_price_index

        logger.debug(
            f"HPI={self.house_price_index:.5f} delta={delta:+.6f} "
            f"appreciation={self.hpi_appreciation:+.6f}"
        )
        return self.house_price_index

    # =========================================================================
    # Accessors
    # =========================================================================

    def house_price_appreciation(self) -> float:
        """Annualised appreciation of the house price index."""
        return self.config.ticks_per_year * self.hpi_appreciation

    @property
    def sales_since_snapshot(self) -> int:
        return self._sale_count

    @property
    def bid_prices(self) -> np.ndarray:
        return self.snapshot.bid_prices

    @property
    def offer_prices(self) -> np.ndarray:
        return self.snapshot.offer_prices

    def price_data(self) -> np.ndarray:
        """
        Reference vs. observed price per quality.

        Returns:
            Array of shape (2, n_quality): row 0 reference prices,
            row 1 current average sale prices
        """
        return np.vstack([self.reference_prices, self.average_sale_price])
