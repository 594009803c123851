"""
Housing market: the owned aggregate of offer book, bid queue and statistics.

External collaborators (households, the simulation driver) interact only
through this class. A market instance is single-threaded; callers running
several markets concurrently must serialise access per instance.
"""

from typing import TYPE_CHECKING, Hashable

from housing_market.bid_queue import BidQueue, BidRecord
from housing_market.clearing import ClearingEngine, Transaction
from housing_market.config import MarketConfig
from housing_market.errors import validate_quality
from housing_market.offer_book import OfferBook, SaleOffer
from housing_market.statistics import DiagnosticsSnapshot, MarketStatistics

if TYPE_CHECKING:
    from housing_market.transaction_logger import TransactionLogger


class HousingMarket:
    """
    Periodic double-auction market for houses.

    Attributes:
        config: Market constants
        offers: Open sale offers
        bids: Bids pending for the next clearing
        statistics: Rolling EMA statistics and latest diagnostics
        engine: The clearing engine
    """

    def __init__(
        self,
        config: MarketConfig | None = None,
        transaction_logger: "TransactionLogger | None" = None,
    ) -> None:
        self.config = (config or MarketConfig()).validate()
        self.offers = OfferBook(self.config.n_quality)
        self.bids = BidQueue()
        self.statistics = MarketStatistics(self.config)
        self.engine = ClearingEngine(self.config.n_quality)
        self.transaction_logger = transaction_logger

    # =========================================================================
    # Offers
    # =========================================================================

    def list_offer(
        self,
        house: Hashable,
        quality: int,
        owner: Hashable,
        price: float,
        tick: int,
    ) -> SaleOffer:
        """Put a house on the market (replaces any existing offer for it)."""
        return self.offers.list_offer(house, quality, owner, price, tick)

    def update_offer_price(self, house: Hashable, new_price: float) -> SaleOffer:
        """
        Raises:
            OfferNotFoundError: If the house is not on the market
        """
        return self.offers.update_offer_price(house, new_price)

    def withdraw_offer(self, house: Hashable) -> SaleOffer | None:
        return self.offers.withdraw_offer(house)

    def get_offer(self, house: Hashable) -> SaleOffer | None:
        return self.offers.get_offer(house)

    def is_listed(self, house: Hashable) -> bool:
        return self.offers.is_listed(house)

    # =========================================================================
    # Bids
    # =========================================================================

    def submit_bid(self, buyer: Hashable, price: float) -> BidRecord:
        """
        Bid for a (yet to be decided) house at up to `price`.

        Raises:
            InvalidPriceError: If price is not positive and finite
        """
        return self.bids.submit_bid(buyer, price)

    # =========================================================================
    # Clearing
    # =========================================================================

    def clear(self, tick: int) -> list[Transaction]:
        """
        Match all pending bids against open offers.

        Args:
            tick: Current tick, supplied by the simulation driver

        Returns:
            Transactions executed this tick
        """
        transactions = self.engine.clear(self.offers, self.bids, self.statistics, tick)

        if self.transaction_logger is not None:
            for transaction in transactions:
                self.transaction_logger.log_transaction(transaction)
            self.transaction_logger.log_tick(tick, len(transactions), len(self.offers), self.statistics)

        return transactions

    # =========================================================================
    # Statistics
    # =========================================================================

    def house_price_appreciation(self) -> float:
        """Annualised appreciation of the house price index."""
        return self.statistics.house_price_appreciation()

    @property
    def diagnostics(self) -> DiagnosticsSnapshot:
        """Snapshot taken at the start of the latest clearing."""
        return self.statistics.snapshot

    @property
    def house_price_index(self) -> float:
        return self.statistics.house_price_index

    @property
    def num_offers(self) -> int:
        return len(self.offers)

    @property
    def num_bids(self) -> int:
        return len(self.bids)

    def reference_price(self, quality: int) -> float:
        """
        Reference price of a house of the given quality under this market's config.

        Raises:
            InvalidQualityError: If quality is not an integer in [0, n_quality)
        """
        quality = validate_quality(quality, self.config.n_quality)
        return float(self.statistics.reference_prices[quality])
