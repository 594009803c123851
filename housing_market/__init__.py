"""
housing_market - Quality-stratified housing market clearing

Double-auction house market cleared once per tick, with EMA price and
time-on-market statistics feeding a house price index.

Modules:
    market: HousingMarket, the public entry point
    clearing: The matching engine and its ordered offer index
    statistics: Rolling EMAs, price index and diagnostics
"""

from housing_market.bid_queue import BidQueue, BidRecord
from housing_market.clearing import ClearingEngine, OfferIndex, Transaction
from housing_market.config import MarketConfig, load_config
from housing_market.errors import (
    InvalidPriceError,
    InvalidQualityError,
    MarketError,
    OfferNotFoundError,
)
from housing_market.market import HousingMarket
from housing_market.offer_book import OfferBook, SaleOffer
from housing_market.reference_price import reference_price, reference_prices
from housing_market.statistics import DiagnosticsSnapshot, MarketStatistics

__version__ = "1.0.0"

__all__ = [
    "BidQueue",
    "BidRecord",
    "ClearingEngine",
    "DiagnosticsSnapshot",
    "HousingMarket",
    "InvalidPriceError",
    "InvalidQualityError",
    "MarketConfig",
    "MarketError",
    "MarketStatistics",
    "OfferBook",
    "OfferIndex",
    "OfferNotFoundError",
    "SaleOffer",
    "Transaction",
    "load_config",
    "reference_price",
    "reference_prices",
]
