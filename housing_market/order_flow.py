"""
Synthetic order flow.

Stands in for the household sector when exercising the market on its own.
Houses get a random quality band and an initial owner; each tick a random
share of unlisted houses is put on the market at the reference price of
its band times a log-normal markup, stale listings are cut by a fixed
fraction, and a random set of households bids the reference price of a
random band times log-normal noise.

There is no household decision model here: all prices are noise around
the reference curve.
"""

import math

import numpy as np

from housing_market.clearing import Transaction
from housing_market.config import MarketConfig
from housing_market.market import HousingMarket
from housing_market.reference_price import reference_prices


class RandomOrderFlow:
    """
    Random listings and bids around the reference price curve.

    Household ids are 0..num_households-1 and house ids are
    0..num_houses-1. House h starts out owned by household h % num_households.
    """

    def __init__(
        self,
        config: MarketConfig,
        seed: int,
        num_households: int = 200,
        num_houses: int = 150,
        list_probability: float = 0.05,
        bid_probability: float = 0.05,
        list_markup_mean: float = 0.05,
        list_markup_sd: float = 0.1,
        bid_sd: float = 0.2,
        price_cut: float = 0.05,
        price_cut_after: int = 3,
    ):
        if num_households < 1 or num_houses < 1:
            raise ValueError("num_households and num_houses must be >= 1")
        if not 0.0 <= price_cut < 1.0:
            raise ValueError(f"price_cut must be in [0, 1), got {price_cut}")

        self.config = config
        self.num_households = num_households
        self.num_houses = num_houses
        self.list_probability = list_probability
        self.bid_probability = bid_probability
        self.list_markup_mean = list_markup_mean
        self.list_markup_sd = list_markup_sd
        self.bid_sd = bid_sd
        self.price_cut = price_cut
        self.price_cut_after = price_cut_after

        self.rng = np.random.default_rng(seed)
        self.reference = reference_prices(config)

        self.house_quality = self.rng.integers(0, config.n_quality, size=num_houses)
        self.owner = np.arange(num_houses) % num_households

    def step(self, market: HousingMarket, tick: int) -> tuple[int, int]:
        """
        Register this tick's listings, price cuts and bids with the market.

        Returns:
            (number of new listings, number of bids)
        """
        for offer in market.offers.offers():
            if tick - offer.listed_tick >= self.price_cut_after:
                market.update_offer_price(offer.house, offer.current_price * (1.0 - self.price_cut))

        num_listed = 0
        for house in range(self.num_houses):
            if market.is_listed(house) or self.rng.random() >= self.list_probability:
                continue
            quality = int(self.house_quality[house])
            markup = math.exp(self.rng.normal(self.list_markup_mean, self.list_markup_sd))
            market.list_offer(house, quality, int(self.owner[house]), self.reference[quality] * markup, tick)
            num_listed += 1

        num_bids = int(self.rng.binomial(self.num_households, self.bid_probability))
        buyers = self.rng.choice(self.num_households, size=num_bids, replace=False)
        for buyer in buyers:
            quality = int(self.rng.integers(0, self.config.n_quality))
            price = self.reference[quality] * math.exp(self.rng.normal(0.0, self.bid_sd))
            market.submit_bid(int(buyer), price)

        return num_listed, num_bids

    def settle(self, transactions: list[Transaction]) -> None:
        """Transfer ownership of every house sold this tick."""
        for transaction in transactions:
            self.owner[transaction.house] = transaction.buyer
