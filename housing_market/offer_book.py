"""
Offer book: the houses currently listed for sale.

One open offer per house. Re-listing a house replaces the previous offer
outright, including its initial list price and listing tick.
"""

import itertools
from dataclasses import dataclass, field
from typing import Hashable, Iterator

import numpy as np

from housing_market.errors import OfferNotFoundError, validate_price, validate_quality


@dataclass
class SaleOffer:
    """
    An open sale offer for one house.

    Attributes:
        house: Identity of the house
        owner: Identity of the household selling it
        quality: Quality band, fixed for the lifetime of the offer
        initial_price: Price at which the house was first listed
        current_price: Current asking price
        listed_tick: Tick at which the house was listed
        sequence: Listing order within the book (deterministic tie-break)
    """

    house: Hashable
    owner: Hashable
    quality: int
    initial_price: float
    current_price: float
    listed_tick: int
    sequence: int = field(default=0, compare=False)


class OfferBook:
    """Open sale offers keyed by house identity."""

    def __init__(self, n_quality: int) -> None:
        self.n_quality = n_quality
        self._offers: dict[Hashable, SaleOffer] = {}
        self._sequence = itertools.count()

    def list_offer(
        self,
        house: Hashable,
        quality: int,
        owner: Hashable,
        price: float,
        tick: int,
    ) -> SaleOffer:
        """
        Put a house on the market, replacing any offer already open for it.

        Args:
            house: Identity of the house
            quality: Quality band in [0, n_quality)
            owner: Identity of the selling household
            price: List price, becomes both initial and current price
            tick: Current tick

        Returns:
            The new SaleOffer

        Raises:
            InvalidQualityError: If quality is not an integer in range
            InvalidPriceError: If price is not positive and finite
        """
        quality = validate_quality(quality, self.n_quality)
        price = validate_price(price, "list price")

        offer = SaleOffer(
            house=house,
            owner=owner,
            quality=quality,
            initial_price=price,
            current_price=price,
            listed_tick=tick,
            sequence=next(self._sequence),
        )
        self._offers[house] = offer
        return offer

    def update_offer_price(self, house: Hashable, new_price: float) -> SaleOffer:
        """
        Change the asking price of a house already on the market.

        Raises:
            OfferNotFoundError: If the house has no open offer
            InvalidPriceError: If new_price is not positive and finite
        """
        offer = self._offers.get(house)
        if offer is None:
            raise OfferNotFoundError(house)
        offer.current_price = validate_price(new_price, "asking price")
        return offer

    def withdraw_offer(self, house: Hashable) -> SaleOffer | None:
        """Take a house off the market. Unlisted houses are ignored."""
        return self._offers.pop(house, None)

    def get_offer(self, house: Hashable) -> SaleOffer | None:
        return self._offers.get(house)

    def is_listed(self, house: Hashable) -> bool:
        return house in self._offers

    def offers(self) -> list[SaleOffer]:
        """Snapshot of all open offers in listing-insertion order."""
        return list(self._offers.values())

    def prices(self) -> np.ndarray:
        """Current asking prices of all open offers."""
        return np.array([o.current_price for o in self._offers.values()], dtype=float)

    def __len__(self) -> int:
        return len(self._offers)

    def __contains__(self, house: object) -> bool:
        return house in self._offers

    def __iter__(self) -> Iterator[SaleOffer]:
        return iter(self._offers.values())
