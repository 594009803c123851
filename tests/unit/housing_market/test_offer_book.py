# tests/unit/housing_market/test_offer_book.py
"""Tests for OfferBook listing, repricing and withdrawal."""

import math

import numpy as np
import pytest

from housing_market.errors import (
    InvalidPriceError,
    InvalidQualityError,
    MarketError,
    OfferNotFoundError,
)
from housing_market.offer_book import OfferBook


@pytest.fixture
def book():
    return OfferBook(n_quality=5)


class TestListOffer:
    def test_new_offer_fields(self, book):
        offer = book.list_offer("H1", 3, "S1", 250.0, tick=7)

        assert offer.house == "H1"
        assert offer.owner == "S1"
        assert offer.quality == 3
        assert offer.initial_price == 250.0
        assert offer.current_price == 250.0
        assert offer.listed_tick == 7
        assert book.is_listed("H1")
        assert "H1" in book
        assert len(book) == 1

    def test_relisting_overwrites_everything(self, book):
        book.list_offer("H1", 3, "S1", 250.0, tick=1)
        book.update_offer_price("H1", 200.0)

        offer = book.list_offer("H1", 3, "S2", 300.0, tick=5)

        assert len(book) == 1
        assert book.get_offer("H1") is offer
        assert offer.owner == "S2"
        assert offer.initial_price == 300.0
        assert offer.current_price == 300.0
        assert offer.listed_tick == 5

    def test_relisting_gets_new_sequence(self, book):
        first = book.list_offer("H1", 3, "S1", 250.0, tick=1)
        book.list_offer("H2", 3, "S1", 250.0, tick=1)
        again = book.list_offer("H1", 3, "S1", 250.0, tick=2)
        assert again.sequence > first.sequence

    @pytest.mark.parametrize("quality", [-1, 5, 100])
    def test_quality_out_of_range(self, book, quality):
        with pytest.raises(InvalidQualityError):
            book.list_offer("H1", quality, "S1", 100.0, tick=0)
        assert not book.is_listed("H1")

    @pytest.mark.parametrize("quality", [2.7, 2.0, True, "1", None])
    def test_non_integer_quality_rejected(self, book, quality):
        with pytest.raises(InvalidQualityError):
            book.list_offer("H1", quality, "S1", 100.0, tick=0)
        assert not book.is_listed("H1")

    def test_numpy_integer_quality_accepted(self, book):
        offer = book.list_offer("H1", np.int64(2), "S1", 100.0, tick=0)
        assert offer.quality == 2
        assert type(offer.quality) is int

    @pytest.mark.parametrize("price", [0.0, -10.0, math.nan, math.inf, "abc"])
    def test_invalid_list_price(self, book, price):
        with pytest.raises(InvalidPriceError):
            book.list_offer("H1", 1, "S1", price, tick=0)

    def test_invalid_price_is_a_value_error(self, book):
        with pytest.raises(ValueError):
            book.list_offer("H1", 1, "S1", -1.0, tick=0)


class TestUpdateOfferPrice:
    def test_updates_current_price_only(self, book):
        book.list_offer("H1", 1, "S1", 100.0, tick=0)
        offer = book.update_offer_price("H1", 80.0)
        assert offer.current_price == 80.0
        assert offer.initial_price == 100.0

    def test_unlisted_house_raises_not_found(self, book):
        with pytest.raises(OfferNotFoundError) as exc_info:
            book.update_offer_price("ghost", 80.0)
        assert exc_info.value.house == "ghost"
        assert "ghost" in str(exc_info.value)

    def test_not_found_is_key_error_and_market_error(self, book):
        with pytest.raises(KeyError):
            book.update_offer_price("ghost", 80.0)
        with pytest.raises(MarketError):
            book.update_offer_price("ghost", 80.0)

    def test_invalid_new_price_leaves_offer_unchanged(self, book):
        book.list_offer("H1", 1, "S1", 100.0, tick=0)
        with pytest.raises(InvalidPriceError):
            book.update_offer_price("H1", -5.0)
        assert book.get_offer("H1").current_price == 100.0


class TestWithdrawAndLookup:
    def test_withdraw_returns_offer(self, book):
        listed = book.list_offer("H1", 1, "S1", 100.0, tick=0)
        assert book.withdraw_offer("H1") is listed
        assert not book.is_listed("H1")
        assert book.get_offer("H1") is None

    def test_withdraw_unlisted_is_noop(self, book):
        book.list_offer("H1", 1, "S1", 100.0, tick=0)
        assert book.withdraw_offer("H2") is None
        assert len(book) == 1

    def test_prices_and_iteration(self, book):
        book.list_offer("H1", 1, "S1", 100.0, tick=0)
        book.list_offer("H2", 2, "S1", 300.0, tick=0)
        assert sorted(book.prices().tolist()) == [100.0, 300.0]
        assert {o.house for o in book} == {"H1", "H2"}
        assert len(book.offers()) == 2

    def test_empty_prices(self, book):
        assert book.prices().size == 0
