# tests/property/test_clearing_properties.py
"""
Property-based tests for clearing invariants using Hypothesis.

Random books and bid sets are cleared once; every transaction is then
checked against the state of the book at the moment it was executed.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from housing_market.config import MarketConfig
from housing_market.market import HousingMarket
from housing_market.reference_price import reference_prices

N_QUALITY = 6
NUM_AGENTS = 6

# =============================================================================
# Strategies for generating test data
# =============================================================================

# (quality, price, owner)
random_offers = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=N_QUALITY - 1),
        st.integers(min_value=1, max_value=500),
        st.integers(min_value=0, max_value=NUM_AGENTS - 1),
    ),
    max_size=25,
)

# (buyer, price)
random_bids = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=NUM_AGENTS - 1),
        st.integers(min_value=1, max_value=500),
    ),
    max_size=25,
)


def build_market(offers, bids):
    market = HousingMarket(MarketConfig(n_quality=N_QUALITY))
    for house, (quality, price, owner) in enumerate(offers):
        market.list_offer(house, quality, owner, float(price), tick=0)
    for buyer, price in bids:
        market.submit_bid(buyer, float(price))
    return market


# =============================================================================
# Property Tests: Clearing Invariants
# =============================================================================


class TestClearingInvariants:
    """Invariants that hold for every clearing cycle."""

    @given(random_offers, random_bids)
    @settings(max_examples=100)
    def test_bid_queue_empty_after_clear(self, offers, bids):
        market = build_market(offers, bids)
        market.clear(tick=1)
        assert market.num_bids == 0

    @given(random_offers, random_bids)
    @settings(max_examples=100)
    def test_no_self_purchase_and_price_within_bid(self, offers, bids):
        market = build_market(offers, bids)
        for t in market.clear(tick=1):
            assert t.buyer != t.seller
            assert t.price <= t.bid_price

    @given(random_offers, random_bids)
    @settings(max_examples=100)
    def test_sold_houses_leave_book_and_others_stay(self, offers, bids):
        market = build_market(offers, bids)
        transactions = market.clear(tick=1)

        sold = [t.house for t in transactions]
        assert len(sold) == len(set(sold))
        assert len(transactions) <= len(bids)
        for house in range(len(offers)):
            assert market.is_listed(house) == (house not in sold)

    @given(random_offers, random_bids)
    @settings(max_examples=100)
    def test_bids_served_in_descending_price_order(self, offers, bids):
        market = build_market(offers, bids)
        bid_prices = [t.bid_price for t in market.clear(tick=1)]
        assert bid_prices == sorted(bid_prices, reverse=True)

    @given(random_offers, random_bids)
    @settings(max_examples=100)
    def test_quality_priority(self, offers, bids):
        """
        When a buyer is matched in band q, the cheapest remaining offer of
        every higher band was either too expensive or the buyer's own.
        """
        market = build_market(offers, bids)
        transactions = market.clear(tick=1)

        # (price, house) orders a band the way the index does: cheapest, then earliest listed
        remaining = dict(enumerate(offers))
        for t in transactions:
            for band in range(t.quality + 1, N_QUALITY):
                in_band = [
                    (price, house, owner)
                    for house, (quality, price, owner) in remaining.items()
                    if quality == band
                ]
                if not in_band:
                    continue
                price, _, owner = min(in_band)
                assert price > t.bid_price or owner == t.buyer

            # Matched offer is the cheapest of its own band
            same_band = [
                price for quality, price, _ in remaining.values() if quality == t.quality
            ]
            assert t.price == min(same_band)
            del remaining[t.house]

    @given(random_offers, random_bids)
    @settings(max_examples=50)
    def test_price_ema_unchanged_in_bands_without_sales(self, offers, bids):
        market = build_market(offers, bids)
        before = market.statistics.average_sale_price.copy()

        transactions = market.clear(tick=1)

        sold_bands = {t.quality for t in transactions}
        after = market.statistics.average_sale_price
        for band in range(N_QUALITY):
            if band not in sold_bands:
                assert after[band] == before[band]


class TestReferenceCurveProperties:
    @given(
        st.integers(min_value=1, max_value=200),
        st.floats(min_value=0.01, max_value=3.0),
    )
    @settings(max_examples=50)
    def test_curve_non_decreasing(self, n_quality, shape):
        curve = reference_prices(MarketConfig(n_quality=n_quality, hpi_shape=shape))
        assert len(curve) == n_quality
        assert all(a <= b for a, b in zip(curve[:-1], curve[1:]))
