"""
Market clearing engine.

Greedy quality-stratified matching, run once per tick:

1. Snapshot diagnostics (state carried over from the previous tick)
2. Index open offers by quality ascending, then price DESCENDING within a
   band, so that within each band the "largest" offer is the cheapest one
3. Serve bids highest price first. For each buyer, start the quality
   ceiling above the top band and ask the index for the predecessor of
   (ceiling, sentinel): the cheapest offer in the highest occupied band
   below the ceiling. If that offer is too expensive or belongs to the
   buyer, lower the ceiling to its band and ask again
4. Recompute the house price index once all bids are drained

Only the cheapest offer of a band is ever considered for a given buyer.
When it fails, the whole band is skipped for that buyer even if a pricier
offer in the same band would have been affordable.
"""

import logging
from bisect import bisect_left
from dataclasses import dataclass
from typing import Hashable, Iterable, Iterator

from housing_market.bid_queue import BidQueue, BidRecord
from housing_market.offer_book import OfferBook, SaleOffer
from housing_market.statistics import MarketStatistics

logger = logging.getLogger(__name__)

OfferKey = tuple[int, float, int]


@dataclass(frozen=True)
class Transaction:
    """A completed house sale."""

    tick: int
    house: Hashable
    buyer: Hashable
    seller: Hashable
    quality: int
    price: float
    bid_price: float
    initial_price: float
    days_on_market: float


class OfferIndex:
    """
    Sorted sequence of offers under the composite key
    (quality ascending, current price descending, listing sequence descending).

    Among equal prices in a band the earliest listing sorts last, so it is
    the one returned by predecessor().
    """

    def __init__(self, offers: Iterable[SaleOffer] = ()) -> None:
        entries = sorted(((self.key(o), o) for o in offers), key=lambda e: e[0])
        self._keys: list[OfferKey] = [k for k, _ in entries]
        self._offers: list[SaleOffer] = [o for _, o in entries]

    @staticmethod
    def key(offer: SaleOffer) -> OfferKey:
        return (offer.quality, -offer.current_price, -offer.sequence)

    def add(self, offer: SaleOffer) -> None:
        k = self.key(offer)
        i = bisect_left(self._keys, k)
        self._keys.insert(i, k)
        self._offers.insert(i, offer)

    def remove(self, offer: SaleOffer) -> None:
        """
        Raises:
            KeyError: If the offer is not in the index
        """
        k = self.key(offer)
        i = bisect_left(self._keys, k)
        if i == len(self._keys) or self._keys[i] != k:
            raise KeyError(offer.house)
        del self._keys[i]
        del self._offers[i]

    def predecessor(self, ceiling: int) -> SaleOffer | None:
        """
        Largest offer strictly below the sentinel (ceiling, -inf).

        That is the cheapest offer in the highest occupied quality band
        below `ceiling`, or None if no band below `ceiling` is occupied.
        """
        # (ceiling,) sorts before every key of band `ceiling`
        i = bisect_left(self._keys, (ceiling,))
        if i == 0:
            return None
        return self._offers[i - 1]

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[SaleOffer]:
        return iter(self._offers)


class ClearingEngine:
    """Matches the bid queue against the offer book once per tick."""

    def __init__(self, n_quality: int) -> None:
        self.n_quality = n_quality

    def clear(
        self,
        offer_book: OfferBook,
        bid_queue: BidQueue,
        statistics: MarketStatistics,
        tick: int,
    ) -> list[Transaction]:
        """
        Run one clearing cycle.

        The bid queue is always empty afterwards. Matched offers are removed
        from the offer book; unmatched offers stay listed.

        Args:
            offer_book: Open offers (mutated)
            bid_queue: Pending bids (drained)
            statistics: EMA state (updated)
            tick: Current tick

        Returns:
            Transactions in the order they were executed
        """
        statistics.record_snapshot(offer_book, bid_queue, tick)

        index = OfferIndex(offer_book)
        num_bids = len(bid_queue)
        transactions: list[Transaction] = []

        for bid in bid_queue.drain():
            offer = self._find_offer(index, bid)
            if offer is None:
                continue
            index.remove(offer)
            offer_book.withdraw_offer(offer.house)
            transactions.append(self._complete_transaction(bid, offer, statistics, tick))

        statistics.update_price_index()

        logger.info(
            f"Tick {tick}: {len(transactions)}/{num_bids} bids matched, "
            f"{len(offer_book)} offers left, HPI={statistics.house_price_index:.4f}"
        )
        return transactions

    def _find_offer(self, index: OfferIndex, bid: BidRecord) -> SaleOffer | None:
        """
        Best offer for one buyer: the cheapest in the highest band whose
        cheapest offer is affordable and not the buyer's own.
        """
        ceiling = self.n_quality
        offer = index.predecessor(ceiling)
        while offer is not None and (offer.current_price > bid.price or offer.owner == bid.buyer):
            # Forfeit the whole band, not just this listing
            ceiling = offer.quality
            offer = index.predecessor(ceiling)
        return offer

    def _complete_transaction(
        self,
        bid: BidRecord,
        offer: SaleOffer,
        statistics: MarketStatistics,
        tick: int,
    ) -> Transaction:
        days_on_market = statistics.record_sale(offer, tick)
        transaction = Transaction(
            tick=tick,
            house=offer.house,
            buyer=bid.buyer,
            seller=offer.owner,
            quality=offer.quality,
            price=offer.current_price,
            bid_price=bid.price,
            initial_price=offer.initial_price,
            days_on_market=days_on_market,
        )
        logger.debug(
            f"Sale: house={offer.house!r} q={offer.quality} price={offer.current_price:.0f} "
            f"bid={bid.price:.0f} buyer={bid.buyer!r} seller={offer.owner!r}"
        )
        return transaction
