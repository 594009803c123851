"""
Bid queue: purchase bids pending for the current clearing cycle.

A max-priority heap keyed by bid price. Equal prices are served in
submission order. The queue is emptied by every clearing cycle whether or
not the bids were matched.
"""

import heapq
import itertools
from dataclasses import dataclass
from typing import Hashable, Iterator

import numpy as np

from housing_market.errors import validate_price


@dataclass(frozen=True)
class BidRecord:
    """A buyer's maximum price for this tick."""

    buyer: Hashable
    price: float
    sequence: int = 0


class BidQueue:
    """Pending bids, highest price first."""

    def __init__(self) -> None:
        # Heap entries: (-price, sequence, record)
        self._heap: list[tuple[float, int, BidRecord]] = []
        self._sequence = itertools.count()

    def submit_bid(self, buyer: Hashable, price: float) -> BidRecord:
        """
        Queue a bid for the next clearing.

        Raises:
            InvalidPriceError: If price is not positive and finite
        """
        price = validate_price(price, "bid price")
        seq = next(self._sequence)
        record = BidRecord(buyer=buyer, price=price, sequence=seq)
        heapq.heappush(self._heap, (-price, seq, record))
        return record

    def peek(self) -> BidRecord | None:
        return self._heap[0][2] if self._heap else None

    def pop(self) -> BidRecord:
        """
        Remove and return the highest bid.

        Raises:
            IndexError: If the queue is empty
        """
        return heapq.heappop(self._heap)[2]

    def drain(self) -> Iterator[BidRecord]:
        """Yield bids in priority order, removing each as it is yielded."""
        while self._heap:
            yield self.pop()

    def bids(self) -> list[BidRecord]:
        """Pending bids in priority order, without consuming them."""
        return [entry[2] for entry in sorted(self._heap)]

    def prices(self) -> np.ndarray:
        return np.array([entry[2].price for entry in self._heap], dtype=float)

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
