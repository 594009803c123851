"""Exceptions raised by the housing market."""

import math
import numbers


class MarketError(Exception):
    """Base class for housing market errors."""


class OfferNotFoundError(MarketError, KeyError):
    """The house has no open sale offer."""

    def __init__(self, house: object) -> None:
        self.house = house
        super().__init__(f"House {house!r} is not on the market")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class InvalidPriceError(MarketError, ValueError):
    """A bid, listing or price update carried a non-positive or non-finite price."""

    def __init__(self, price: float, what: str = "price") -> None:
        self.price = price
        super().__init__(f"{what} must be a positive finite number, got {price!r}")


class InvalidQualityError(MarketError, ValueError):
    """A quality that is not an integer band in [0, n_quality)."""

    def __init__(self, quality: int, n_quality: int) -> None:
        self.quality = quality
        self.n_quality = n_quality
        super().__init__(f"quality must be in [0, {n_quality}), got {quality!r}")


def validate_price(price: float, what: str = "price") -> float:
    """Return price as float, raising InvalidPriceError unless it is positive and finite."""
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise InvalidPriceError(price, what) from None
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidPriceError(price, what)
    return value


def validate_quality(quality: int, n_quality: int) -> int:
    """Return quality as int, raising InvalidQualityError unless it is an integer band in [0, n_quality)."""
    if isinstance(quality, bool) or not isinstance(quality, numbers.Integral):
        raise InvalidQualityError(quality, n_quality)
    if not 0 <= quality < n_quality:
        raise InvalidQualityError(quality, n_quality)
    return int(quality)
