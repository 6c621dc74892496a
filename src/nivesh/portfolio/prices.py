"""Immutable per-security price series with "as of" lookup."""

from __future__ import annotations

from bisect import bisect_right
from datetime import date
from decimal import Decimal

from .models import SecurityPrice


class PriceSeries:
    """Closes for one security, sorted ascending by date, one per date."""

    __slots__ = ("dates", "closes")

    def __init__(self, prices: list[SecurityPrice]):
        by_date: dict[date, Decimal] = {}
        for price in sorted(prices, key=lambda p: p.price_date):
            by_date[price.price_date] = price.close_price
        self.dates: tuple[date, ...] = tuple(by_date)
        self.closes: tuple[Decimal, ...] = tuple(by_date.values())

    def __len__(self) -> int:
        return len(self.dates)

    def price_on_or_before(self, on: date) -> Decimal | None:
        """Close of the last date <= ``on``, or None if the series starts later."""
        index = bisect_right(self.dates, on) - 1
        return self.closes[index] if index >= 0 else None


class PriceHistory:
    """Price series for a set of securities, loaded once per calculation."""

    def __init__(self, history: dict[str, list[SecurityPrice]]):
        self._series = {security_id: PriceSeries(prices) for security_id, prices in history.items() if prices}

    def __contains__(self, security_id: str) -> bool:
        return security_id in self._series

    def lookup(self, security_id: str, on: date) -> Decimal | None:
        series = self._series.get(security_id)
        if series is None:
            return None
        return series.price_on_or_before(on)
