"""
Currency conversion with a per-calculation rate cache.

Rates resolve in order: cached value, direct rate, inverse of the reverse
rate, and finally 1 (no conversion).  The resolved rate is cached under the
requested direction so every later conversion in the same calculation sees
the same number even if the provider's data changes underneath it.
"""

from decimal import Decimal

from loguru import logger

from nivesh.core.types import RateCache
from nivesh.core.utils.rounding import to_decimal

from .context import CalculationContext
from .sources import ExchangeRateProvider

_NO_CONVERSION = Decimal("1")


def rate_cache_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}->{to_currency}"


class CurrencyConverter:
    """Converts amounts between currencies using the latest known rates."""

    def __init__(self, rate_provider: ExchangeRateProvider):
        self.rate_provider = rate_provider

    async def get_rate(self, from_currency: str, to_currency: str, rate_cache: RateCache) -> Decimal:
        """Resolve and cache the ``from -> to`` rate."""
        if from_currency == to_currency:
            return _NO_CONVERSION

        key = rate_cache_key(from_currency, to_currency)
        rate = rate_cache.get(key)
        if rate is not None:
            return rate

        direct = await self.rate_provider.get_latest_rate(from_currency, to_currency)
        if direct is not None:
            rate = to_decimal(direct)
        else:
            reverse = await self.rate_provider.get_latest_rate(to_currency, from_currency)
            if reverse is not None and to_decimal(reverse) != 0:
                rate = _NO_CONVERSION / to_decimal(reverse)
            else:
                logger.warning(f"No exchange rate for {key}; using 1.0")
                rate = _NO_CONVERSION

        rate_cache[key] = rate
        return rate

    async def convert(self, amount, from_currency: str, to_currency: str, rate_cache: RateCache) -> Decimal:
        """Convert ``amount`` from one currency to another."""
        amount = to_decimal(amount)
        if from_currency == to_currency:
            return amount
        rate = await self.get_rate(from_currency, to_currency, rate_cache)
        return amount * rate

    async def to_default(self, amount, from_currency: str | None, ctx: CalculationContext) -> Decimal:
        """Convert into the context's reporting currency; unknown currency means no conversion."""
        return await self.convert(amount, from_currency or ctx.default_currency, ctx.default_currency, ctx.rate_cache)
