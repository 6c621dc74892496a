"""Percentage-of-portfolio breakdown across cash and securities."""

from decimal import Decimal

from nivesh.core.config_schema import ALLOCATION_PALETTE, CASH_COLOR
from nivesh.core.utils.rounding import percent_of

from .context import CalculationContext
from .currency import CurrencyConverter
from .models import AllocationItem, HoldingValuation


async def build_allocation(
    sorted_holdings: list[HoldingValuation],
    total_cash_value: Decimal,
    total_portfolio_value: Decimal,
    converter: CurrencyConverter,
    ctx: CalculationContext,
    palette: list[str] | None = None,
    cash_color: str = CASH_COLOR,
) -> list[AllocationItem]:
    """Build the allocation list, sorted by converted value descending.

    Cash appears once when positive.  Each security with a positive market
    value gets the next palette color in input order.  Zero or unpriced
    holdings are left out.
    """
    palette = palette or ALLOCATION_PALETTE
    allocation: list[AllocationItem] = []

    if total_cash_value > 0:
        allocation.append(
            AllocationItem(
                name="Cash",
                symbol=None,
                type="cash",
                value=total_cash_value,
                percentage=percent_of(total_cash_value, total_portfolio_value),
                color=cash_color,
                currency_code=ctx.default_currency,
            )
        )

    color_index = 0
    for holding in sorted_holdings:
        if holding.market_value is None or holding.market_value <= 0:
            continue
        value = await converter.to_default(holding.market_value, holding.currency_code, ctx)
        allocation.append(
            AllocationItem(
                name=holding.name,
                symbol=holding.symbol,
                type="security",
                value=value,
                percentage=percent_of(value, total_portfolio_value),
                color=palette[color_index % len(palette)],
                currency_code=holding.currency_code,
            )
        )
        color_index += 1

    allocation.sort(key=lambda item: item.value, reverse=True)
    return allocation
