"""
Holdings valuation.

Joins each open position to the latest close of its security.  Per-holding
figures stay in the security's own currency; the portfolio totals are
converted holding by holding into the reporting currency before summing.
A holding without a price still counts toward cost basis.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger

from .context import CalculationContext
from .currency import CurrencyConverter
from .models import Holding, HoldingValuation
from .sources import PortfolioDataSource

UNKNOWN = "Unknown"


@dataclass
class ValuedHoldings:
    holdings: list[Holding] = field(default_factory=list)
    valuations: list[HoldingValuation] = field(default_factory=list)
    total_cost_basis: Decimal = Decimal("0")
    total_holdings_value: Decimal = Decimal("0")


def value_holding(holding: Holding, current_price: Decimal | None, default_currency: str) -> HoldingValuation:
    """Compute cost basis, market value, and gain/loss for one holding."""
    quantity = holding.quantity
    average_cost = holding.average_cost or Decimal("0")
    cost_basis = holding.cost_basis
    market_value = quantity * current_price if current_price is not None else None
    gain_loss = market_value - cost_basis if market_value is not None and cost_basis > 0 else None
    gain_loss_percent = float(gain_loss / cost_basis * 100) if gain_loss is not None else None

    security = holding.security
    return HoldingValuation(
        id=holding.id,
        account_id=holding.account_id,
        security_id=security.id,
        symbol=security.symbol or UNKNOWN,
        name=security.name or UNKNOWN,
        security_type=security.security_type or "STOCK",
        currency_code=security.currency_code or default_currency,
        quantity=quantity,
        average_cost=average_cost,
        cost_basis=cost_basis,
        current_price=current_price,
        market_value=market_value,
        gain_loss=gain_loss,
        gain_loss_percent=gain_loss_percent,
    )


def sort_holdings(valuations: list[HoldingValuation]) -> list[HoldingValuation]:
    """Sort by market value descending, unpriced holdings last."""
    return sorted(valuations, key=lambda h: (h.market_value is None, -(h.market_value or 0)))


async def calculate_holdings_with_values(
    source: PortfolioDataSource,
    holdings_account_ids: list[str],
    converter: CurrencyConverter,
    ctx: CalculationContext,
) -> ValuedHoldings:
    """Value every nonzero holding in the given accounts."""
    result = ValuedHoldings()
    if holdings_account_ids:
        result.holdings = await source.find_holdings(holdings_account_ids)

    security_ids = list(dict.fromkeys(h.security_id for h in result.holdings))
    prices = await source.get_latest_prices(security_ids) if security_ids else {}

    for holding in result.holdings:
        if holding.quantity == 0:
            continue

        valuation = value_holding(holding, prices.get(holding.security_id), ctx.default_currency)
        if valuation.market_value is None:
            logger.warning(f"No price for {valuation.symbol} ({holding.security_id}); market value unknown")

        result.total_cost_basis += await converter.to_default(valuation.cost_basis, valuation.currency_code, ctx)
        if valuation.market_value is not None:
            result.total_holdings_value += await converter.to_default(
                valuation.market_value, valuation.currency_code, ctx
            )
        result.valuations.append(valuation)

    return result
