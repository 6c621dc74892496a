"""Daily top movers across a user's open positions."""

from decimal import Decimal

from .accounts import CategorisedAccounts
from .holdings import UNKNOWN
from .models import Holding, Security, TopMover
from .sources import PortfolioDataSource

FALLBACK_CURRENCY = "USD"


def aggregate_positions(holdings: list[Holding]) -> dict[str, tuple[Security, Decimal]]:
    """Total quantity per active security across accounts, skipping empty positions."""
    positions: dict[str, tuple[Security, Decimal]] = {}
    for holding in holdings:
        if holding.quantity == 0 or not holding.security.is_active:
            continue
        security, quantity = positions.get(holding.security_id, (holding.security, Decimal("0")))
        positions[holding.security_id] = (security, quantity + holding.quantity)
    return positions


async def get_top_movers(
    source: PortfolioDataSource,
    categorised: CategorisedAccounts,
    limit: int | None = None,
) -> list[TopMover]:
    """Securities ranked by the size of their latest daily move.

    A security needs two closes and a nonzero previous close to be ranked.
    """
    if not categorised.holdings_account_ids:
        return []

    holdings = await source.find_holdings(categorised.holdings_account_ids)
    positions = aggregate_positions(holdings)
    if not positions:
        return []

    recent = await source.get_recent_prices(list(positions), count=2)

    movers: list[TopMover] = []
    for security_id, (security, quantity) in positions.items():
        closes = recent.get(security_id, [])
        if len(closes) < 2:
            continue
        current_price, previous_price = closes[0], closes[1]
        if previous_price == 0:
            continue
        change = current_price - previous_price
        movers.append(
            TopMover(
                security_id=security_id,
                symbol=security.symbol or UNKNOWN,
                name=security.name or UNKNOWN,
                currency_code=security.currency_code or FALLBACK_CURRENCY,
                current_price=current_price,
                previous_price=previous_price,
                daily_change=change,
                daily_change_percent=float(change / previous_price * 100),
                market_value=current_price * quantity,
            )
        )

    movers.sort(key=lambda m: abs(m.daily_change_percent), reverse=True)
    return movers[:limit] if limit else movers
