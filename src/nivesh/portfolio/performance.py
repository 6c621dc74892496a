"""
Performance metrics: time-weighted return and CAGR.

Time-weighted return
--------------------
The holdings book is replayed from the first investment transaction to
today.  Every distinct transaction date closes a sub-period:

    factor = value(book before the day's trades, at that day's prices)
             / value(book after the previous day's trades, at that day's prices)

Trades on the same date share one boundary; they are applied in
``(transaction_date, created_at)`` order.  Past boundaries are priced from the
stored history (last close on or before the date); the closing sub-period
runs from the last transaction date to today and is priced from the latest
closes.  The cumulative return is ``(prod(factors) - 1) * 100``, or None when
no factor was ever recorded.

CAGR
----
    cagr = (portfolio_value / net_invested) ** (1 / years) - 1

with ``years`` measured in Julian years from the earliest investment
transaction.  Any missing precondition, or a result too large to represent,
gives None.
"""

import math
from collections import defaultdict
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from functools import partial

from loguru import logger

from .context import CalculationContext
from .currency import CurrencyConverter
from .models import SHARE_DECREASING_ACTIONS, SHARE_INCREASING_ACTIONS, InvestmentTransaction
from .prices import PriceHistory
from .sources import PortfolioDataSource

DAYS_PER_YEAR = 365.25
SECONDS_PER_YEAR = DAYS_PER_YEAR * 24 * 60 * 60

HoldingsBook = dict[str, Decimal]


def apply_transaction(book: HoldingsBook, tx: InvestmentTransaction) -> None:
    """Update simulated quantities for one transaction.

    Income actions and splits leave quantities unchanged.
    """
    if tx.security_id is None:
        return
    quantity = tx.quantity or Decimal("0")
    current = book.get(tx.security_id, Decimal("0"))
    if tx.action in SHARE_INCREASING_ACTIONS:
        book[tx.security_id] = current + quantity
    elif tx.action in SHARE_DECREASING_ACTIONS:
        book[tx.security_id] = current - quantity


def group_by_date(transactions: list[InvestmentTransaction]) -> list[tuple[date, list[InvestmentTransaction]]]:
    """Chronological ``(date, transactions)`` pairs, same-day rows ordered by creation time."""
    ordered = sorted(transactions, key=lambda tx: (tx.transaction_date, tx.created_at))
    by_date: dict[date, list[InvestmentTransaction]] = defaultdict(list)
    for tx in ordered:
        by_date[tx.transaction_date].append(tx)
    return sorted(by_date.items())


async def value_book(
    book: HoldingsBook,
    price_of: Callable[[str], Decimal | None],
    currencies: dict[str, str],
    converter: CurrencyConverter,
    ctx: CalculationContext,
) -> Decimal:
    """Value of the book in the reporting currency; unpriced securities count as 0."""
    total = Decimal("0")
    for security_id, quantity in book.items():
        if quantity == 0:
            continue
        price = price_of(security_id)
        if price is None:
            continue
        total += await converter.to_default(quantity * price, currencies.get(security_id), ctx)
    return total


def chain_factors(factors: list[Decimal]) -> float | None:
    """Cumulative return in percent from sub-period factors."""
    if not factors:
        return None
    product = Decimal("1")
    for factor in factors:
        product *= factor
    return float((product - 1) * 100)


async def calculate_twr(
    source: PortfolioDataSource,
    user_id: str,
    holdings_account_ids: list[str],
    converter: CurrencyConverter,
    ctx: CalculationContext,
) -> float | None:
    """Cumulative time-weighted return (percent) for the given accounts."""
    if not holdings_account_ids:
        return None

    transactions = await source.find_investment_transactions(user_id, holdings_account_ids)
    if not transactions:
        return None

    security_ids = list(dict.fromkeys(tx.security_id for tx in transactions if tx.security_id))
    history = PriceHistory(await source.get_price_history(security_ids) if security_ids else {})

    currencies: dict[str, str] = {}
    for tx in transactions:
        if tx.security_id and tx.security and tx.security.currency_code:
            currencies[tx.security_id] = tx.security.currency_code

    days = group_by_date(transactions)
    book: HoldingsBook = {}
    factors: list[Decimal] = []
    previous_value = Decimal("0")
    previous_date: date | None = None

    for day, day_transactions in days:
        price_at = partial(history.lookup, on=day)

        if previous_date is not None and previous_value > 0:
            value_before_trades = await value_book(book, price_at, currencies, converter, ctx)
            if value_before_trades >= 0:
                factors.append(value_before_trades / previous_value)

        for tx in day_transactions:
            apply_transaction(book, tx)

        previous_value = await value_book(book, price_at, currencies, converter, ctx)
        previous_date = day

    if previous_value > 0:
        held = [security_id for security_id, quantity in book.items() if quantity != 0]
        latest = await source.get_latest_prices(held) if held else {}
        today_value = await value_book(book, latest.get, currencies, converter, ctx)
        if today_value >= 0:
            factors.append(today_value / previous_value)

    logger.debug(f"TWR over {len(days)} transaction dates produced {len(factors)} sub-period factors")
    return chain_factors(factors)


def years_between(start: date, now: datetime) -> float:
    """Elapsed Julian years from midnight of ``start`` to ``now``."""
    elapsed = now - datetime.combine(start, time.min)
    return elapsed.total_seconds() / SECONDS_PER_YEAR


async def calculate_cagr(
    source: PortfolioDataSource,
    user_id: str,
    account_ids: list[str],
    total_net_invested: Decimal,
    total_portfolio_value: Decimal,
    ctx: CalculationContext,
) -> float | None:
    """Compound annual growth rate (percent), or None without enough history."""
    if total_net_invested <= 0 or total_portfolio_value <= 0 or not account_ids:
        return None

    earliest = await source.get_earliest_transaction_date(user_id, account_ids, ctx.today)
    if earliest is None:
        return None

    years = years_between(earliest, ctx.now)
    if years < 1 / DAYS_PER_YEAR:
        return None

    growth = float(total_portfolio_value) / float(total_net_invested)
    try:
        cagr = (growth ** (1 / years) - 1) * 100
    except OverflowError:
        cagr = math.inf
    if not math.isfinite(cagr):
        logger.warning(f"CAGR out of range for growth {growth:.4g} over {years:.4f} years; reporting none")
        return None
    return cagr
