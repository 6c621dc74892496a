"""
Cash balances and investment cash flows.

The effective balance of an account is its opening balance plus every
transaction dated on or before today, ignoring voided rows and split
children (their parent already carries the amount).  Investment flows are
the per-account totals of BUY, SELL, and income transactions; together with
the cash balance they give the capital a user has put in:

    net_invested = cash_balance + buys - sells - income
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from nivesh.core.utils.rounding import round_money

from .context import CalculationContext
from .currency import CurrencyConverter
from .models import (
    INCOME_ACTIONS,
    Account,
    CashTransaction,
    InvestmentAction,
    InvestmentFlows,
    InvestmentTransaction,
    TransactionStatus,
)
from .sources import PortfolioDataSource

# ── Pure aggregates (what a backing store computes) ──────────────────


def effective_balance(account: Account, transactions: Iterable[CashTransaction], as_of: date) -> Decimal:
    """Opening balance plus the account's effective transactions up to ``as_of``."""
    total = account.opening_balance
    for tx in transactions:
        if tx.account_id != account.id:
            continue
        if tx.status == TransactionStatus.VOID or tx.parent_transaction_id is not None:
            continue
        if tx.transaction_date > as_of:
            continue
        total += tx.amount
    return total


def sum_investment_flows(transactions: Iterable[InvestmentTransaction], as_of: date) -> dict[str, InvestmentFlows]:
    """Per-account BUY, SELL, and income totals up to ``as_of``."""
    flows: dict[str, InvestmentFlows] = {}
    for tx in transactions:
        if tx.transaction_date > as_of:
            continue
        entry = flows.setdefault(tx.account_id, InvestmentFlows())
        if tx.action == InvestmentAction.BUY:
            entry.buys += tx.total_amount
        elif tx.action == InvestmentAction.SELL:
            entry.sells += tx.total_amount
        elif tx.action in INCOME_ACTIONS:
            entry.income += tx.total_amount
    return flows


def net_invested(cash_balance: Decimal, flows: InvestmentFlows | None) -> Decimal:
    """External capital contributed to an account, rounded to cents."""
    flows = flows or InvestmentFlows()
    return round_money(cash_balance + flows.buys - flows.sells - flows.income)


# ── Engine steps ─────────────────────────────────────────────────────


async def compute_effective_balances(
    source: PortfolioDataSource,
    user_id: str,
    account_ids: list[str],
    ctx: CalculationContext,
) -> dict[str, Decimal]:
    """Effective balance per account as of ``ctx.today``, rounded to cents."""
    if not account_ids:
        return {}
    raw = await source.get_effective_balances(user_id, account_ids, ctx.today)
    return {account_id: round_money(balance) for account_id, balance in raw.items()}


def account_cash_balance(account: Account, effective_balances: dict[str, Decimal]) -> Decimal:
    """Effective balance for ``account``, falling back to its stored balance."""
    balance = effective_balances.get(account.id)
    return balance if balance is not None else account.current_balance


async def compute_total_cash_value(
    accounts: list[Account],
    effective_balances: dict[str, Decimal],
    converter: CurrencyConverter,
    ctx: CalculationContext,
) -> Decimal:
    """Sum cash across ``accounts`` in the reporting currency."""
    total = Decimal("0")
    for account in accounts:
        balance = account_cash_balance(account, effective_balances)
        total += await converter.to_default(balance, account.currency_code, ctx)
    return total


async def compute_investment_flows(
    source: PortfolioDataSource,
    user_id: str,
    account_ids: list[str],
    ctx: CalculationContext,
) -> dict[str, InvestmentFlows]:
    if not account_ids:
        return {}
    return await source.get_investment_flows(user_id, account_ids, ctx.today)
