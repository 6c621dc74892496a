"""Group valued holdings by account and attach cash and net-invested figures."""

from collections import defaultdict
from decimal import Decimal

from nivesh.core.utils.rounding import percent_of

from .accounts import CategorisedAccounts
from .cash import account_cash_balance, net_invested
from .holdings import sort_holdings
from .models import Account, AccountHoldings, HoldingValuation, InvestmentFlows

BROKERAGE_SUFFIX = " - Brokerage"


def display_name(account: Account) -> str:
    """Brokerage accounts drop their " - Brokerage" suffix."""
    return account.name.replace(BROKERAGE_SUFFIX, "")


def _account_holdings(
    account: Account,
    name: str,
    cash_account_id: str | None,
    cash_balance: Decimal,
    holdings: list[HoldingValuation],
    flows: InvestmentFlows | None,
) -> AccountHoldings:
    cost_basis = sum((h.cost_basis for h in holdings), Decimal("0"))
    market_value = sum((h.market_value or Decimal("0") for h in holdings), Decimal("0"))
    gain_loss = market_value - cost_basis
    return AccountHoldings(
        account_id=account.id,
        account_name=name,
        currency_code=account.currency_code,
        cash_account_id=cash_account_id,
        cash_balance=cash_balance,
        holdings=sort_holdings(holdings),
        total_cost_basis=cost_basis,
        total_market_value=market_value,
        total_gain_loss=gain_loss,
        total_gain_loss_percent=percent_of(gain_loss, cost_basis),
        net_invested=net_invested(cash_balance, flows),
    )


def build_holdings_by_account(
    categorised: CategorisedAccounts,
    valuations: list[HoldingValuation],
    effective_balances: dict[str, Decimal],
    investment_flows: dict[str, InvestmentFlows],
) -> list[AccountHoldings]:
    """One entry per brokerage or standalone account, largest market value first.

    A brokerage account reports the balance of its linked cash account (0 when
    it has none); a standalone account reports its own balance.
    """
    by_account: dict[str, list[HoldingValuation]] = defaultdict(list)
    for valuation in valuations:
        by_account[valuation.account_id].append(valuation)

    grouped: list[AccountHoldings] = []

    for brokerage in categorised.brokerage_accounts:
        cash_account = categorised.linked_cash_account(brokerage)
        cash_balance = account_cash_balance(cash_account, effective_balances) if cash_account else Decimal("0")
        grouped.append(
            _account_holdings(
                brokerage,
                display_name(brokerage),
                cash_account.id if cash_account else None,
                cash_balance,
                by_account.get(brokerage.id, []),
                investment_flows.get(brokerage.id),
            )
        )

    for standalone in categorised.standalone_accounts:
        grouped.append(
            _account_holdings(
                standalone,
                standalone.name,
                standalone.id,
                account_cash_balance(standalone, effective_balances),
                by_account.get(standalone.id, []),
                investment_flows.get(standalone.id),
            )
        )

    grouped.sort(key=lambda a: a.total_market_value, reverse=True)
    return grouped
