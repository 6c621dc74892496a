"""
Portfolio summary composition.

``PortfolioService`` wires the engine steps together for one user request:

    accounts -> categorise -> {cash balances, investment flows, holdings values}
             -> account groups -> totals -> {TWR, CAGR, allocation}

Independent reads run concurrently.  Each request gets a fresh
``CalculationContext`` so the result is a pure function of the data.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from loguru import logger

from nivesh.core.config import Config, get_config
from nivesh.core.utils.rounding import percent_of, round_money, round_ratio

from .accounts import categorise_accounts
from .allocation import build_allocation
from .cash import compute_effective_balances, compute_investment_flows, compute_total_cash_value
from .context import CalculationContext
from .currency import CurrencyConverter
from .grouping import build_holdings_by_account
from .holdings import calculate_holdings_with_values, sort_holdings
from .models import Account, AssetAllocation, PortfolioSummary, TopMover
from .movers import get_top_movers
from .performance import calculate_cagr, calculate_twr
from .sources import ExchangeRateProvider, PortfolioDataSource


def _summary_ratio(value: float | None) -> float | None:
    """Summary-level percentages are reported to four decimal places."""
    return None if value is None else float(round_ratio(value))


class PortfolioService:
    """Builds portfolio summaries, allocations, and movers from a data source."""

    def __init__(
        self,
        source: PortfolioDataSource,
        rate_provider: ExchangeRateProvider | None = None,
        config: Config | None = None,
    ):
        """
        Args:
            source: Read access to accounts, holdings, prices, and transactions.
            rate_provider: Exchange-rate lookups. Defaults to ``source`` when it
                also implements ``ExchangeRateProvider``.
            config: Settings; the global config is used when omitted.
        """
        if rate_provider is None:
            if not isinstance(source, ExchangeRateProvider):
                raise TypeError("rate_provider is required when the source does not provide exchange rates")
            rate_provider = source
        self.source = source
        self.converter = CurrencyConverter(rate_provider)
        self.settings = (config or get_config()).validated()

    async def get_default_currency(self, user_id: str) -> str:
        """The user's reporting currency, falling back to the configured default."""
        currency = await self.source.get_default_currency(user_id)
        return currency or self.settings.reporting.default_currency

    async def get_investment_accounts(self, user_id: str) -> list[Account]:
        return await self.source.find_investment_accounts(user_id)

    async def resolve_accounts(self, user_id: str, account_ids: Iterable[str] | None = None) -> list[Account]:
        """Accounts in scope for a request.

        With no filter, all open investment accounts.  With a filter, the
        requested accounts plus any linked partners not already requested.
        """
        if account_ids is None:
            return await self.get_investment_accounts(user_id)

        accounts = await self.source.find_accounts_by_id(list(account_ids), user_id)
        included = {a.id for a in accounts}
        missing = list(
            dict.fromkeys(
                a.linked_account_id for a in accounts if a.linked_account_id and a.linked_account_id not in included
            )
        )
        if missing:
            accounts = accounts + await self.source.find_accounts_by_id(missing, user_id)
        return accounts

    async def get_portfolio_summary(
        self,
        user_id: str,
        account_ids: Iterable[str] | None = None,
        now: datetime | None = None,
    ) -> PortfolioSummary:
        """Value the user's investment accounts and compute returns.

        Args:
            user_id: Owner of the accounts.
            account_ids: Optional filter; linked partner accounts are pulled in.
            now: Valuation time. Defaults to the current time.
        """
        default_currency, accounts = await asyncio.gather(
            self.get_default_currency(user_id),
            self.resolve_accounts(user_id, account_ids),
        )
        ctx = CalculationContext.create(default_currency, now)
        categorised = categorise_accounts(accounts)
        holdings_ids = categorised.holdings_account_ids
        cash_accounts = categorised.cash_bearing_accounts

        effective_balances, investment_flows, valued = await asyncio.gather(
            compute_effective_balances(self.source, user_id, [a.id for a in cash_accounts], ctx),
            compute_investment_flows(self.source, user_id, holdings_ids, ctx),
            calculate_holdings_with_values(self.source, holdings_ids, self.converter, ctx),
        )

        total_cash_value = await compute_total_cash_value(cash_accounts, effective_balances, self.converter, ctx)
        holdings_by_account = build_holdings_by_account(
            categorised, valued.valuations, effective_balances, investment_flows
        )

        total_net_invested = Decimal("0")
        for group in holdings_by_account:
            total_net_invested += await self.converter.to_default(group.net_invested, group.currency_code, ctx)

        total_portfolio_value = total_cash_value + valued.total_holdings_value
        total_gain_loss = valued.total_holdings_value - valued.total_cost_basis

        sorted_holdings = sort_holdings(valued.valuations)
        twr, cagr, allocation = await asyncio.gather(
            calculate_twr(self.source, user_id, holdings_ids, self.converter, ctx),
            calculate_cagr(self.source, user_id, holdings_ids, total_net_invested, total_portfolio_value, ctx),
            build_allocation(
                sorted_holdings,
                total_cash_value,
                total_portfolio_value,
                self.converter,
                ctx,
                palette=self.settings.allocation.palette,
                cash_color=self.settings.allocation.cash_color,
            ),
        )

        logger.info(
            f"Portfolio summary for {user_id}: {len(sorted_holdings)} holdings across "
            f"{len(holdings_by_account)} accounts in {default_currency}"
        )
        return PortfolioSummary(
            currency_code=default_currency,
            total_cash_value=round_money(total_cash_value),
            total_holdings_value=round_money(valued.total_holdings_value),
            total_cost_basis=round_money(valued.total_cost_basis),
            total_net_invested=round_money(total_net_invested),
            total_portfolio_value=round_money(total_portfolio_value),
            total_gain_loss=round_money(total_gain_loss),
            total_gain_loss_percent=_summary_ratio(percent_of(total_gain_loss, valued.total_cost_basis)),
            time_weighted_return=_summary_ratio(twr),
            cagr=_summary_ratio(cagr),
            holdings=sorted_holdings,
            holdings_by_account=holdings_by_account,
            allocation=allocation,
        )

    async def get_asset_allocation(
        self,
        user_id: str,
        account_ids: Iterable[str] | None = None,
        now: datetime | None = None,
    ) -> AssetAllocation:
        summary = await self.get_portfolio_summary(user_id, account_ids, now)
        return AssetAllocation(allocation=summary.allocation, total_value=summary.total_portfolio_value)

    async def get_top_movers(self, user_id: str, limit: int | None = None) -> list[TopMover]:
        """Largest daily movers among the user's open positions."""
        accounts = await self.get_investment_accounts(user_id)
        categorised = categorise_accounts(accounts)
        return await get_top_movers(self.source, categorised, limit or self.settings.movers.limit)
