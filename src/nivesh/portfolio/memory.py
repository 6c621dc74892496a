"""
In-memory portfolio store.

Implements ``PortfolioDataSource`` and ``ExchangeRateProvider`` over plain
lists of rows.  Used by the CLI (loaded from a YAML or JSON snapshot) and by
the tests.

Snapshot layout::

    preferences:   [{user_id, default_currency}]
    accounts:      [{id, user_id, name, currency_code, account_sub_type, ...}]
    securities:    [{id, symbol, name, currency_code, security_type, is_active}]
    holdings:      [{id, account_id, security_id, quantity, average_cost}]
    prices:        [{security_id, price_date, close_price}]
    investment_transactions: [{id, user_id, account_id, security_id, action, ...}]
    cash_transactions:       [{id, account_id, amount, transaction_date, status}]
    exchange_rates:          [{from_currency, to_currency, rate_date, rate}]
"""

from __future__ import annotations

import json
import os
from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any

import yaml

from nivesh.core.exceptions import SnapshotError

from .cash import effective_balance, sum_investment_flows
from .models import (
    Account,
    AccountType,
    CashTransaction,
    ExchangeRate,
    Holding,
    InvestmentFlows,
    InvestmentTransaction,
    Security,
    SecurityPrice,
    UserPreference,
)


class InMemoryPortfolioStore:
    """Read-only store over in-memory rows."""

    def __init__(
        self,
        accounts: list[Account] | None = None,
        securities: list[Security] | None = None,
        holdings: list[Holding] | None = None,
        prices: list[SecurityPrice] | None = None,
        investment_transactions: list[InvestmentTransaction] | None = None,
        cash_transactions: list[CashTransaction] | None = None,
        exchange_rates: list[ExchangeRate] | None = None,
        preferences: list[UserPreference] | None = None,
    ):
        self.accounts = list(accounts or [])
        self.securities = {s.id: s for s in securities or []}
        self.holdings = list(holdings or [])
        self.prices = list(prices or [])
        self.investment_transactions = list(investment_transactions or [])
        self.cash_transactions = list(cash_transactions or [])
        self.exchange_rates = list(exchange_rates or [])
        self.preferences = {p.user_id: p.default_currency for p in preferences or []}

        for holding in self.holdings:
            self.securities.setdefault(holding.security_id, holding.security)
        for tx in self.investment_transactions:
            if tx.security is None and tx.security_id in self.securities:
                tx.security = self.securities[tx.security_id]

    # ── Construction from snapshots ──────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryPortfolioStore:
        """Build a store from a snapshot mapping; holdings reference securities by id."""
        try:
            securities = [Security(**row) for row in data.get("securities") or []]
            by_id = {s.id: s for s in securities}

            holdings = []
            for row in data.get("holdings") or []:
                row = dict(row)
                security_id = row.pop("security_id", None)
                if "security" not in row:
                    if security_id not in by_id:
                        raise SnapshotError(f"Holding {row.get('id')} references unknown security {security_id}")
                    row["security"] = by_id[security_id]
                holdings.append(Holding(**row))

            return cls(
                accounts=[Account(**row) for row in data.get("accounts") or []],
                securities=securities,
                holdings=holdings,
                prices=[SecurityPrice(**row) for row in data.get("prices") or []],
                investment_transactions=[
                    InvestmentTransaction(**row) for row in data.get("investment_transactions") or []
                ],
                cash_transactions=[CashTransaction(**row) for row in data.get("cash_transactions") or []],
                exchange_rates=[ExchangeRate(**row) for row in data.get("exchange_rates") or []],
                preferences=[UserPreference(**row) for row in data.get("preferences") or []],
            )
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Invalid portfolio snapshot: {e}") from e

    @classmethod
    def from_file(cls, path: str) -> InMemoryPortfolioStore:
        """Load a YAML or JSON snapshot file."""
        if not os.path.exists(path):
            raise SnapshotError(f"Snapshot not found: {path}")
        ext = os.path.splitext(path)[1].lower()
        with open(path) as f:
            if ext in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            elif ext == ".json":
                data = json.load(f)
            else:
                raise SnapshotError(f"Unsupported snapshot format: {ext or path}")
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {path} must contain a mapping")
        return cls.from_dict(data)

    # ── ExchangeRateProvider ─────────────────────────────────────────

    async def get_latest_rate(self, from_currency: str, to_currency: str) -> Decimal | None:
        if from_currency == to_currency:
            return Decimal("1")
        matches = [r for r in self.exchange_rates if r.from_currency == from_currency and r.to_currency == to_currency]
        if not matches:
            return None
        return max(matches, key=lambda r: r.rate_date).rate

    # ── PortfolioDataSource ──────────────────────────────────────────

    async def get_default_currency(self, user_id: str) -> str | None:
        return self.preferences.get(user_id)

    async def find_investment_accounts(self, user_id: str) -> list[Account]:
        return [
            a
            for a in self.accounts
            if a.user_id == user_id and a.account_type == AccountType.INVESTMENT and not a.is_closed
        ]

    async def find_accounts_by_id(self, account_ids: Iterable[str], user_id: str) -> list[Account]:
        wanted = set(account_ids)
        return [a for a in self.accounts if a.id in wanted and a.user_id == user_id]

    async def find_holdings(self, account_ids: Iterable[str]) -> list[Holding]:
        wanted = set(account_ids)
        return [h for h in self.holdings if h.account_id in wanted]

    def _series(self, security_ids: Iterable[str]) -> dict[str, list[SecurityPrice]]:
        wanted = set(security_ids)
        series: dict[str, list[SecurityPrice]] = defaultdict(list)
        for price in sorted(self.prices, key=lambda p: p.price_date):
            if price.security_id in wanted:
                series[price.security_id].append(price)
        return dict(series)

    async def get_latest_prices(self, security_ids: Iterable[str]) -> dict[str, Decimal]:
        return {security_id: prices[-1].close_price for security_id, prices in self._series(security_ids).items()}

    async def get_recent_prices(self, security_ids: Iterable[str], count: int = 2) -> dict[str, list[Decimal]]:
        return {
            security_id: [p.close_price for p in reversed(prices[-count:])]
            for security_id, prices in self._series(security_ids).items()
        }

    async def get_price_history(self, security_ids: Iterable[str]) -> dict[str, list[SecurityPrice]]:
        return self._series(security_ids)

    async def find_investment_transactions(
        self, user_id: str, account_ids: Iterable[str]
    ) -> list[InvestmentTransaction]:
        wanted = set(account_ids)
        rows = [t for t in self.investment_transactions if t.user_id == user_id and t.account_id in wanted]
        return sorted(rows, key=lambda t: (t.transaction_date, t.created_at))

    async def get_effective_balances(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> dict[str, Decimal]:
        wanted = set(account_ids)
        return {
            a.id: effective_balance(a, self.cash_transactions, as_of)
            for a in self.accounts
            if a.id in wanted and a.user_id == user_id
        }

    async def get_investment_flows(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> dict[str, InvestmentFlows]:
        wanted = set(account_ids)
        rows = [t for t in self.investment_transactions if t.user_id == user_id and t.account_id in wanted]
        return sum_investment_flows(rows, as_of)

    async def get_earliest_transaction_date(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> date | None:
        wanted = set(account_ids)
        dates = [
            t.transaction_date
            for t in self.investment_transactions
            if t.user_id == user_id and t.account_id in wanted and t.transaction_date <= as_of
        ]
        return min(dates, default=None)
