"""
Collaborator contracts consumed by the engine.

Any backing store (SQL, an ORM, an API, the in-memory store used by the
CLI and tests) implements these protocols.  All reads are async; the engine
never writes.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from .models import Account, Holding, InvestmentFlows, InvestmentTransaction, SecurityPrice


@runtime_checkable
class ExchangeRateProvider(Protocol):
    async def get_latest_rate(self, from_currency: str, to_currency: str) -> Decimal | None:
        """Most recent known rate for the pair, or None."""
        ...


@runtime_checkable
class PortfolioDataSource(Protocol):
    """Read-only access to accounts, holdings, prices, and transactions."""

    async def get_default_currency(self, user_id: str) -> str | None:
        """The user's preferred reporting currency, or None if unset."""
        ...

    async def find_investment_accounts(self, user_id: str) -> list[Account]:
        """Open investment accounts owned by the user."""
        ...

    async def find_accounts_by_id(self, account_ids: Iterable[str], user_id: str) -> list[Account]:
        """Accounts with the given ids, restricted to the user."""
        ...

    async def find_holdings(self, account_ids: Iterable[str]) -> list[Holding]:
        """Holdings (with embedded security) for the given accounts."""
        ...

    async def get_latest_prices(self, security_ids: Iterable[str]) -> dict[str, Decimal]:
        """One most-recent close per security."""
        ...

    async def get_recent_prices(self, security_ids: Iterable[str], count: int = 2) -> dict[str, list[Decimal]]:
        """Up to ``count`` most recent closes per security, newest first."""
        ...

    async def get_price_history(self, security_ids: Iterable[str]) -> dict[str, list[SecurityPrice]]:
        """Full price history per security, ascending by date."""
        ...

    async def find_investment_transactions(
        self, user_id: str, account_ids: Iterable[str]
    ) -> list[InvestmentTransaction]:
        """Investment transactions ordered by (transaction_date, created_at)."""
        ...

    async def get_effective_balances(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> dict[str, Decimal]:
        """Opening balance plus non-void, non-child transactions dated on or before ``as_of``."""
        ...

    async def get_investment_flows(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> dict[str, InvestmentFlows]:
        """BUY, SELL, and income totals per account dated on or before ``as_of``."""
        ...

    async def get_earliest_transaction_date(
        self, user_id: str, account_ids: Iterable[str], as_of: date
    ) -> date | None:
        """Earliest investment transaction date on or before ``as_of``."""
        ...
