"""Portfolio data models.

Input rows (accounts, securities, holdings, prices, transactions, rates) are
read-only snapshots of what the ledger holds.  Output records (valued
holdings, account groups, allocation entries, the summary) are what the
engine produces.  Numeric fields are coerced to ``Decimal`` and ISO date
strings to ``date`` so rows can be loaded straight from YAML or JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import StrEnum

from nivesh.core.utils.rounding import to_decimal


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def naive_utc(value: datetime) -> datetime:
    """Aware datetimes become naive UTC; naive ones are taken as already UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return naive_utc(datetime.fromisoformat(str(value)))


# ── Enumerations ─────────────────────────────────────────────────────


class AccountType(StrEnum):
    CHEQUING = "CHEQUING"
    SAVINGS = "SAVINGS"
    CREDIT_CARD = "CREDIT_CARD"
    LOAN = "LOAN"
    MORTGAGE = "MORTGAGE"
    INVESTMENT = "INVESTMENT"
    CASH = "CASH"
    ASSET = "ASSET"
    OTHER = "OTHER"


class AccountSubType(StrEnum):
    """Investment account role.  ``None`` on an account means standalone."""

    INVESTMENT_CASH = "INVESTMENT_CASH"
    INVESTMENT_BROKERAGE = "INVESTMENT_BROKERAGE"


class InvestmentAction(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    REINVEST = "REINVEST"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    ADD_SHARES = "ADD_SHARES"
    REMOVE_SHARES = "REMOVE_SHARES"
    DIVIDEND = "DIVIDEND"
    INTEREST = "INTEREST"
    CAPITAL_GAIN = "CAPITAL_GAIN"
    SPLIT = "SPLIT"


# Quantity effect of each action in the holdings simulation
SHARE_INCREASING_ACTIONS = frozenset(
    {
        InvestmentAction.BUY,
        InvestmentAction.REINVEST,
        InvestmentAction.TRANSFER_IN,
        InvestmentAction.ADD_SHARES,
    }
)
SHARE_DECREASING_ACTIONS = frozenset(
    {
        InvestmentAction.SELL,
        InvestmentAction.TRANSFER_OUT,
        InvestmentAction.REMOVE_SHARES,
    }
)
INCOME_ACTIONS = frozenset(
    {
        InvestmentAction.DIVIDEND,
        InvestmentAction.INTEREST,
        InvestmentAction.CAPITAL_GAIN,
    }
)


class TransactionStatus(StrEnum):
    UNRECONCILED = "UNRECONCILED"
    CLEARED = "CLEARED"
    RECONCILED = "RECONCILED"
    VOID = "VOID"


# ── Ledger rows ──────────────────────────────────────────────────────


@dataclass
class Account:
    """A ledger account.

    Brokerage and cash accounts point at each other through
    ``linked_account_id``; a standalone investment account has no sub-type
    and carries both its cash and its holdings.
    """

    id: str
    user_id: str
    name: str
    currency_code: str
    account_type: AccountType = AccountType.INVESTMENT
    account_sub_type: AccountSubType | None = None
    linked_account_id: str | None = None
    opening_balance: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    is_closed: bool = False

    def __post_init__(self):
        if not self.id:
            raise ValueError("Account id cannot be empty")
        self.account_type = AccountType(self.account_type)
        if self.account_sub_type is not None:
            self.account_sub_type = AccountSubType(self.account_sub_type)
        self.opening_balance = to_decimal(self.opening_balance)
        self.current_balance = to_decimal(self.current_balance)


@dataclass
class Security:
    id: str
    symbol: str | None
    name: str | None
    currency_code: str | None
    security_type: str = "STOCK"
    is_active: bool = True


@dataclass
class Holding:
    """A position: ``quantity`` units of a security bought at ``average_cost`` each."""

    id: str
    account_id: str
    security: Security
    quantity: Decimal
    average_cost: Decimal | None = None

    def __post_init__(self):
        if isinstance(self.security, dict):
            self.security = Security(**self.security)
        self.quantity = to_decimal(self.quantity)
        if self.average_cost is not None:
            self.average_cost = to_decimal(self.average_cost)

    @property
    def security_id(self) -> str:
        return self.security.id

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * (self.average_cost or Decimal("0"))


@dataclass
class SecurityPrice:
    security_id: str
    price_date: date
    close_price: Decimal
    open_price: Decimal | None = None
    high_price: Decimal | None = None
    low_price: Decimal | None = None
    volume: int | None = None

    def __post_init__(self):
        self.price_date = _as_date(self.price_date)
        self.close_price = to_decimal(self.close_price)
        if self.close_price < 0:
            raise ValueError(f"Negative price for {self.security_id}: {self.close_price}")
        for name in ("open_price", "high_price", "low_price"):
            val = getattr(self, name)
            if val is not None:
                setattr(self, name, to_decimal(val))


@dataclass
class InvestmentTransaction:
    id: str
    user_id: str
    account_id: str
    action: InvestmentAction
    transaction_date: date
    created_at: datetime
    security_id: str | None = None
    security: Security | None = None
    quantity: Decimal | None = None
    price: Decimal | None = None
    total_amount: Decimal = Decimal("0")

    def __post_init__(self):
        if isinstance(self.security, dict):
            self.security = Security(**self.security)
        if self.security is not None and self.security_id is None:
            self.security_id = self.security.id
        self.action = InvestmentAction(self.action)
        self.transaction_date = _as_date(self.transaction_date)
        self.created_at = _as_datetime(self.created_at)
        self.total_amount = to_decimal(self.total_amount)
        if self.quantity is not None:
            self.quantity = to_decimal(self.quantity)
        if self.price is not None:
            self.price = to_decimal(self.price)


@dataclass
class CashTransaction:
    """A cash movement on an account; split children carry a parent id."""

    id: str
    account_id: str
    amount: Decimal
    transaction_date: date
    status: TransactionStatus = TransactionStatus.UNRECONCILED
    parent_transaction_id: str | None = None

    def __post_init__(self):
        self.amount = to_decimal(self.amount)
        self.transaction_date = _as_date(self.transaction_date)
        self.status = TransactionStatus(self.status)


@dataclass
class ExchangeRate:
    from_currency: str
    to_currency: str
    rate_date: date
    rate: Decimal

    def __post_init__(self):
        self.rate_date = _as_date(self.rate_date)
        self.rate = to_decimal(self.rate)
        if self.rate <= 0:
            raise ValueError(f"Exchange rate {self.from_currency}->{self.to_currency} must be positive")


@dataclass
class UserPreference:
    user_id: str
    default_currency: str


# ── Engine output ────────────────────────────────────────────────────


@dataclass
class InvestmentFlows:
    """Per-account cash sums of BUY, SELL, and income transactions."""

    buys: Decimal = Decimal("0")
    sells: Decimal = Decimal("0")
    income: Decimal = Decimal("0")


@dataclass
class HoldingValuation:
    """A holding joined to its latest price, in the security's own currency."""

    id: str
    account_id: str
    security_id: str
    symbol: str
    name: str
    security_type: str
    currency_code: str
    quantity: Decimal
    average_cost: Decimal
    cost_basis: Decimal
    current_price: Decimal | None
    market_value: Decimal | None
    gain_loss: Decimal | None
    gain_loss_percent: float | None


@dataclass
class AccountHoldings:
    account_id: str
    account_name: str
    currency_code: str
    cash_account_id: str | None
    cash_balance: Decimal
    holdings: list[HoldingValuation]
    total_cost_basis: Decimal
    total_market_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: float
    net_invested: Decimal


@dataclass
class AllocationItem:
    name: str
    symbol: str | None
    type: str  # "cash" or "security"
    value: Decimal
    percentage: float
    color: str
    currency_code: str


@dataclass
class AssetAllocation:
    allocation: list[AllocationItem]
    total_value: Decimal


@dataclass
class TopMover:
    security_id: str
    symbol: str
    name: str
    currency_code: str
    current_price: Decimal
    previous_price: Decimal
    daily_change: Decimal
    daily_change_percent: float
    market_value: Decimal


@dataclass
class PortfolioSummary:
    """Everything the summary view needs, in the user's reporting currency."""

    currency_code: str
    total_cash_value: Decimal
    total_holdings_value: Decimal
    total_cost_basis: Decimal
    total_net_invested: Decimal
    total_portfolio_value: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: float
    time_weighted_return: float | None
    cagr: float | None
    holdings: list[HoldingValuation] = field(default_factory=list)
    holdings_by_account: list[AccountHoldings] = field(default_factory=list)
    allocation: list[AllocationItem] = field(default_factory=list)
