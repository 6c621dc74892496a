"""Fixtures for portfolio engine tests.

Mirrors a typical user: a TFSA split into brokerage and cash accounts plus a
standalone account that holds both cash and securities.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from nivesh.core.config import Config
from nivesh.portfolio import (
    Account,
    AccountSubType,
    CalculationContext,
    CurrencyConverter,
    Holding,
    InMemoryPortfolioStore,
    InvestmentTransaction,
    Security,
    SecurityPrice,
    UserPreference,
)

USER = "user-1"
NOW = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def user_id():
    return USER


@pytest.fixture
def now():
    """Fixed valuation time for deterministic results."""
    return NOW


@pytest.fixture
def make_price():
    def _make(security_id, day, close):
        return SecurityPrice(security_id=security_id, price_date=day, close_price=close)

    return _make


@pytest.fixture
def make_tx():
    def _make(tx_id, account_id, security, action, quantity, total, day, created=None):
        return InvestmentTransaction(
            id=tx_id,
            user_id=USER,
            account_id=account_id,
            security=security,
            action=action,
            quantity=quantity,
            total_amount=total,
            transaction_date=day,
            created_at=created or datetime.combine(day, datetime.min.time()),
        )

    return _make


@pytest.fixture
def brokerage_account():
    return Account(
        id="acct-brokerage-1",
        user_id=USER,
        name="TFSA - Brokerage",
        currency_code="CAD",
        account_sub_type=AccountSubType.INVESTMENT_BROKERAGE,
        linked_account_id="acct-cash-1",
    )


@pytest.fixture
def cash_account():
    return Account(
        id="acct-cash-1",
        user_id=USER,
        name="TFSA - Cash",
        currency_code="CAD",
        account_sub_type=AccountSubType.INVESTMENT_CASH,
        linked_account_id="acct-brokerage-1",
        opening_balance=Decimal("5000"),
        current_balance=Decimal("5000"),
    )


@pytest.fixture
def standalone_account():
    return Account(
        id="acct-standalone-1",
        user_id=USER,
        name="Wealthsimple",
        currency_code="CAD",
        opening_balance=Decimal("2000"),
        current_balance=Decimal("2000"),
    )


@pytest.fixture
def aapl():
    return Security(id="sec-1", symbol="AAPL", name="Apple Inc.", currency_code="USD")


@pytest.fixture
def vfv():
    return Security(id="sec-2", symbol="VFV.TO", name="Vanguard S&P 500 ETF", currency_code="CAD", security_type="ETF")


@pytest.fixture
def xic():
    return Security(id="sec-3", symbol="XIC.TO", name="iShares Core S&P/TSX", currency_code="CAD", security_type="ETF")


@pytest.fixture
def aapl_holding(aapl):
    return Holding(id="hold-1", account_id="acct-brokerage-1", security=aapl, quantity=10, average_cost=150)


@pytest.fixture
def vfv_holding(vfv):
    return Holding(id="hold-2", account_id="acct-brokerage-1", security=vfv, quantity=50, average_cost=80)


@pytest.fixture
def xic_holding(xic):
    return Holding(id="hold-3", account_id="acct-standalone-1", security=xic, quantity=100, average_cost=30)


@pytest.fixture
def cad_user():
    return UserPreference(user_id=USER, default_currency="CAD")


@pytest.fixture
def config():
    return Config(env_prefix="NIVESH_TEST_")


@pytest.fixture
def ctx():
    return CalculationContext.create("CAD", NOW)


@pytest.fixture
def empty_store():
    return InMemoryPortfolioStore()


@pytest.fixture
def converter(empty_store):
    return CurrencyConverter(empty_store)

