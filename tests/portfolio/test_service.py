"""End-to-end tests for PortfolioService."""

from datetime import date, timedelta, timezone
from decimal import Decimal

import pytest

from nivesh.portfolio import (
    Account,
    ExchangeRate,
    Holding,
    InMemoryPortfolioStore,
    InvestmentAction,
    PortfolioService,
)

PRICE_DATE = date(2024, 12, 31)


@pytest.fixture
def store(
    brokerage_account,
    cash_account,
    standalone_account,
    aapl_holding,
    vfv_holding,
    xic_holding,
    cad_user,
    make_price,
):
    return InMemoryPortfolioStore(
        accounts=[brokerage_account, cash_account, standalone_account],
        holdings=[aapl_holding, vfv_holding, xic_holding],
        prices=[
            make_price("sec-1", PRICE_DATE, 200),
            make_price("sec-2", PRICE_DATE, 100),
            make_price("sec-3", PRICE_DATE, 35),
        ],
        exchange_rates=[ExchangeRate(from_currency="USD", to_currency="CAD", rate_date=PRICE_DATE, rate="1.5")],
        preferences=[cad_user],
    )


@pytest.fixture
def service(store, config):
    return PortfolioService(store, config=config)


class TestPortfolioSummary:
    @pytest.mark.asyncio
    async def test_totals(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert summary.currency_code == "CAD"
        # cash: 5000 (TFSA cash) + 2000 (standalone)
        assert summary.total_cash_value == Decimal("7000.00")
        # AAPL 2000 USD * 1.5 + VFV 5000 + XIC 3500
        assert summary.total_holdings_value == Decimal("11500.00")
        assert summary.total_cost_basis == Decimal("9250.00")
        assert summary.total_portfolio_value == Decimal("18500.00")
        assert summary.total_gain_loss == Decimal("2250.00")
        assert summary.total_gain_loss_percent == 24.3243
        assert summary.total_net_invested == Decimal("7000.00")

    @pytest.mark.asyncio
    async def test_holdings_sorted_by_value(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, now=now)
        # VFV 5000 CAD, XIC 3500 CAD, AAPL 2000 USD (own currency)
        assert [h.symbol for h in summary.holdings] == ["VFV.TO", "XIC.TO", "AAPL"]

    @pytest.mark.asyncio
    async def test_account_groups(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, now=now)
        names = [g.account_name for g in summary.holdings_by_account]
        assert names == ["TFSA", "Wealthsimple"]
        tfsa = summary.holdings_by_account[0]
        assert tfsa.cash_balance == Decimal("5000.00")
        assert len(tfsa.holdings) == 2

    @pytest.mark.asyncio
    async def test_allocation_sums_to_hundred(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert sum(item.percentage for item in summary.allocation) == pytest.approx(100.0)
        assert summary.allocation[0].type == "cash"

    @pytest.mark.asyncio
    async def test_no_transactions_means_no_returns(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert summary.time_weighted_return is None
        assert summary.cagr is None

    @pytest.mark.asyncio
    async def test_timezone_aware_now(self, service, user_id, now):
        aware = now.replace(tzinfo=timezone(timedelta(hours=-5)))
        summary = await service.get_portfolio_summary(user_id, now=aware)
        assert summary.total_portfolio_value == Decimal("18500.00")

    @pytest.mark.asyncio
    async def test_repeatable(self, service, user_id, now):
        first = await service.get_portfolio_summary(user_id, now=now)
        second = await service.get_portfolio_summary(user_id, now=now)
        assert first == second

    @pytest.mark.asyncio
    async def test_zero_quantity_holding_excluded(self, store, service, user_id, now, vfv):
        store.holdings.append(Holding(id="hold-0", account_id="acct-standalone-1", security=vfv, quantity=0))
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert "hold-0" not in {h.id for h in summary.holdings}

    @pytest.mark.asyncio
    async def test_missing_price(self, store, service, user_id, now):
        store.prices = [p for p in store.prices if p.security_id != "sec-3"]
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert summary.holdings[-1].symbol == "XIC.TO"
        assert summary.holdings[-1].market_value is None
        assert summary.total_holdings_value == Decimal("8000.00")
        assert summary.total_cost_basis == Decimal("9250.00")
        assert "XIC.TO" not in {item.symbol for item in summary.allocation}

    @pytest.mark.asyncio
    async def test_no_accounts(self, config, user_id, now):
        service = PortfolioService(InMemoryPortfolioStore(), config=config)
        summary = await service.get_portfolio_summary(user_id, now=now)
        assert summary.total_portfolio_value == Decimal("0.00")
        assert summary.holdings == []
        assert summary.allocation == []
        assert summary.total_gain_loss_percent == 0.0


class TestNetInvested:
    @pytest.mark.asyncio
    async def test_cash_plus_buys_minus_sells_and_income(self, config, user_id, now, make_tx, xic):
        account = Account(
            id="solo", user_id=user_id, name="Solo", currency_code="CAD", opening_balance=500, current_balance=500
        )
        store = InMemoryPortfolioStore(
            accounts=[account],
            investment_transactions=[
                make_tx("1", "solo", xic, InvestmentAction.BUY, 70, 2000, date(2024, 1, 2)),
                make_tx("2", "solo", xic, InvestmentAction.SELL, 10, 300, date(2024, 3, 2)),
                make_tx("3", "solo", xic, InvestmentAction.DIVIDEND, None, 50, date(2024, 6, 2)),
            ],
        )
        summary = await PortfolioService(store, config=config).get_portfolio_summary(user_id, now=now)
        assert summary.holdings_by_account[0].net_invested == Decimal("2150.00")
        assert summary.total_net_invested == Decimal("2150.00")

    @pytest.mark.asyncio
    async def test_returns_reported_to_four_places(self, config, user_id, now, make_tx, xic):
        account = Account(
            id="solo", user_id=user_id, name="Solo", currency_code="CAD", opening_balance=700, current_balance=700
        )
        store = InMemoryPortfolioStore(
            accounts=[account],
            investment_transactions=[make_tx("1", "solo", xic, InvestmentAction.BUY, 3, 2000, date(2023, 2, 17))],
        )
        summary = await PortfolioService(store, config=config).get_portfolio_summary(user_id, now=now)
        assert summary.cagr is not None
        assert summary.cagr == round(summary.cagr, 4)
        assert summary.total_gain_loss_percent == round(summary.total_gain_loss_percent, 4)


class TestAccountFilter:
    @pytest.mark.asyncio
    async def test_brokerage_pulls_in_linked_cash(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, ["acct-brokerage-1"], now=now)
        assert [g.account_id for g in summary.holdings_by_account] == ["acct-brokerage-1"]
        assert summary.total_cash_value == Decimal("5000.00")
        assert summary.total_holdings_value == Decimal("8000.00")

    @pytest.mark.asyncio
    async def test_cash_pulls_in_linked_brokerage(self, service, user_id):
        accounts = await service.resolve_accounts(user_id, ["acct-cash-1"])
        assert {a.id for a in accounts} == {"acct-cash-1", "acct-brokerage-1"}

    @pytest.mark.asyncio
    async def test_standalone_alone(self, service, user_id, now):
        summary = await service.get_portfolio_summary(user_id, ["acct-standalone-1"], now=now)
        assert summary.total_portfolio_value == Decimal("5500.00")

    @pytest.mark.asyncio
    async def test_other_users_accounts_ignored(self, service, now):
        summary = await service.get_portfolio_summary("intruder", ["acct-brokerage-1"], now=now)
        assert summary.holdings_by_account == []


class TestDefaultCurrency:
    @pytest.mark.asyncio
    async def test_user_preference(self, service, user_id):
        assert await service.get_default_currency(user_id) == "CAD"

    @pytest.mark.asyncio
    async def test_falls_back_to_config(self, config):
        service = PortfolioService(InMemoryPortfolioStore(), config=config)
        assert await service.get_default_currency("nobody") == "CAD"

    @pytest.mark.asyncio
    async def test_configured_fallback(self, config):
        config.set("reporting.default_currency", "usd")
        service = PortfolioService(InMemoryPortfolioStore(), config=config)
        assert await service.get_default_currency("nobody") == "USD"


class TestOtherReports:
    @pytest.mark.asyncio
    async def test_asset_allocation(self, service, user_id, now):
        result = await service.get_asset_allocation(user_id, now=now)
        assert result.total_value == Decimal("18500.00")
        assert len(result.allocation) == 4

    @pytest.mark.asyncio
    async def test_top_movers_uses_configured_limit(self, store, config, user_id, make_price):
        store.prices.extend(
            [
                make_price("sec-1", date(2024, 12, 30), 190),
                make_price("sec-2", date(2024, 12, 30), 99),
                make_price("sec-3", date(2024, 12, 30), 30),
            ]
        )
        config.set("movers.limit", 2)
        movers = await PortfolioService(store, config=config).get_top_movers(user_id)
        assert [m.symbol for m in movers] == ["XIC.TO", "AAPL"]


def test_rate_provider_required(config):
    with pytest.raises(TypeError):
        PortfolioService(object(), config=config)
