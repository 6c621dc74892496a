"""Tests for nivesh.portfolio.grouping."""

from decimal import Decimal

from nivesh.portfolio import InvestmentFlows, categorise_accounts
from nivesh.portfolio.grouping import build_holdings_by_account, display_name
from nivesh.portfolio.holdings import value_holding


def test_display_name_strips_brokerage_suffix(brokerage_account, standalone_account):
    assert display_name(brokerage_account) == "TFSA"
    assert display_name(standalone_account) == "Wealthsimple"


class TestBuildHoldingsByAccount:
    def _valuations(self, vfv_holding, xic_holding):
        return [
            value_holding(vfv_holding, Decimal("100"), "CAD"),
            value_holding(xic_holding, Decimal("35"), "CAD"),
        ]

    def test_brokerage_uses_linked_cash(
        self, brokerage_account, cash_account, standalone_account, vfv_holding, xic_holding
    ):
        categorised = categorise_accounts([brokerage_account, cash_account, standalone_account])
        balances = {"acct-cash-1": Decimal("500"), "acct-standalone-1": Decimal("2000")}
        groups = build_holdings_by_account(categorised, self._valuations(vfv_holding, xic_holding), balances, {})

        brokerage = next(g for g in groups if g.account_id == "acct-brokerage-1")
        assert brokerage.account_name == "TFSA"
        assert brokerage.cash_account_id == "acct-cash-1"
        assert brokerage.cash_balance == Decimal("500")
        assert brokerage.total_market_value == Decimal("5000")
        assert brokerage.total_gain_loss == Decimal("1000")

        standalone = next(g for g in groups if g.account_id == "acct-standalone-1")
        assert standalone.cash_account_id == "acct-standalone-1"
        assert standalone.cash_balance == Decimal("2000")

    def test_sorted_by_market_value(
        self, brokerage_account, cash_account, standalone_account, vfv_holding, xic_holding
    ):
        categorised = categorise_accounts([standalone_account, cash_account, brokerage_account])
        groups = build_holdings_by_account(categorised, self._valuations(vfv_holding, xic_holding), {}, {})
        assert [g.account_id for g in groups] == ["acct-brokerage-1", "acct-standalone-1"]

    def test_unlinked_brokerage_has_zero_cash(self, brokerage_account):
        categorised = categorise_accounts([brokerage_account])
        groups = build_holdings_by_account(categorised, [], {}, {})
        assert groups[0].cash_account_id is None
        assert groups[0].cash_balance == Decimal("0")
        assert groups[0].total_gain_loss_percent == 0.0

    def test_net_invested(self, standalone_account):
        categorised = categorise_accounts([standalone_account])
        flows = {"acct-standalone-1": InvestmentFlows(buys=Decimal("2000"), sells=Decimal("300"), income=Decimal("50"))}
        groups = build_holdings_by_account(categorised, [], {"acct-standalone-1": Decimal("500")}, flows)
        assert groups[0].net_invested == Decimal("2150.00")
