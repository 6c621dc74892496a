"""Portfolio valuation and performance engine: holdings, cash, returns, and allocation."""

from .accounts import CategorisedAccounts, categorise_accounts
from .context import CalculationContext
from .currency import CurrencyConverter
from .memory import InMemoryPortfolioStore
from .models import (
    Account,
    AccountHoldings,
    AccountSubType,
    AccountType,
    AllocationItem,
    AssetAllocation,
    CashTransaction,
    ExchangeRate,
    Holding,
    HoldingValuation,
    InvestmentAction,
    InvestmentFlows,
    InvestmentTransaction,
    PortfolioSummary,
    Security,
    SecurityPrice,
    TopMover,
    TransactionStatus,
    UserPreference,
)
from .performance import calculate_cagr, calculate_twr
from .prices import PriceHistory, PriceSeries
from .service import PortfolioService
from .sources import ExchangeRateProvider, PortfolioDataSource

__all__ = [
    "Account",
    "AccountHoldings",
    "AccountSubType",
    "AccountType",
    "AllocationItem",
    "AssetAllocation",
    "CalculationContext",
    "CashTransaction",
    "CategorisedAccounts",
    "CurrencyConverter",
    "ExchangeRate",
    "ExchangeRateProvider",
    "Holding",
    "HoldingValuation",
    "InMemoryPortfolioStore",
    "InvestmentAction",
    "InvestmentFlows",
    "InvestmentTransaction",
    "PortfolioDataSource",
    "PortfolioService",
    "PortfolioSummary",
    "PriceHistory",
    "PriceSeries",
    "Security",
    "SecurityPrice",
    "TopMover",
    "TransactionStatus",
    "UserPreference",
    "calculate_cagr",
    "calculate_twr",
    "categorise_accounts",
]
