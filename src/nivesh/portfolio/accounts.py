"""Investment account categorisation."""

from dataclasses import dataclass, field

from loguru import logger

from .models import Account, AccountSubType


@dataclass
class CategorisedAccounts:
    """Investment accounts split by role.

    ``holdings_account_ids`` lists the accounts that can carry positions:
    brokerage accounts first, then standalone accounts.
    """

    cash_accounts: list[Account] = field(default_factory=list)
    brokerage_accounts: list[Account] = field(default_factory=list)
    standalone_accounts: list[Account] = field(default_factory=list)
    holdings_account_ids: list[str] = field(default_factory=list)

    @property
    def cash_bearing_accounts(self) -> list[Account]:
        """Accounts whose own balance is cash: cash accounts and standalone accounts."""
        return self.cash_accounts + self.standalone_accounts

    def linked_cash_account(self, brokerage: Account) -> Account | None:
        """The cash account paired with ``brokerage``, matched from either side of the link."""
        for cash in self.cash_accounts:
            if cash.linked_account_id == brokerage.id or brokerage.linked_account_id == cash.id:
                return cash
        return None


def categorise_accounts(accounts: list[Account]) -> CategorisedAccounts:
    """Split investment accounts into cash, brokerage, and standalone buckets."""
    result = CategorisedAccounts()
    for account in accounts:
        if account.account_sub_type == AccountSubType.INVESTMENT_CASH:
            result.cash_accounts.append(account)
        elif account.account_sub_type == AccountSubType.INVESTMENT_BROKERAGE:
            result.brokerage_accounts.append(account)
        elif account.account_sub_type is None:
            result.standalone_accounts.append(account)

    result.holdings_account_ids = [a.id for a in result.brokerage_accounts] + [
        a.id for a in result.standalone_accounts
    ]
    logger.debug(
        f"Categorised {len(accounts)} accounts: {len(result.cash_accounts)} cash, "
        f"{len(result.brokerage_accounts)} brokerage, {len(result.standalone_accounts)} standalone"
    )
    return result
