"""Utility for resolving account names to IDs."""

from typing import Iterable, Optional

from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import Account
from pocketledger.domain.errors import NotFoundError


def find_account_by_name(accounts: Iterable[Account], name: str) -> Optional[Account]:
    """Find an account by exact name, ignoring case and surrounding whitespace."""
    wanted = name.strip().lower()
    for account in accounts:
        if account.name.lower() == wanted:
            return account
    return None


def resolve_account(account_service: AccountService, owner_id: int, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        owner_id: Owner whose accounts are searched
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int):
        if account_service.get_account(owner_id, account) is None:
            raise NotFoundError(f"Account ID {account} not found")
        return account

    # Try to parse as integer (handles string IDs like "1")
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None
    if account_id is not None:
        if account_service.get_account(owner_id, account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    match = find_account_by_name(account_service.list_accounts(owner_id), account)
    if match is None:
        raise NotFoundError(f"Account '{account}' not found")
    return match.id
