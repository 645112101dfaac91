"""Balance precondition checks."""

import logging

from .exceptions import InsufficientBalanceError

logger = logging.getLogger(__name__)


def ensure_sufficient(account_balance: int, amount_needed: int) -> None:
    """
    Raise InsufficientBalanceError unless the balance covers ``amount_needed``.

    ``amount_needed`` must already include the fee for paid transfers.
    """
    if account_balance < amount_needed:
        raise InsufficientBalanceError(required=amount_needed, available=account_balance)


async def check_balance(ledger, account: str, token: str, amount_needed: int) -> int:
    """Read the token balance of ``account`` and check it covers ``amount_needed``.

    Read errors propagate unchanged; they are never treated as sufficient.

    Returns:
        The balance that was read
    """
    balance = await ledger.get_balance(account, token)
    logger.info(f"Balance of {account}: {balance}, needed: {amount_needed}")
    ensure_sufficient(balance, amount_needed)
    return balance
