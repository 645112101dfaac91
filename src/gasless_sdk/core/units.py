"""Token amount conversion and block explorer links."""

from decimal import Decimal, InvalidOperation
from typing import Union

from .exceptions import InvalidRequestError


def to_minor_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human-readable token amount to integer minor units.

    Args:
        amount: Amount such as ``"1.5"``
        decimals: Token decimals (6 for PYUSD)

    Returns:
        Amount in minor units

    Raises:
        InvalidRequestError: Non-numeric, negative or over-precise amount
    """
    if isinstance(amount, float):
        raise InvalidRequestError("Pass amounts as strings, not floats", field='amount', value=amount)
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidRequestError(f"Invalid amount: {amount}", field='amount', value=amount)

    if not value.is_finite() or value < 0:
        raise InvalidRequestError(f"Invalid amount: {amount}", field='amount', value=amount)

    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidRequestError(
            f"Amount {amount} has more than {decimals} decimal places",
            field='amount',
            value=amount
        )
    return int(scaled)


def from_minor_units(amount: int, decimals: int) -> Decimal:
    """Convert integer minor units back to a Decimal token amount."""
    return Decimal(amount).scaleb(-decimals).normalize()


def explorer_link(explorer_url: str, kind: str, value: str) -> str:
    """Build an explorer URL for a transaction (``tx``) or an ``address``."""
    if kind not in ('tx', 'address'):
        raise ValueError(f"Invalid explorer link type: {kind}")
    return f"{explorer_url.rstrip('/')}/{kind}/{value}"


def transaction_link(explorer_url: str, tx_hash: str) -> str:
    return explorer_link(explorer_url, 'tx', tx_hash)


def address_link(explorer_url: str, address: str) -> str:
    return explorer_link(explorer_url, 'address', address)
