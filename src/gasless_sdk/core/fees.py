"""Service fee policy for paid transfers."""

from .types import FeeQuote, FeeSchedule

BASIS_POINTS_DENOMINATOR = 10000


def quote(amount: int, basis_points: int, min_fee: int, max_fee: int) -> FeeQuote:
    """
    Quote the service fee for a transfer.

    The raw fee is ``amount * basis_points / 10000`` truncated, then clamped
    to ``[min_fee, max_fee]``. For tiny amounts the floor can exceed the
    principal.

    Args:
        amount: Principal in token minor units
        basis_points: Fee rate in hundredths of a percent
        min_fee: Fee floor in minor units
        max_fee: Fee ceiling in minor units

    Returns:
        FeeQuote with principal, fee and total debited
    """
    raw = amount * basis_points // BASIS_POINTS_DENOMINATOR
    fee = min(max(raw, min_fee), max_fee)
    return FeeQuote(principal=amount, fee=fee)


def quote_with_schedule(amount: int, schedule: FeeSchedule) -> FeeQuote:
    """Quote using the parameters read from the accounting contract."""
    return quote(amount, schedule.basis_points, schedule.min_fee, schedule.max_fee)


def zero_fee(amount: int) -> FeeQuote:
    """Quote for a free-tier transfer."""
    return FeeQuote(principal=amount, fee=0)
