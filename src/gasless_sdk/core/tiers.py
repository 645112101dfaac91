"""Free/paid tier classification from the per-account transaction counter."""

from .types import TierConfig, TierDecision


def classify(count: int, cfg: TierConfig) -> TierDecision:
    """
    Classify the transfer about to be submitted.

    ``count`` is the sender's counter before this transfer increments it.
    The first ``free_limit`` transfers are free. After that every
    ``free_ratio``-th transfer is free, counting from the end of the
    initial grant, so the transfer landing exactly on a multiple is the
    free one.

    Args:
        count: Current (not yet incremented) transaction count
        cfg: Tier configuration read from the ledger

    Returns:
        TierDecision for this transfer
    """
    if count < cfg.free_limit:
        return TierDecision(
            is_free=True,
            free_remaining=cfg.free_limit - count,
            next_free_in=1
        )

    position = (count - cfg.free_limit + 1) % cfg.free_ratio
    if position == 0:
        return TierDecision(is_free=True, free_remaining=0, next_free_in=cfg.free_ratio)

    return TierDecision(
        is_free=False,
        free_remaining=0,
        next_free_in=cfg.free_ratio - position
    )
