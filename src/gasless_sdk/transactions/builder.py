"""Batch building for sponsored transfers."""

from typing import List

from ..core.config import GaslessConfig
from ..core.types import Call, CallBatch, FeeQuote, TransferRequest
from ..ledger import abi


def build_batch(
    request: TransferRequest,
    fee_quote: FeeQuote,
    is_free: bool,
    token: str,
    counter: str,
    fee_receiver: str
) -> CallBatch:
    """
    Build the ordered calls for one sponsored transfer.

    Paid transfers pay the fee first, then the principal; free transfers
    skip the fee call. The counter increment is always last so the tier
    classifier's count stays in step with completed transfers.

    Args:
        request: Validated transfer request
        fee_quote: Fee quote for the transfer
        is_free: Whether the tier decision made this transfer free
        token: Token contract address
        counter: Accounting contract address
        fee_receiver: Account collecting the service fee

    Returns:
        Tuple of calls to execute atomically
    """
    calls: List[Call] = []

    if not is_free:
        calls.append(Call(target=token, data=abi.encode_transfer(fee_receiver, fee_quote.fee)))

    calls.append(Call(target=token, data=abi.encode_transfer(request.recipient, request.amount)))
    calls.append(Call(target=counter, data=abi.encode_increment()))

    return tuple(calls)


class BatchBuilder:
    """Builds sponsored transfer batches against the configured contracts."""

    def __init__(self, config: GaslessConfig):
        self.config = config

    def build(
        self,
        request: TransferRequest,
        fee_quote: FeeQuote,
        is_free: bool,
        fee_receiver: str
    ) -> CallBatch:
        return build_batch(
            request,
            fee_quote,
            is_free,
            token=self.config.token_address.lower(),
            counter=self.config.counter_address.lower(),
            fee_receiver=fee_receiver
        )
