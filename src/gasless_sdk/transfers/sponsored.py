"""Sponsored transfer orchestration."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Tuple, Union

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from ..core.balance import check_balance
from ..core.config import GaslessConfig
from ..core.exceptions import (
    AuthorizationUnavailableError,
    GaslessSDKError,
    InvalidRequestError,
    NetworkTimeoutError,
    PreconditionFailedError,
)
from ..core.fees import quote_with_schedule, zero_fee
from ..core.tiers import classify
from ..core.types import FeeQuote, SubmissionStatus, TierDecision, TransferRequest, TransferResult
from ..core.units import to_minor_units, transaction_link
from ..delegation.manager import DelegationManager
from ..delegation.signers import Signer
from ..ledger.client import LedgerClient, gather_reads
from ..sponsorship.client import SponsorClient
from ..transactions.builder import BatchBuilder

logger = logging.getLogger(__name__)


def build_transfer_request(sender: str, recipient: str, amount: int) -> TransferRequest:
    """Validate raw inputs into a TransferRequest.

    Raises:
        InvalidRequestError: Malformed address or non-positive amount
    """
    try:
        return TransferRequest(sender=sender, recipient=recipient, amount=amount)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first['loc'][0]) if first.get('loc') else None
        raise InvalidRequestError(
            f"Invalid transfer request: {first['msg']}",
            field=field,
            value=first.get('input')
        )


class SponsoredTransfer:
    """Sends token transfers whose network fee is paid by a sponsor.

    Each transfer reads the sender's counter and the tier/fee policy,
    decides whether the transfer is free, checks the balance covers
    amount plus fee, attaches a delegation authorization if the account is
    not yet delegated, and hands one atomic batch to the relayer.

    Nothing is retried here. Errors before submission are safe to retry
    from scratch; once the batch has been handed to the relayer a failure
    or cancellation leaves the outcome unknown and the caller should query
    :meth:`get_submission_status`.
    """

    def __init__(
        self,
        config: GaslessConfig,
        signer: Signer,
        ledger: Optional[LedgerClient] = None,
        sponsor: Optional[SponsorClient] = None
    ):
        """Initialize the orchestrator.

        Args:
            config: SDK configuration
            signer: Signer for delegation authorizations
            ledger: Ledger read client (defaults to a JSON-RPC client)
            sponsor: Relayer client (defaults to a JSON-RPC client)
        """
        self.config = config
        self.signer = signer
        self._owns_ledger = ledger is None
        self._owns_sponsor = sponsor is None
        self.ledger = ledger or LedgerClient(config)
        self.sponsor = sponsor or SponsorClient(config)
        self.delegation = DelegationManager(config, self.ledger, signer)
        self.builder = BatchBuilder(config)
        self._sender_locks: Dict[str, asyncio.Lock] = {}
        self._sender_users: Dict[str, int] = {}

    async def __aenter__(self):
        """Async context manager entry."""
        if self._owns_ledger:
            await self.ledger.__aenter__()
        if self._owns_sponsor:
            await self.sponsor.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_ledger:
            await self.ledger.close()
        if self._owns_sponsor:
            await self.sponsor.close()

    @asynccontextmanager
    async def _sender_slot(self, sender: str):
        if not self.config.serialize_per_sender:
            yield
            return
        lock = self._sender_locks.get(sender)
        if lock is None:
            lock = self._sender_locks[sender] = asyncio.Lock()
        self._sender_users[sender] = self._sender_users.get(sender, 0) + 1
        try:
            async with lock:
                yield
        finally:
            # drop the lock once no transfer holds or awaits it
            self._sender_users[sender] -= 1
            if not self._sender_users[sender]:
                del self._sender_users[sender]
                del self._sender_locks[sender]

    async def get_tier_status(self, account: str) -> Tuple[int, TierDecision]:
        """Current counter of ``account`` and the decision for its next transfer."""
        count, tier_config = await gather_reads(
            self.ledger.get_counter(account),
            self.ledger.get_tier_config(),
        )
        return count, classify(count, tier_config)

    async def quote_transfer(self, sender: str, amount: int) -> Tuple[TierDecision, FeeQuote]:
        """Preview the tier decision and fee for a transfer without signing or submitting."""
        count, tier_config, schedule = await gather_reads(
            self.ledger.get_counter(sender),
            self.ledger.get_tier_config(),
            self.ledger.get_fee_schedule(),
        )
        decision = classify(count, tier_config)
        fee_quote = zero_fee(amount) if decision.is_free else quote_with_schedule(amount, schedule)
        return decision, fee_quote

    async def execute_sponsored_transfer(self, request: TransferRequest) -> TransferResult:
        """Execute one sponsored transfer.

        Args:
            request: Validated transfer request

        Returns:
            TransferResult once the relayer accepted the batch

        Raises:
            ConfigurationMissingError: Required setting absent (no I/O done)
            InvalidRequestError: Request is not a valid TransferRequest, or its
                sender is not the signer's account
            InsufficientBalanceError: Balance below amount plus fee
            PreconditionFailedError: Ledger read failed
            AuthorizationUnavailableError: Signer refused or unreachable
            SimulationFailedError: Batch would revert
            SponsorRejectedError: Sponsor declined
            NetworkTimeoutError: Transport failure or timeout
        """
        self.config.validate()

        if not isinstance(request, TransferRequest):
            raise InvalidRequestError(
                f"Expected a TransferRequest, got {type(request).__name__}",
                value=request
            )

        signer_address = self.signer.address
        if signer_address and signer_address.lower() != request.sender:
            raise InvalidRequestError(
                f"Sender {request.sender} is not the signer's account {signer_address.lower()}",
                field='sender',
                value=request.sender
            )

        async with self._sender_slot(request.sender):
            return await self._execute(request)

    async def _execute(self, request: TransferRequest) -> TransferResult:
        logger.info(f"Starting sponsored transfer: {request.sender} -> {request.recipient}, amount: {request.amount}")

        stage = 'read'
        try:
            count, tier_config, schedule = await gather_reads(
                self.ledger.get_counter(request.sender),
                self.ledger.get_tier_config(),
                self.ledger.get_fee_schedule(),
            )

            decision = classify(count, tier_config)
            if decision.is_free:
                fee_quote = zero_fee(request.amount)
            else:
                fee_quote = quote_with_schedule(request.amount, schedule)
            logger.info(f"Transaction count {count}: {decision.explanation}, fee {fee_quote.fee}")

            await check_balance(
                self.ledger,
                request.sender,
                self.config.token_address,
                fee_quote.total_debited
            )

            state = await self.delegation.resolve_state(request.sender)

            stage = 'sign'
            authorization = await self.delegation.authorize(state)

            stage = 'build'
            batch = self.builder.build(request, fee_quote, decision.is_free, schedule.fee_receiver)

            stage = 'submit'
            handle = await self.sponsor.submit_sponsored_batch(
                request.sender,
                batch,
                authorization,
                self.config.sponsor_policy_id
            )

        except asyncio.CancelledError:
            if stage == 'submit':
                logger.warning(
                    f"Sponsored transfer for {request.sender} cancelled after submission started; "
                    f"outcome unknown, query the relayer before retrying"
                )
            raise

        except Exception as e:
            logger.error(f"Sponsored transfer failed during {stage}: {e}")
            if isinstance(e, GaslessSDKError):
                raise
            raise self._translate_error(e, stage) from e

        logger.info(f"Sponsored transfer accepted: {handle}")

        return TransferResult(
            settlement_handle=handle,
            sender=request.sender,
            recipient=request.recipient,
            amount=request.amount,
            token=self.config.token_symbol,
            was_free=decision.is_free,
            fee=fee_quote.fee,
            explorer_url=transaction_link(self.config.explorer_url, handle)
        )

    def _translate_error(self, error: Exception, stage: str) -> GaslessSDKError:
        """Map a non-SDK exception to the SDK error taxonomy."""
        submitted = stage == 'submit'
        if isinstance(error, (asyncio.TimeoutError, aiohttp.ClientError)):
            return NetworkTimeoutError(
                f"Network failure during {stage}: {error!r}",
                timeout_duration=self.config.request_timeout,
                submitted=submitted
            )
        if stage == 'sign':
            return AuthorizationUnavailableError(f"Authorization failed: {error}")
        if submitted:
            return NetworkTimeoutError(
                f"Unexpected error during submission, outcome unknown: {error!r}",
                submitted=True
            )
        return PreconditionFailedError(f"Unexpected error during {stage}: {error}")

    async def transfer_tokens(
        self,
        recipient: str,
        amount: Union[str, int],
        sender: Optional[str] = None
    ) -> TransferResult:
        """Transfer a human-readable token amount such as ``"1.5"``.

        The sender defaults to the signer's address.
        """
        self.config.validate()
        sender = sender or self.signer.address
        if not sender:
            raise InvalidRequestError("Sender address is required", field='sender')
        minor_units = to_minor_units(amount, self.config.token_decimals)
        request = build_transfer_request(sender, recipient, minor_units)
        return await self.execute_sponsored_transfer(request)

    async def get_submission_status(self, handle: str) -> SubmissionStatus:
        """Query the relayer for the status of a submitted batch."""
        return await self.sponsor.get_submission_status(handle)

    async def wait_for_settlement(
        self,
        handle: str,
        timeout: float = 180.0,
        poll_interval: float = 2.0
    ) -> SubmissionStatus:
        """Wait until the relayer reports the batch as included."""
        return await self.sponsor.wait_for_settlement(handle, timeout, poll_interval)


async def execute_sponsored_transfer(
    config: GaslessConfig,
    signer: Signer,
    request: TransferRequest
) -> TransferResult:
    """Convenience function for one-off sponsored transfers.

    Args:
        config: SDK configuration
        signer: Signer for delegation authorizations
        request: Validated transfer request

    Returns:
        TransferResult once the relayer accepted the batch
    """
    async with SponsoredTransfer(config, signer) as transfer_client:
        return await transfer_client.execute_sponsored_transfer(request)
