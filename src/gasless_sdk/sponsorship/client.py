"""Sponsor/bundler relayer client."""

import asyncio
import logging
from typing import Optional, Any, Dict

import aiohttp
from aiohttp import ClientTimeout, ClientError, ClientConnectorError

from ..core.config import GaslessConfig
from ..core.types import (
    CallBatch,
    DelegationAuthorization,
    RPCRequest,
    RPCResponse,
    SubmissionStatus,
)
from ..core.exceptions import (
    ConfigurationMissingError,
    NetworkTimeoutError,
    SimulationFailedError,
    SponsorRejectedError,
)

logger = logging.getLogger(__name__)

# ERC-7769 bundler error codes that mean the batch itself would revert
SIMULATION_ERROR_CODES = {-32500, -32502, -32521}
# Codes where the paymaster or sponsor declined
SPONSOR_ERROR_CODES = {-32501, -32504}


class SponsorClient:
    """Async JSON-RPC client for a relayer that pays for and submits batches.

    The relayer estimates fees, pays them under a sponsorship policy and
    returns a handle once the batch is accepted into the pending pool.
    Acceptance is not finality. Submissions are never retried here.
    """

    def __init__(self, config: GaslessConfig):
        """Initialize the sponsor client.

        Args:
            config: SDK configuration containing the bundler URL and chain id
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self._closed = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self):
        """Ensure aiohttp session is created."""
        if self.session is None or self.session.closed:
            timeout = ClientTimeout(total=self.config.request_timeout)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    'Content-Type': 'application/json',
                    'User-Agent': 'Gasless-Python-SDK/0.1.0'
                }
            )

    async def close(self):
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self._closed = True

    async def _make_rpc_call(self, method: str, params: list, submitting: bool = False) -> Any:
        """Make a single JSON-RPC call to the relayer.

        Args:
            method: RPC method name
            params: RPC parameters
            submitting: Whether this call hands a batch to the relayer, which
                makes transport failures an unknown outcome

        Raises:
            SimulationFailedError: The relayer simulated a revert
            SponsorRejectedError: The relayer declined the request
            NetworkTimeoutError: Transport failed or timed out
        """
        if self._closed:
            raise RuntimeError("Client has been closed")

        await self._ensure_session()

        request = RPCRequest(method=method, params=params)
        logger.debug(f"Relayer RPC call: {method}")

        try:
            async with self.session.post(
                self.config.bundler_url,
                json=request.model_dump(),
                timeout=ClientTimeout(total=self.config.request_timeout)
            ) as response:

                if response.status >= 400:
                    error_text = await response.text()
                    if response.status >= 500:
                        raise NetworkTimeoutError(
                            f"Relayer HTTP {response.status}: {error_text}",
                            submitted=submitting,
                            details={'method': method, 'status_code': response.status}
                        )
                    raise SponsorRejectedError(
                        f"Relayer HTTP {response.status}: {error_text}",
                        status_code=response.status,
                        details={'method': method}
                    )

                try:
                    json_data = await response.json()
                    rpc_response = RPCResponse(**json_data)
                except Exception as e:
                    raise SponsorRejectedError(
                        f"Invalid relayer response for {method}: {e}",
                        details={'method': method}
                    )

                if rpc_response.error:
                    self._raise_rpc_error(method, rpc_response.error)

                return rpc_response.result

        except ClientConnectorError as e:
            raise NetworkTimeoutError(
                f"Could not connect to relayer: {e}",
                submitted=False,
                details={'method': method}
            )
        except (ClientError, asyncio.TimeoutError) as e:
            if submitting:
                logger.warning(f"Relayer call {method} failed after sending; outcome unknown: {e!r}")
            raise NetworkTimeoutError(
                f"Relayer call {method} failed: {e!r}",
                timeout_duration=self.config.request_timeout,
                submitted=submitting,
                details={'method': method}
            )

    @staticmethod
    def _raise_rpc_error(method: str, error: Dict[str, Any]) -> None:
        error_code = error.get('code', -1)
        error_message = error.get('message', 'Unknown relayer error')
        if error_code in SIMULATION_ERROR_CODES:
            raise SimulationFailedError(
                f"Batch simulation failed: {error_message}",
                code=error_code,
                details={'method': method, 'rpc_error': error}
            )
        if error_code in SPONSOR_ERROR_CODES:
            raise SponsorRejectedError(
                f"Sponsor declined: {error_message}",
                code=error_code,
                details={'method': method, 'rpc_error': error}
            )
        raise SponsorRejectedError(
            f"Relayer error {error_code}: {error_message}",
            code=error_code,
            details={'method': method, 'rpc_error': error}
        )

    async def submit_sponsored_batch(
        self,
        sender: str,
        batch: CallBatch,
        authorization: Optional[DelegationAuthorization],
        sponsor_policy_id: str
    ) -> str:
        """Hand a batch to the relayer for sponsored execution.

        Args:
            sender: Delegated account executing the batch
            batch: Ordered calls, executed atomically
            authorization: Delegation authorization, or None if already delegated
            sponsor_policy_id: Sponsorship policy paying the network fee

        Returns:
            Settlement handle for status queries

        Raises:
            ConfigurationMissingError: No sponsorship policy configured
            SimulationFailedError: The batch would revert
            SponsorRejectedError: The sponsor declined
            NetworkTimeoutError: Transport failure; outcome may be unknown
        """
        if not sponsor_policy_id:
            raise ConfigurationMissingError(
                "A sponsorship policy id is required to submit batches",
                setting='sponsor_policy_id'
            )
        if not batch:
            raise ValueError("Cannot submit an empty batch")

        params = {
            'sender': sender,
            'chainId': hex(self.config.chain_id),
            'calls': [call.to_rpc() for call in batch],
            'authorization': authorization.to_rpc() if authorization else None,
            'context': {'sponsorshipPolicyId': sponsor_policy_id},
        }

        logger.info(
            f"Submitting sponsored batch of {len(batch)} calls for {sender} "
            f"({'with' if authorization else 'without'} authorization)"
        )
        result = await self._make_rpc_call('sponsor_sendBatch', [params], submitting=True)

        if not isinstance(result, str) or not result:
            raise SponsorRejectedError(
                f"Relayer returned an invalid settlement handle: {result!r}",
                details={'result': result}
            )

        logger.info(f"Batch accepted by relayer: {result}")
        return result

    async def get_submission_status(self, handle: str) -> SubmissionStatus:
        """Query whether a submitted batch has been included on chain."""
        result = await self._make_rpc_call('sponsor_getBatchReceipt', [handle])
        if result is None:
            return SubmissionStatus(handle=handle, included=False)
        if not isinstance(result, dict):
            raise SponsorRejectedError(
                f"Relayer returned an invalid receipt: {result!r}",
                details={'handle': handle}
            )

        receipt = result.get('receipt') or {}
        return SubmissionStatus(
            handle=handle,
            included=True,
            success=result.get('success'),
            transaction_hash=receipt.get('transactionHash') or result.get('transactionHash')
        )

    async def wait_for_settlement(
        self,
        handle: str,
        timeout: float = 180.0,
        poll_interval: float = 2.0
    ) -> SubmissionStatus:
        """Poll until the batch is included or ``timeout`` elapses."""
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        waited = 0.0
        while waited < timeout:
            status = await self.get_submission_status(handle)
            if status.included:
                return status
            await asyncio.sleep(poll_interval)
            waited += poll_interval
        raise NetworkTimeoutError(
            f"Batch {handle} not included within {timeout}s",
            timeout_duration=timeout,
            submitted=True,
            details={'handle': handle}
        )
