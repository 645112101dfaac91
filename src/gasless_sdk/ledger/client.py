"""JSON-RPC ledger read client."""

import asyncio
import logging
from typing import Optional, Any

import aiohttp
from aiohttp import ClientTimeout, ClientError
from pydantic import ValidationError as PydanticValidationError

from ..core.config import GaslessConfig
from ..core.types import FeeSchedule, RPCRequest, RPCResponse, TierConfig
from ..core.exceptions import NetworkTimeoutError, PreconditionFailedError
from . import abi

logger = logging.getLogger(__name__)


async def gather_reads(*reads):
    """Run reads concurrently, cancelling the rest as soon as one fails."""
    tasks = [asyncio.ensure_future(read) for read in reads]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class TransientRPCError(Exception):
    """HTTP-level failure worth retrying (rate limit, gateway errors)."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class LedgerClient:
    """Async read-only client for the ledger's JSON-RPC endpoint.

    Reads are side-effect free, so transport failures are retried with
    exponential backoff up to ``config.max_retries`` times.
    """

    def __init__(self, config: GaslessConfig):
        """Initialize the ledger client.

        Args:
            config: SDK configuration containing the RPC URL and timeouts
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self._closed = False
        self._request_id = 0

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

    async def _make_rpc_call(self, method: str, params: list) -> Any:
        """Make a JSON-RPC call with retry logic.

        Args:
            method: RPC method name
            params: RPC parameters

        Returns:
            RPC result data

        Raises:
            PreconditionFailedError: The node answered with an error
            NetworkTimeoutError: Transport failed on every attempt
        """
        if self._closed:
            raise RuntimeError("Client has been closed")

        await self._ensure_session()

        self._request_id += 1
        request = RPCRequest(id=self._request_id, method=method, params=params)

        last_exception = None

        for attempt in range(self.config.max_retries + 1):
            try:
                logger.debug(f"Ledger RPC attempt {attempt + 1}: {method}")

                async with self.session.post(
                    self.config.rpc_url,
                    json=request.model_dump(),
                    timeout=ClientTimeout(total=self.config.request_timeout)
                ) as response:

                    if response.status == 429 or response.status >= 502:
                        raise TransientRPCError(
                            f"HTTP {response.status} from ledger RPC",
                            status_code=response.status
                        )

                    if response.status >= 400:
                        error_text = await response.text()
                        raise PreconditionFailedError(
                            f"Ledger RPC {method} failed with HTTP {response.status}: {error_text}",
                            details={'method': method, 'status_code': response.status}
                        )

                    try:
                        json_data = await response.json()
                        rpc_response = RPCResponse(**json_data)
                    except Exception as e:
                        raise PreconditionFailedError(
                            f"Invalid ledger RPC response for {method}: {e}",
                            details={'method': method}
                        )

                    if rpc_response.error:
                        error = rpc_response.error
                        raise PreconditionFailedError(
                            f"Ledger RPC error {error.get('code', -1)}: {error.get('message', 'Unknown RPC error')}",
                            details={'method': method, 'rpc_error': error}
                        )

                    return rpc_response.result

            except (ClientError, asyncio.TimeoutError, TransientRPCError) as e:
                last_exception = e
                if attempt < self.config.max_retries:
                    delay = self.config.retry_delay * (2 ** attempt)
                    logger.warning(f"Ledger RPC {method} failed, retrying in {delay}s: {e}")
                    await asyncio.sleep(delay)
                    continue
                break

        raise NetworkTimeoutError(
            f"Ledger RPC {method} failed after {self.config.max_retries + 1} attempts: {last_exception!r}",
            timeout_duration=self.config.request_timeout,
            details={'method': method}
        )

    @staticmethod
    def _to_bytes(result: Any, method: str) -> bytes:
        if not isinstance(result, str) or not result.startswith('0x'):
            raise PreconditionFailedError(
                f"Ledger returned non-hex data for {method}: {result!r}",
                details={'method': method}
            )
        try:
            return bytes.fromhex(result[2:])
        except ValueError:
            raise PreconditionFailedError(
                f"Ledger returned malformed hex for {method}: {result!r}",
                details={'method': method}
            )

    async def eth_call(self, to: str, data: bytes) -> bytes:
        """Execute a read-only contract call against the latest block."""
        result = await self._make_rpc_call(
            'eth_call',
            [{'to': to, 'data': '0x' + data.hex()}, 'latest']
        )
        return self._to_bytes(result, 'eth_call')

    async def _call_uint(self, to: str, signature: str, args: tuple = ()) -> int:
        raw = await self.eth_call(to, abi.encode_call(signature, args))
        try:
            return abi.decode_uint256(raw)
        except Exception as e:
            raise PreconditionFailedError(
                f"Could not decode {signature} from {to}: {e}",
                details={'contract': to, 'function': signature}
            )

    async def get_balance(self, account: str, token: str) -> int:
        """Token balance of ``account`` in minor units."""
        return await self._call_uint(token, abi.BALANCE_OF, (account,))

    async def get_counter(self, account: str) -> int:
        """Completed sponsored transfers recorded for ``account``."""
        return await self._call_uint(self.config.counter_address, abi.GET_TRANSACTION_COUNT, (account,))

    async def get_tier_config(self) -> TierConfig:
        """Read the free-tier policy from the accounting contract."""
        counter = self.config.counter_address
        free_limit, free_ratio = await gather_reads(
            self._call_uint(counter, abi.FREE_TIER_LIMIT),
            self._call_uint(counter, abi.FREE_TIER_RATIO),
        )
        try:
            return TierConfig(free_limit=free_limit, free_ratio=free_ratio)
        except PydanticValidationError as e:
            raise PreconditionFailedError(
                f"Accounting contract returned an invalid tier configuration: {e}",
                details={'free_limit': free_limit, 'free_ratio': free_ratio}
            )

    async def get_fee_schedule(self) -> FeeSchedule:
        """Read the service fee parameters from the accounting contract."""
        counter = self.config.counter_address
        basis_points, min_fee, max_fee, receiver_raw = await gather_reads(
            self._call_uint(counter, abi.SERVICE_FEE_BASIS_POINTS),
            self._call_uint(counter, abi.MIN_SERVICE_FEE),
            self._call_uint(counter, abi.MAX_SERVICE_FEE),
            self.eth_call(counter, abi.encode_call(abi.FEE_RECEIVER)),
        )
        try:
            return FeeSchedule(
                basis_points=basis_points,
                min_fee=min_fee,
                max_fee=max_fee,
                fee_receiver=abi.decode_address(receiver_raw)
            )
        except Exception as e:
            raise PreconditionFailedError(
                f"Accounting contract returned an invalid fee schedule: {e}",
                details={'contract': counter}
            )

    async def get_code(self, address: str) -> bytes:
        """Deployed code at ``address`` (empty for plain accounts)."""
        result = await self._make_rpc_call('eth_getCode', [address, 'latest'])
        return self._to_bytes(result, 'eth_getCode')

    async def get_account_delegation_state(self, account: str, delegate_contract: str) -> bool:
        """Whether ``account`` already delegates to ``delegate_contract``."""
        code = await self.get_code(account)
        return abi.delegated_to(code) == delegate_contract.lower()

    async def get_sequence_number(self, account: str) -> int:
        """Transaction count (nonce) of ``account``."""
        result = await self._make_rpc_call('eth_getTransactionCount', [account, 'latest'])
        try:
            return int(result, 16)
        except (TypeError, ValueError):
            raise PreconditionFailedError(
                f"Ledger returned an invalid transaction count: {result!r}",
                details={'account': account}
            )
