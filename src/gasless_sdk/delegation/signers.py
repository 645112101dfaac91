"""Signer capability for delegation authorizations.

Wallet providers expose authorization signing in different shapes. Each
provider gets one adapter implementing :class:`Signer`, picked by the
caller; the rest of the SDK only ever sees the normalized interface.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from eth_account import Account
from web3 import Web3

from ..core.exceptions import AuthorizationUnavailableError
from ..core.types import AuthorizationRequest, DelegationAuthorization

logger = logging.getLogger(__name__)

SignatureCallback = Callable[[Dict[str, Any]], Awaitable[Any]]


class Signer(ABC):
    """Produces signed delegation authorizations for one account."""

    address: Optional[str] = None

    @abstractmethod
    async def sign_delegation_authorization(
        self,
        request: AuthorizationRequest
    ) -> DelegationAuthorization:
        """Sign ``request`` or raise AuthorizationUnavailableError."""


def _int_value(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16) if str(value).startswith('0x') else int(value)


def signature_from_parts(r: Union[int, str], s: Union[int, str], y_parity: Union[int, str]) -> str:
    """Pack r, s and y-parity into a 65-byte ``r || s || v`` hex signature."""
    v = _int_value(y_parity)
    if v < 27:
        v += 27
    return (
        '0x'
        + _int_value(r).to_bytes(32, 'big').hex()
        + _int_value(s).to_bytes(32, 'big').hex()
        + v.to_bytes(1, 'big').hex()
    )


class LocalAccountSigner(Signer):
    """Signs with a private key held in process, for scripts and tests."""

    def __init__(self, private_key: str):
        self._account = Account.from_key(private_key)
        self.address = self._account.address.lower()

    async def sign_delegation_authorization(
        self,
        request: AuthorizationRequest
    ) -> DelegationAuthorization:
        try:
            signed = self._account.sign_authorization({
                'chainId': request.chain_id,
                'address': Web3.to_checksum_address(request.delegate_contract),
                'nonce': request.nonce,
            })
        except Exception as e:
            raise AuthorizationUnavailableError(
                f"Local signer could not sign authorization: {e}",
                details={'nonce': request.nonce}
            )

        return DelegationAuthorization(
            delegate_contract=request.delegate_contract,
            chain_id=request.chain_id,
            nonce=request.nonce,
            signature=signature_from_parts(signed.r, signed.s, signed.y_parity)
        )


class CallbackSigner(Signer):
    """Adapts a wallet provider's ``signAuthorization``-style coroutine.

    The callback receives ``{"contractAddress", "chainId", "nonce"}`` and may
    return a hex signature, a mapping with ``signature``, or a mapping with
    ``r``, ``s`` and ``yParity``/``v``. Returning ``None`` means the user
    declined.
    """

    def __init__(self, callback: SignatureCallback, address: Optional[str] = None):
        self._callback = callback
        self.address = address.lower() if address else None

    async def sign_delegation_authorization(
        self,
        request: AuthorizationRequest
    ) -> DelegationAuthorization:
        payload = {
            'contractAddress': request.delegate_contract,
            'chainId': request.chain_id,
            'nonce': request.nonce,
        }

        try:
            result = await self._callback(payload)
        except AuthorizationUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Wallet provider failed to sign authorization: {e}")
            raise AuthorizationUnavailableError(
                f"Wallet provider failed to sign authorization: {e}",
                details={'nonce': request.nonce}
            )

        if result is None:
            raise AuthorizationUnavailableError("User declined the delegation authorization")

        try:
            signature = self._normalize_signature(result)
            return DelegationAuthorization(
                delegate_contract=request.delegate_contract,
                chain_id=request.chain_id,
                nonce=request.nonce,
                signature=signature
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthorizationUnavailableError(
                f"Wallet provider returned an unusable authorization: {e}",
                details={'result': repr(result)}
            )

    @staticmethod
    def _normalize_signature(result: Any) -> str:
        if isinstance(result, (bytes, bytearray)):
            return '0x' + bytes(result).hex()
        if isinstance(result, str):
            return result
        if isinstance(result, dict):
            if 'signature' in result:
                return CallbackSigner._normalize_signature(result['signature'])
            y_parity = result['yParity'] if 'yParity' in result else result['v']
            return signature_from_parts(result['r'], result['s'], y_parity)
        raise TypeError(f"Unsupported authorization shape: {type(result).__name__}")
