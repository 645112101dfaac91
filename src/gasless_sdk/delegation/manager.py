"""Account delegation state and authorization handling."""

import asyncio
import logging
from typing import Optional

from ..core.config import GaslessConfig
from ..core.exceptions import (
    AuthorizationUnavailableError,
    ConfigurationMissingError,
    GaslessSDKError,
    NetworkTimeoutError,
)
from ..core.types import (
    AuthorizationRequest,
    DelegationAuthorization,
    DelegationInstalled,
    DelegationNotInstalled,
    DelegationState,
)
from .signers import Signer

logger = logging.getLogger(__name__)


class DelegationManager:
    """Decides whether a transfer needs a fresh delegation authorization.

    An account is either already delegated to the configured contract, in
    which case submissions carry no authorization, or it is not, in which
    case an authorization for the account's current nonce is signed and
    attached. The state is resolved once per transfer.
    """

    def __init__(self, config: GaslessConfig, ledger, signer: Signer):
        self.config = config
        self.ledger = ledger
        self.signer = signer
        self._delegate_verified = False

    async def resolve_state(self, account: str) -> DelegationState:
        """Probe the account's code and, if needed, its current nonce."""
        delegate = self.config.delegate_contract.lower()
        installed = await self.ledger.get_account_delegation_state(account, delegate)
        if installed:
            logger.info(f"Delegation to {delegate} already installed for {account}")
            return DelegationInstalled(delegate_contract=delegate)

        nonce = await self.ledger.get_sequence_number(account)
        logger.info(f"No delegation installed for {account}, authorization needed at nonce {nonce}")
        return DelegationNotInstalled(delegate_contract=delegate, nonce=nonce)

    async def _verify_delegate_deployed(self) -> None:
        if self._delegate_verified:
            return
        code = await self.ledger.get_code(self.config.delegate_contract)
        if not code:
            raise ConfigurationMissingError(
                f"Delegate contract {self.config.delegate_contract} has no code on chain {self.config.chain_id}",
                setting='delegate_contract'
            )
        self._delegate_verified = True

    async def authorize(self, state: DelegationState) -> Optional[DelegationAuthorization]:
        """Return the authorization to attach, or None when already delegated.

        Raises:
            AuthorizationUnavailableError: Signer refused, failed or returned a
                signature for different parameters
            NetworkTimeoutError: Signer did not answer within ``signer_timeout``
            ConfigurationMissingError: Delegate contract is not deployed
        """
        if isinstance(state, DelegationInstalled):
            return None

        await self._verify_delegate_deployed()

        request = AuthorizationRequest(
            delegate_contract=state.delegate_contract,
            chain_id=self.config.chain_id,
            nonce=state.nonce
        )

        logger.info(f"Requesting delegation authorization for nonce {state.nonce}")
        try:
            authorization = await asyncio.wait_for(
                self.signer.sign_delegation_authorization(request),
                timeout=self.config.signer_timeout
            )
        except asyncio.TimeoutError:
            raise NetworkTimeoutError(
                f"Signer did not respond within {self.config.signer_timeout}s",
                timeout_duration=self.config.signer_timeout
            )
        except GaslessSDKError:
            raise
        except Exception as e:
            raise AuthorizationUnavailableError(f"Signer failed: {e}")

        if not authorization.matches(request):
            raise AuthorizationUnavailableError(
                "Signer returned an authorization for different parameters",
                details={
                    'expected_nonce': request.nonce,
                    'received_nonce': authorization.nonce,
                }
            )

        return authorization
