"""Configuration management for the Gasless SDK."""

import os
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationMissingError


@dataclass(frozen=True)
class GaslessConfig:
    """Configuration for sponsored transfers."""
    rpc_url: str
    bundler_url: str
    token_address: str
    counter_address: str
    delegate_contract: str
    sponsor_policy_id: Optional[str] = None
    chain_id: int = 11155111
    token_symbol: str = "PYUSD"
    token_decimals: int = 6
    explorer_url: str = "https://eth-sepolia.blockscout.com"
    request_timeout: float = 30.0
    signer_timeout: float = 120.0
    max_retries: int = 2
    retry_delay: float = 0.5
    serialize_per_sender: bool = True

    @classmethod
    def from_env(cls) -> 'GaslessConfig':
        """Load configuration from environment variables."""
        return cls(
            rpc_url=os.environ.get('GASLESS_RPC_URL', 'https://sepolia.drpc.org'),
            bundler_url=os.environ.get('GASLESS_BUNDLER_URL', ''),
            token_address=os.environ.get('GASLESS_TOKEN_ADDRESS', '0xcac524bca292aaade2df8a05cc58f0a65b1b3bb9'),
            counter_address=os.environ.get('GASLESS_COUNTER_ADDRESS', ''),
            delegate_contract=os.environ.get('GASLESS_DELEGATE_CONTRACT', '0xe6cae83bde06e4c305530e199d7217f42808555b'),
            sponsor_policy_id=os.environ.get('GASLESS_SPONSOR_POLICY_ID') or None,
            chain_id=int(os.environ.get('GASLESS_CHAIN_ID', '11155111')),
            token_symbol=os.environ.get('GASLESS_TOKEN_SYMBOL', 'PYUSD'),
            token_decimals=int(os.environ.get('GASLESS_TOKEN_DECIMALS', '6')),
            explorer_url=os.environ.get('GASLESS_EXPLORER_URL', 'https://eth-sepolia.blockscout.com'),
            request_timeout=float(os.environ.get('GASLESS_REQUEST_TIMEOUT', '30.0')),
            signer_timeout=float(os.environ.get('GASLESS_SIGNER_TIMEOUT', '120.0')),
            max_retries=int(os.environ.get('GASLESS_MAX_RETRIES', '2')),
            retry_delay=float(os.environ.get('GASLESS_RETRY_DELAY', '0.5')),
            serialize_per_sender=os.environ.get('GASLESS_SERIALIZE_PER_SENDER', 'true').lower() not in ('0', 'false', 'no')
        )

    @classmethod
    def sepolia(
        cls,
        bundler_url: str,
        counter_address: str,
        sponsor_policy_id: Optional[str] = None
    ) -> 'GaslessConfig':
        """Sepolia testnet configuration with the public PYUSD deployment."""
        return cls(
            rpc_url="https://sepolia.drpc.org",
            bundler_url=bundler_url,
            token_address="0xcac524bca292aaade2df8a05cc58f0a65b1b3bb9",
            counter_address=counter_address,
            delegate_contract="0xe6cae83bde06e4c305530e199d7217f42808555b",
            sponsor_policy_id=sponsor_policy_id,
            chain_id=11155111
        )

    def validate(self) -> None:
        """Raise ConfigurationMissingError for the first required setting that is empty."""
        required = [
            ('sponsor_policy_id', self.sponsor_policy_id),
            ('rpc_url', self.rpc_url),
            ('bundler_url', self.bundler_url),
            ('token_address', self.token_address),
            ('counter_address', self.counter_address),
            ('delegate_contract', self.delegate_contract),
        ]
        for name, value in required:
            if not value or not str(value).strip():
                raise ConfigurationMissingError(
                    f"Required setting '{name}' is not configured",
                    setting=name
                )
