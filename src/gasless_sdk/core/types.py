"""Core type definitions for the Gasless SDK."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from web3 import Web3


def normalize_address(value: Any) -> str:
    """Return a lowercase 0x address or raise ValueError."""
    if not isinstance(value, str) or not value.startswith('0x') or len(value) != 42:
        raise ValueError(f'Invalid Ethereum address: {value}')
    if not Web3.is_address(value):
        raise ValueError(f'Invalid Ethereum address: {value}')
    body = value[2:]
    if body != body.lower() and body != body.upper() and not Web3.is_checksum_address(value):
        raise ValueError(f'Invalid address checksum: {value}')
    return value.lower()


class TierConfig(BaseModel):
    """Free-tier policy parameters of the accounting contract."""
    model_config = ConfigDict(frozen=True)

    free_limit: int = Field(ge=0)
    free_ratio: int = Field(ge=1)


class FeeSchedule(BaseModel):
    """Service fee parameters of the accounting contract."""
    model_config = ConfigDict(frozen=True)

    basis_points: int = Field(ge=0)
    min_fee: int = Field(ge=0)
    max_fee: int = Field(ge=0)
    fee_receiver: str

    @field_validator('fee_receiver')
    @classmethod
    def validate_fee_receiver(cls, v):
        return normalize_address(v)

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.max_fee < self.min_fee:
            raise ValueError(f'max_fee {self.max_fee} is below min_fee {self.min_fee}')
        return self


class TierDecision(BaseModel):
    """Free/paid classification of the transfer about to be submitted."""
    model_config = ConfigDict(frozen=True)

    is_free: bool
    free_remaining: int = Field(ge=0)
    next_free_in: int = Field(ge=1)

    @property
    def explanation(self) -> str:
        if self.is_free and self.free_remaining > 0:
            return f"Free tier: {self.free_remaining} free transactions remaining"
        if self.is_free:
            return f"This transaction is free; next free transaction in {self.next_free_in}"
        return f"Service fee applies; next free transaction in {self.next_free_in}"


class FeeQuote(BaseModel):
    """Principal and fee debited from the sender, in minor units."""
    model_config = ConfigDict(frozen=True)

    principal: int = Field(ge=0)
    fee: int = Field(ge=0)

    @property
    def total_debited(self) -> int:
        return self.principal + self.fee


class AuthorizationRequest(BaseModel):
    """Payload a signer is asked to sign to install the account delegation."""
    model_config = ConfigDict(frozen=True)

    delegate_contract: str
    chain_id: int = Field(ge=1)
    nonce: int = Field(ge=0)

    @field_validator('delegate_contract')
    @classmethod
    def validate_delegate(cls, v):
        return normalize_address(v)


class DelegationAuthorization(BaseModel):
    """Signed account-delegation authorization, single use per (account, nonce)."""
    model_config = ConfigDict(frozen=True)

    delegate_contract: str
    chain_id: int = Field(ge=1)
    nonce: int = Field(ge=0)
    signature: str

    @field_validator('delegate_contract')
    @classmethod
    def validate_delegate(cls, v):
        return normalize_address(v)

    @field_validator('signature')
    @classmethod
    def validate_signature(cls, v):
        if not isinstance(v, str) or not v.startswith('0x') or len(v) != 132:
            raise ValueError('Signature must be 65 bytes of 0x-prefixed hex')
        try:
            int(v, 16)
        except ValueError:
            raise ValueError(f'Signature is not valid hex: {v}')
        return v.lower()

    def matches(self, request: AuthorizationRequest) -> bool:
        return (
            self.delegate_contract == request.delegate_contract
            and self.chain_id == request.chain_id
            and self.nonce == request.nonce
        )

    def to_rpc(self) -> Dict[str, Any]:
        """Split the r || s || v signature into the relayer's authorization shape."""
        r = '0x' + self.signature[2:66]
        s = '0x' + self.signature[66:130]
        v = int(self.signature[130:132], 16)
        y_parity = v - 27 if v >= 27 else v
        return {
            'address': Web3.to_checksum_address(self.delegate_contract),
            'chainId': hex(self.chain_id),
            'nonce': hex(self.nonce),
            'r': r,
            's': s,
            'yParity': hex(y_parity),
        }


@dataclass(frozen=True)
class DelegationInstalled:
    """The account already delegates to the expected contract."""
    delegate_contract: str


@dataclass(frozen=True)
class DelegationNotInstalled:
    """The account needs a fresh authorization signed at ``nonce``."""
    delegate_contract: str
    nonce: int


DelegationState = Union[DelegationInstalled, DelegationNotInstalled]


@dataclass(frozen=True)
class Call:
    """A single call inside a batch."""
    target: str
    data: bytes
    value: int = 0

    def to_rpc(self) -> Dict[str, str]:
        return {
            'to': Web3.to_checksum_address(self.target),
            'data': '0x' + self.data.hex(),
            'value': hex(self.value),
        }


CallBatch = Tuple[Call, ...]


class TransferRequest(BaseModel):
    """A single user transfer, amount in token minor units."""
    model_config = ConfigDict(frozen=True)

    sender: str
    recipient: str
    amount: int

    @field_validator('sender', 'recipient', mode='before')
    @classmethod
    def validate_address(cls, v):
        return normalize_address(v)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f'Amount must be an integer number of minor units: {v!r}')
        if v <= 0:
            raise ValueError('Amount must be positive')
        return v


class TransferResult(BaseModel):
    """Outcome of an accepted sponsored transfer."""
    model_config = ConfigDict(frozen=True)

    settlement_handle: str
    sender: str
    recipient: str
    amount: int
    token: str
    was_free: bool
    fee: int = 0
    explorer_url: Optional[str] = None


class SubmissionStatus(BaseModel):
    """Status of a submitted batch as reported by the relayer."""
    model_config = ConfigDict(frozen=True)

    handle: str
    included: bool
    success: Optional[bool] = None
    transaction_hash: Optional[str] = None


class RPCRequest(BaseModel):
    """JSON-RPC request structure."""
    jsonrpc: str = "2.0"
    id: Union[str, int] = 1
    method: str
    params: List[Any]


class RPCResponse(BaseModel):
    """JSON-RPC response structure."""
    jsonrpc: str
    id: Union[str, int, None] = None
    result: Optional[Any] = None
    error: Optional[Dict[str, Any]] = None
