"""ABI encoding helpers for the token and accounting contracts."""

from typing import Any, List, Sequence

from eth_abi import decode, encode
from web3 import Web3


def function_selector(signature: str) -> bytes:
    """First four bytes of the keccak hash of a function signature."""
    return bytes(Web3.keccak(text=signature)[:4])


# ERC-20 token
BALANCE_OF = "balanceOf(address)"
TRANSFER = "transfer(address,uint256)"

# Accounting contract
GET_TRANSACTION_COUNT = "getTransactionCount(address)"
INCREMENT_TRANSACTION_COUNT = "incrementTransactionCount()"
FREE_TIER_LIMIT = "freeTierLimit()"
FREE_TIER_RATIO = "freeTierRatio()"
SERVICE_FEE_BASIS_POINTS = "serviceFeeBasisPoints()"
MIN_SERVICE_FEE = "minServiceFee()"
MAX_SERVICE_FEE = "maxServiceFee()"
FEE_RECEIVER = "feeReceiver()"

# EIP-7702 delegation designator prefix
DELEGATION_PREFIX = bytes.fromhex("ef0100")


def _arg_types(signature: str) -> List[str]:
    inner = signature[signature.index('(') + 1:-1]
    return [t for t in inner.split(',') if t]


def encode_call(signature: str, args: Sequence[Any] = ()) -> bytes:
    """Encode a function call: selector followed by ABI-encoded arguments."""
    types = _arg_types(signature)
    if len(types) != len(args):
        raise ValueError(f"{signature} takes {len(types)} arguments, got {len(args)}")
    converted = [
        Web3.to_checksum_address(arg) if abi_type == 'address' else arg
        for abi_type, arg in zip(types, args)
    ]
    return function_selector(signature) + encode(types, converted)


def encode_transfer(recipient: str, amount: int) -> bytes:
    return encode_call(TRANSFER, [recipient, amount])


def encode_increment() -> bytes:
    return encode_call(INCREMENT_TRANSACTION_COUNT)


def decode_uint256(data: bytes) -> int:
    (value,) = decode(['uint256'], data)
    return value


def decode_address(data: bytes) -> str:
    (value,) = decode(['address'], data)
    return value.lower()


def delegation_designator(delegate_contract: str) -> bytes:
    """Code an EOA carries once it delegates to ``delegate_contract``."""
    return DELEGATION_PREFIX + bytes.fromhex(delegate_contract[2:])


def delegated_to(code: bytes) -> str:
    """Return the delegate address encoded in ``code``, or an empty string."""
    if len(code) == 23 and code[:3] == DELEGATION_PREFIX:
        return '0x' + code[3:].hex()
    return ''
