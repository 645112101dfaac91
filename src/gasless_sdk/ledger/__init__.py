"""Ledger read access for the Gasless SDK."""

from .client import LedgerClient, gather_reads
from .abi import encode_call, encode_transfer, encode_increment, function_selector

__all__ = [
    "LedgerClient",
    "gather_reads",
    "encode_call",
    "encode_transfer",
    "encode_increment",
    "function_selector",
]
