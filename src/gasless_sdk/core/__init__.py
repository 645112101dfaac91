"""
Core module for the Gasless SDK.

This module contains the configuration, types, exceptions and the pure
fee, tier and balance policies that the rest of the SDK builds on.
"""

from .config import GaslessConfig
from .types import (
    TierConfig,
    FeeSchedule,
    TierDecision,
    FeeQuote,
    AuthorizationRequest,
    DelegationAuthorization,
    DelegationInstalled,
    DelegationNotInstalled,
    DelegationState,
    Call,
    CallBatch,
    TransferRequest,
    TransferResult,
    SubmissionStatus,
    RPCRequest,
    RPCResponse,
)
from .exceptions import (
    GaslessSDKError,
    InvalidRequestError,
    ConfigurationMissingError,
    PreconditionFailedError,
    InsufficientBalanceError,
    AuthorizationUnavailableError,
    SimulationFailedError,
    SponsorRejectedError,
    NetworkTimeoutError,
)
from .fees import quote, quote_with_schedule, zero_fee
from .tiers import classify
from .balance import ensure_sufficient, check_balance
from .units import to_minor_units, from_minor_units, transaction_link, address_link

__all__ = [
    # Configuration
    "GaslessConfig",

    # Core types
    "TierConfig",
    "FeeSchedule",
    "TierDecision",
    "FeeQuote",
    "AuthorizationRequest",
    "DelegationAuthorization",
    "DelegationInstalled",
    "DelegationNotInstalled",
    "DelegationState",
    "Call",
    "CallBatch",
    "TransferRequest",
    "TransferResult",
    "SubmissionStatus",
    "RPCRequest",
    "RPCResponse",

    # Exceptions
    "GaslessSDKError",
    "InvalidRequestError",
    "ConfigurationMissingError",
    "PreconditionFailedError",
    "InsufficientBalanceError",
    "AuthorizationUnavailableError",
    "SimulationFailedError",
    "SponsorRejectedError",
    "NetworkTimeoutError",

    # Policies
    "quote",
    "quote_with_schedule",
    "zero_fee",
    "classify",
    "ensure_sufficient",
    "check_balance",

    # Units
    "to_minor_units",
    "from_minor_units",
    "transaction_link",
    "address_link",
]
