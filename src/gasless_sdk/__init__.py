"""
Gasless SDK for Python

Send stablecoin transfers without holding the native gas asset: the
sender's account is delegated to a smart-account implementation, the
transfer is batched with tiered-fee accounting, and a sponsoring relayer
pays and submits the network fee.
"""

__version__ = "0.1.0"

# Core configuration and types
from .core.config import GaslessConfig
from .core.types import (
    TierConfig,
    FeeSchedule,
    TierDecision,
    FeeQuote,
    DelegationAuthorization,
    Call,
    TransferRequest,
    TransferResult,
    SubmissionStatus,
)

# Policies
from .core.fees import quote
from .core.tiers import classify
from .core.balance import ensure_sufficient

# Clients
from .ledger.client import LedgerClient
from .sponsorship.client import SponsorClient

# Delegation
from .delegation.manager import DelegationManager
from .delegation.signers import Signer, LocalAccountSigner, CallbackSigner

# Batches and transfers
from .transactions.builder import BatchBuilder, build_batch
from .transfers.sponsored import (
    SponsoredTransfer,
    execute_sponsored_transfer,
    build_transfer_request,
)

# Exceptions
from .core.exceptions import (
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

__all__ = [
    # Version info
    "__version__",

    # Configuration and types
    "GaslessConfig",
    "TierConfig",
    "FeeSchedule",
    "TierDecision",
    "FeeQuote",
    "DelegationAuthorization",
    "Call",
    "TransferRequest",
    "TransferResult",
    "SubmissionStatus",

    # Policies
    "quote",
    "classify",
    "ensure_sufficient",

    # Clients
    "LedgerClient",
    "SponsorClient",

    # Delegation
    "DelegationManager",
    "Signer",
    "LocalAccountSigner",
    "CallbackSigner",

    # Batches and transfers
    "BatchBuilder",
    "build_batch",
    "SponsoredTransfer",
    "execute_sponsored_transfer",
    "build_transfer_request",

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
]
