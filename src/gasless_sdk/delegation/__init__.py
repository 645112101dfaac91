"""Account delegation for the Gasless SDK."""

from .manager import DelegationManager
from .signers import Signer, LocalAccountSigner, CallbackSigner, signature_from_parts

__all__ = [
    "DelegationManager",
    "Signer",
    "LocalAccountSigner",
    "CallbackSigner",
    "signature_from_parts",
]
