"""Transfer functionality for the Gasless SDK."""

from .sponsored import SponsoredTransfer, execute_sponsored_transfer, build_transfer_request

__all__ = [
    "SponsoredTransfer",
    "execute_sponsored_transfer",
    "build_transfer_request",
]
