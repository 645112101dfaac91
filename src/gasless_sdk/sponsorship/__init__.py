"""Sponsored submission through a relayer."""

from .client import SponsorClient

__all__ = [
    "SponsorClient",
]
