"""Transaction batch building for the Gasless SDK."""

from .builder import BatchBuilder, build_batch

__all__ = [
    "BatchBuilder",
    "build_batch",
]
