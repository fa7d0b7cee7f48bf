"""Failure types surfaced by the query core."""

from __future__ import annotations


class NftQueryError(Exception):
    """Base class for errors raised by the query core."""


class StorageError(NftQueryError):
    """Raised when a statement could not be executed against the store.

    The triggering driver exception is always chained as ``__cause__``.
    """


class IdentityServiceError(NftQueryError):
    """Raised when the external identity service cannot be reached."""


__all__ = ["IdentityServiceError", "NftQueryError", "StorageError"]
