# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Durable cache contract.

The durable cache is a small synchronous string key-value store that
survives process restarts. The sync engine keeps the serialized dataset
under one key and the last sync timestamp under another.
"""

from typing import Optional, Protocol, runtime_checkable


class CacheError(Exception):
    """Exception raised for durable cache failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the cache error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


@runtime_checkable
class DurableCache(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent.

        Raises:
            CacheError: If the storage cannot be read.
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            CacheError: If the storage cannot be written.
        """
        ...
