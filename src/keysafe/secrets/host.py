"""Abstract interface for the host keychain."""

from __future__ import annotations

from abc import ABC, abstractmethod

from keysafe.secrets.query import Descriptor


class HostKeychain(ABC):
    """The platform store the secret store delegates to.

    Methods return raw ``OSStatus`` integers; no method raises for an
    ordinary failure. All methods are async so subprocess- and file-backed
    hosts do not block the event loop.
    """

    @abstractmethod
    async def add(self, attributes: Descriptor) -> int:
        """Insert a record. Duplicate (class, service, account) must fail."""

    @abstractmethod
    async def copy_matching(self, query: Descriptor) -> tuple[int, bytes | None]:
        """Return the value of the first record matching *query*."""

    @abstractmethod
    async def update(self, query: Descriptor, changes: Descriptor) -> int:
        """Apply *changes* to every record matching *query*. Never inserts."""

    @abstractmethod
    async def delete(self, query: Descriptor) -> int:
        """Delete every record matching *query*."""
