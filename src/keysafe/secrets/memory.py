"""In-process host keychain.

Used in tests and anywhere a throwaway store is acceptable. The
:class:`RecordTable` holding the matching rules is shared with the
encrypted file backend.
"""

from __future__ import annotations

from typing import Any

from keysafe.secrets.host import HostKeychain
from keysafe.secrets.query import (
    ATTR_ACCOUNT,
    ATTR_CLASS,
    ATTR_SERVICE,
    SEARCH_CONTROLS,
    VALUE_DATA,
    Descriptor,
)
from keysafe.secrets.status import OSStatus

# Attributes that together identify a generic-password record
_PRIMARY_KEY = (ATTR_CLASS, ATTR_SERVICE, ATTR_ACCOUNT)


def _matches(record: Descriptor, query: Descriptor) -> bool:
    for name, expected in query.items():
        if name in SEARCH_CONTROLS or name == VALUE_DATA:
            continue
        if record.get(name) != expected:
            return False
    return True


class RecordTable:
    """List of attribute dicts with keychain insert/match/update/delete rules."""

    def __init__(self, records: list[Descriptor] | None = None) -> None:
        self.records: list[Descriptor] = records if records is not None else []

    def _identity(self, record: Descriptor) -> tuple[Any, ...]:
        return tuple(record.get(name) for name in _PRIMARY_KEY)

    def add(self, attributes: Descriptor) -> int:
        if ATTR_CLASS not in attributes:
            return OSStatus.PARAM
        record = {k: v for k, v in attributes.items() if k not in SEARCH_CONTROLS}
        identity = self._identity(record)
        if any(self._identity(existing) == identity for existing in self.records):
            return OSStatus.DUPLICATE_ITEM
        self.records.append(record)
        return OSStatus.SUCCESS

    def find(self, query: Descriptor) -> tuple[int, bytes | None]:
        for record in self.records:
            if _matches(record, query):
                return OSStatus.SUCCESS, record.get(VALUE_DATA)
        return OSStatus.ITEM_NOT_FOUND, None

    def update(self, query: Descriptor, changes: Descriptor) -> int:
        matched = [r for r in self.records if _matches(r, query)]
        if not matched:
            return OSStatus.ITEM_NOT_FOUND
        for record in matched:
            record.update(changes)
        return OSStatus.SUCCESS

    def delete(self, query: Descriptor) -> int:
        remaining = [r for r in self.records if not _matches(r, query)]
        if len(remaining) == len(self.records):
            return OSStatus.ITEM_NOT_FOUND
        self.records[:] = remaining
        return OSStatus.SUCCESS


class MemoryKeychain(HostKeychain):
    """Keeps records in a :class:`RecordTable` for the life of the object."""

    def __init__(self) -> None:
        self._table = RecordTable()

    @property
    def records(self) -> list[Descriptor]:
        return self._table.records

    async def add(self, attributes: Descriptor) -> int:
        return self._table.add(attributes)

    async def copy_matching(self, query: Descriptor) -> tuple[int, bytes | None]:
        return self._table.find(query)

    async def update(self, query: Descriptor, changes: Descriptor) -> int:
        return self._table.update(query, changes)

    async def delete(self, query: Descriptor) -> int:
        return self._table.delete(query)
