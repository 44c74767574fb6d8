"""Query construction for the host keychain.

A descriptor is a plain ``dict`` keyed by the host's short attribute
names. Every per-key descriptor carries the record class, the key as the
account, the store's scope as the service, and the accessibility policy.
"""

from __future__ import annotations

from typing import Any

from keysafe.secrets.errors import EncodingFailed

# Attribute names
ATTR_CLASS = "class"
ATTR_ACCOUNT = "acct"
ATTR_SERVICE = "svce"
ATTR_ACCESSIBLE = "pdmn"
VALUE_DATA = "v_Data"

# Search controls (not record attributes)
MATCH_LIMIT = "m_Limit"
RETURN_DATA = "r_Data"
SEARCH_CONTROLS = frozenset({MATCH_LIMIT, RETURN_DATA})

# Attribute values
CLASS_GENERIC_PASSWORD = "genp"
ACCESSIBLE_AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY = "cku"
MATCH_LIMIT_ONE = "m_LimitOne"

Descriptor = dict[str, Any]


def encode_key(key: str) -> bytes:
    try:
        return key.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingFailed(f"key: {exc.reason}") from exc


class QueryBuilder:
    """Builds descriptors scoped to a single application identity.

    Parameters
    ----------
    scope:
        Service name shared by every record this builder addresses.
        Fixed at construction.
    """

    def __init__(self, scope: str) -> None:
        if not scope:
            raise ValueError("scope must be a non-empty string")
        self._scope = scope

    @property
    def scope(self) -> str:
        return self._scope

    def base(self, key: str) -> Descriptor:
        """Descriptor identifying the record for *key* in this scope.

        Raises :class:`EncodingFailed` if *key* is not UTF-8 encodable.
        """
        return {
            ATTR_CLASS: CLASS_GENERIC_PASSWORD,
            ATTR_ACCOUNT: encode_key(key),
            ATTR_SERVICE: self._scope,
            ATTR_ACCESSIBLE: ACCESSIBLE_AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY,
        }

    def for_insert(self, key: str, data: bytes) -> Descriptor:
        descriptor = self.base(key)
        descriptor[VALUE_DATA] = data
        return descriptor

    def for_lookup(self, key: str) -> Descriptor:
        descriptor = self.base(key)
        descriptor[MATCH_LIMIT] = MATCH_LIMIT_ONE
        descriptor[RETURN_DATA] = True
        return descriptor

    def for_service(self) -> Descriptor:
        return {ATTR_CLASS: CLASS_GENERIC_PASSWORD, ATTR_SERVICE: self._scope}

    @staticmethod
    def for_record_class() -> Descriptor:
        """Every generic-password record, regardless of scope."""
        return {ATTR_CLASS: CLASS_GENERIC_PASSWORD}
