"""Tests for descriptor construction."""

from __future__ import annotations

import pytest

from keysafe.secrets.errors import EncodingFailed
from keysafe.secrets.query import (
    ACCESSIBLE_AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY,
    ATTR_ACCESSIBLE,
    ATTR_ACCOUNT,
    ATTR_CLASS,
    ATTR_SERVICE,
    CLASS_GENERIC_PASSWORD,
    MATCH_LIMIT,
    MATCH_LIMIT_ONE,
    RETURN_DATA,
    VALUE_DATA,
    QueryBuilder,
)


@pytest.fixture
def qb() -> QueryBuilder:
    return QueryBuilder("com.example.app")


class TestBaseDescriptor:
    def test_contains_identity_and_policy(self, qb: QueryBuilder) -> None:
        descriptor = qb.base("session")
        assert descriptor == {
            ATTR_CLASS: CLASS_GENERIC_PASSWORD,
            ATTR_ACCOUNT: b"session",
            ATTR_SERVICE: "com.example.app",
            ATTR_ACCESSIBLE: ACCESSIBLE_AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY,
        }

    def test_account_is_utf8_bytes(self, qb: QueryBuilder) -> None:
        assert qb.base("clé")[ATTR_ACCOUNT] == "clé".encode("utf-8")

    def test_unencodable_key_fails(self, qb: QueryBuilder) -> None:
        with pytest.raises(EncodingFailed):
            qb.base("bad\ud800key")

    def test_each_call_returns_fresh_dict(self, qb: QueryBuilder) -> None:
        first = qb.base("a")
        first["extra"] = 1
        assert "extra" not in qb.base("a")


class TestVariants:
    def test_insert_adds_value(self, qb: QueryBuilder) -> None:
        descriptor = qb.for_insert("token", b"v")
        assert descriptor[VALUE_DATA] == b"v"
        assert descriptor[ATTR_SERVICE] == "com.example.app"

    def test_lookup_requests_single_value(self, qb: QueryBuilder) -> None:
        descriptor = qb.for_lookup("token")
        assert descriptor[MATCH_LIMIT] == MATCH_LIMIT_ONE
        assert descriptor[RETURN_DATA] is True
        assert VALUE_DATA not in descriptor

    def test_service_descriptor(self, qb: QueryBuilder) -> None:
        assert qb.for_service() == {
            ATTR_CLASS: CLASS_GENERIC_PASSWORD,
            ATTR_SERVICE: "com.example.app",
        }

    def test_record_class_descriptor_has_no_scope(self, qb: QueryBuilder) -> None:
        assert qb.for_record_class() == {ATTR_CLASS: CLASS_GENERIC_PASSWORD}


class TestScope:
    def test_scope_is_exposed(self, qb: QueryBuilder) -> None:
        assert qb.scope == "com.example.app"

    def test_empty_scope_rejected(self) -> None:
        with pytest.raises(ValueError):
            QueryBuilder("")

    def test_distinct_scopes_produce_distinct_descriptors(self) -> None:
        a = QueryBuilder("com.a").base("k")
        b = QueryBuilder("com.b").base("k")
        assert a[ATTR_SERVICE] != b[ATTR_SERVICE]
        assert a[ATTR_ACCOUNT] == b[ATTR_ACCOUNT]
