"""Shared test fixtures for keysafe tests."""

import pathlib

import pytest

from keysafe.secrets.memory import MemoryKeychain
from keysafe.secrets.query import QueryBuilder
from keysafe.secrets.store import SecretStore

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]

TEST_SCOPE = "com.keysafe.tests"


@pytest.fixture
def repo_root() -> pathlib.Path:
    return REPO_ROOT


@pytest.fixture
def host() -> MemoryKeychain:
    return MemoryKeychain()


@pytest.fixture
def builder() -> QueryBuilder:
    return QueryBuilder(TEST_SCOPE)


@pytest.fixture
def store(host: MemoryKeychain, builder: QueryBuilder) -> SecretStore:
    return SecretStore(host, builder)
