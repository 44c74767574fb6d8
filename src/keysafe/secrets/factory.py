"""Secret store factory based on settings and OS."""

from __future__ import annotations

import pathlib
import platform

from keysafe.config import Settings, load_settings, resolve_scope
from keysafe.log import configure_logging
from keysafe.secrets.encrypted_file import EncryptedFileKeychain
from keysafe.secrets.host import HostKeychain
from keysafe.secrets.keychain import SecurityCliKeychain
from keysafe.secrets.memory import MemoryKeychain
from keysafe.secrets.query import QueryBuilder
from keysafe.secrets.store import SecretStore


class SecretStoreConfigError(ValueError):
    """The configured backend cannot be constructed."""


def create_host(settings: Settings) -> HostKeychain:
    backend = settings.store.backend
    if backend == "auto":
        backend = "keychain" if platform.system() == "Darwin" else "encrypted_file"

    if backend == "keychain":
        return SecurityCliKeychain()
    if backend == "memory":
        return MemoryKeychain()
    if not settings.store.master_password:
        raise SecretStoreConfigError(
            "encrypted_file backend needs store.master_password "
            "(or KEYSAFE_STORE__MASTER_PASSWORD)"
        )
    return EncryptedFileKeychain(
        file_path=pathlib.Path(settings.store.file_path),
        master_password=settings.store.master_password,
    )


def create_secret_store(settings: Settings | None = None) -> SecretStore:
    """Build a :class:`SecretStore` wired to the configured host."""
    if settings is None:
        settings = load_settings()
    configure_logging(settings.logging.level)
    return SecretStore(
        create_host(settings),
        QueryBuilder(resolve_scope(settings)),
        reset_scope=settings.store.reset_scope,
    )
