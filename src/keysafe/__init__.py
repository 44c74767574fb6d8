"""keysafe -- per-key secret storage over the platform keychain."""

from pathlib import Path as _Path

def _read_version() -> str:
    """Read version from the repo-level VERSION file (single source of truth)."""
    for parent in _Path(__file__).resolve().parents:
        candidate = parent / "VERSION"
        if candidate.is_file():
            return candidate.read_text().strip()
    return "0.0.0"

__version__ = _read_version()

from keysafe.secrets.errors import (  # noqa: E402
    DuplicateItem,
    EncodingFailed,
    ItemNotFound,
    KeychainError,
    UnexpectedStatus,
)
from keysafe.secrets.factory import SecretStoreConfigError, create_secret_store  # noqa: E402
from keysafe.secrets.result import Result  # noqa: E402
from keysafe.secrets.store import SecretStore  # noqa: E402

__all__ = [
    "DuplicateItem",
    "EncodingFailed",
    "ItemNotFound",
    "KeychainError",
    "Result",
    "SecretStore",
    "SecretStoreConfigError",
    "UnexpectedStatus",
    "create_secret_store",
]
