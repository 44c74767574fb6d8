"""keysafe error taxonomy.

Every status the host keychain can report is narrowed to one of these
classes before it reaches a caller.
"""

from __future__ import annotations


class KeychainError(Exception):
    """Base class for all secret store errors."""


class EncodingFailed(KeychainError):
    """A key or value could not be converted to or from bytes."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        msg = "Failed to encode string to data"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class ItemNotFound(KeychainError):
    """No record exists for the requested key."""

    def __init__(self) -> None:
        super().__init__("Item not found in keychain")


class DuplicateItem(KeychainError):
    """An insert collided with an existing (key, scope) record."""

    def __init__(self) -> None:
        super().__init__("Item already exists in keychain")


class UnexpectedStatus(KeychainError):
    """The host returned a status with no dedicated error class."""

    def __init__(self, status: int, description: str = "") -> None:
        self.status = status
        self.description = description or str(status)
        super().__init__(f"Unexpected keychain error: {self.description}")
