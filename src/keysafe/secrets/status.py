"""Host keychain status codes and their translation into results.

The host reports outcomes as ``OSStatus`` integers. :func:`translate` is
the only place that looks at raw codes; everything above it branches on
:class:`~keysafe.secrets.result.Result` and the error classes.
"""

from __future__ import annotations

import enum
from typing import Any

from keysafe.secrets.errors import DuplicateItem, ItemNotFound, UnexpectedStatus
from keysafe.secrets.result import Result


class OSStatus(enum.IntEnum):
    SUCCESS = 0
    PARAM = -50
    ALLOCATE = -108
    NOT_AVAILABLE = -25291
    AUTH_FAILED = -25293
    DUPLICATE_ITEM = -25299
    ITEM_NOT_FOUND = -25300
    INTERACTION_NOT_ALLOWED = -25308
    DECODE = -26275


_DESCRIPTIONS: dict[int, str] = {
    OSStatus.SUCCESS: "No error",
    OSStatus.PARAM: "One or more parameters passed to a function were not valid",
    OSStatus.ALLOCATE: "Failed to allocate memory",
    OSStatus.NOT_AVAILABLE: "No keychain is available",
    OSStatus.AUTH_FAILED: "The user name or passphrase you entered is not correct",
    OSStatus.DUPLICATE_ITEM: "The specified item already exists in the keychain",
    OSStatus.ITEM_NOT_FOUND: "The specified item could not be found in the keychain",
    OSStatus.INTERACTION_NOT_ALLOWED: "User interaction is not allowed",
    OSStatus.DECODE: "Unable to decode the provided data",
}


def describe(status: int) -> str:
    """Return a readable label for *status*, keeping the numeric code."""
    text = _DESCRIPTIONS.get(status)
    if text is None:
        return f"OSStatus {int(status)}"
    return f"{text} (OSStatus {int(status)})"


def translate(status: int, value: Any = None) -> Result[Any]:
    """Map a host status (and optional payload) to a :class:`Result`."""
    if status == OSStatus.SUCCESS:
        return Result.success(value)
    if status == OSStatus.ITEM_NOT_FOUND:
        return Result.failure(ItemNotFound())
    if status == OSStatus.DUPLICATE_ITEM:
        return Result.failure(DuplicateItem())
    return Result.failure(UnexpectedStatus(int(status), describe(status)))
