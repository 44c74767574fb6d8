"""macOS Keychain host backed by the ``security`` CLI.

Records are generic passwords in the user's login keychain. The CLI
exits with the low byte of the underlying ``OSStatus``; the two codes the
store branches on are mapped back to their full values.

The CLI has no flag for the accessibility attribute, so records created
here get the keychain's default accessibility.
"""

from __future__ import annotations

import asyncio
import logging
import re

from keysafe.secrets.host import HostKeychain
from keysafe.secrets.query import (
    ATTR_ACCOUNT,
    ATTR_CLASS,
    ATTR_SERVICE,
    CLASS_GENERIC_PASSWORD,
    VALUE_DATA,
    Descriptor,
)
from keysafe.secrets.status import OSStatus

logger = logging.getLogger("keysafe.secrets")

# Exit code when an item is not found in Keychain (errSecItemNotFound & 0xFF)
_EXIT_ITEM_NOT_FOUND = 44
# Exit code when a duplicate item already exists (errSecDuplicateItem & 0xFF)
_EXIT_DUPLICATE_ITEM = 45

_EXIT_TO_STATUS = {
    0: OSStatus.SUCCESS,
    _EXIT_ITEM_NOT_FOUND: OSStatus.ITEM_NOT_FOUND,
    _EXIT_DUPLICATE_ITEM: OSStatus.DUPLICATE_ITEM,
}

_PASSWORD_HEX_RE = re.compile(r"^password: 0x([0-9A-Fa-f]+)", re.MULTILINE)
_PASSWORD_RE = re.compile(r'^password: "(.*)"$', re.MULTILINE)
_ATTR_RE = re.compile(r'"(acct|svce)"<blob>=(?:0x([0-9A-Fa-f]+)|"(.*)")')
_CLASS_RE = re.compile(r'^class: "?(\w+)"?')


def _status_from_exit(returncode: int) -> int:
    # Other exit codes are only the low byte of the real status; keep them
    # as-is so they still show up in diagnostics.
    return _EXIT_TO_STATUS.get(returncode, returncode)


def _account(query: Descriptor) -> str | None:
    raw = query.get(ATTR_ACCOUNT)
    if raw is None:
        return None
    return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)


def _password_args(data: bytes) -> list[str]:
    # Empty values go through -w; everything else is passed as hex.
    if not data:
        return ["-w", ""]
    return ["-X", data.hex()]


def _parse_password(stderr: bytes) -> bytes | None:
    """Extract the password printed by ``find-generic-password -g``.

    Printable values appear as ``password: "value"``; anything else is
    printed as ``password: 0x<hex>  "<escaped>"``.
    """
    text = stderr.decode("utf-8", errors="replace")
    hex_match = _PASSWORD_HEX_RE.search(text)
    if hex_match:
        return bytes.fromhex(hex_match.group(1))
    match = _PASSWORD_RE.search(text)
    if match:
        return match.group(1).encode("utf-8")
    if re.search(r"^password:\s*$", text, re.MULTILINE):
        return b""
    return None


def _parse_dump(output: str) -> list[tuple[str, str]]:
    """Return ``(service, account)`` for every generic password in a dump."""
    items: list[tuple[str, str]] = []
    item_class: str | None = None
    attrs: dict[str, str] = {}

    def flush() -> None:
        if item_class == CLASS_GENERIC_PASSWORD and "svce" in attrs and "acct" in attrs:
            items.append((attrs["svce"], attrs["acct"]))

    for line in output.splitlines():
        class_match = _CLASS_RE.match(line)
        if class_match:
            flush()
            item_class = class_match.group(1)
            attrs = {}
            continue
        attr_match = _ATTR_RE.search(line)
        if attr_match:
            name, hex_value, text = attr_match.groups()
            if hex_value is not None:
                # Non-printable blobs are dumped as 0x<hex>  "<escaped>"
                text = bytes.fromhex(hex_value).decode("utf-8", errors="replace")
            attrs[name] = text
    flush()
    return items


class SecurityCliKeychain(HostKeychain):
    """Host keychain that shells out to ``/usr/bin/security``."""

    def __init__(self, executable: str = "security") -> None:
        self._executable = executable

    async def _run(self, *args: str) -> tuple[int, bytes, bytes]:
        """Run a ``security`` subcommand and return (status, stdout, stderr)."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Cannot run %s: %s", self._executable, exc)
            return OSStatus.NOT_AVAILABLE, b"", b""
        stdout, stderr = await proc.communicate()
        return _status_from_exit(proc.returncode or 0), stdout, stderr

    def _item_args(self, query: Descriptor) -> list[str]:
        args: list[str] = []
        if ATTR_SERVICE in query:
            args += ["-s", str(query[ATTR_SERVICE])]
        account = _account(query)
        if account is not None:
            args += ["-a", account]
        return args

    async def add(self, attributes: Descriptor) -> int:
        if attributes.get(ATTR_CLASS) != CLASS_GENERIC_PASSWORD:
            return OSStatus.PARAM
        data = attributes.get(VALUE_DATA, b"")
        status, _, _ = await self._run(
            "add-generic-password",
            *self._item_args(attributes),
            *_password_args(data),
        )
        return status

    async def copy_matching(self, query: Descriptor) -> tuple[int, bytes | None]:
        status, _stdout, stderr = await self._run(
            "find-generic-password",
            *self._item_args(query),
            "-g",
        )
        if status != OSStatus.SUCCESS:
            return status, None
        data = _parse_password(stderr)
        if data is None:
            return OSStatus.DECODE, None
        return OSStatus.SUCCESS, data

    async def update(self, query: Descriptor, changes: Descriptor) -> int:
        if VALUE_DATA not in changes:
            return OSStatus.PARAM
        # -U on add-generic-password would insert a missing item.
        status, _, _ = await self._run("find-generic-password", *self._item_args(query))
        if status != OSStatus.SUCCESS:
            return status
        status, _, _ = await self._run(
            "add-generic-password",
            *self._item_args(query),
            *_password_args(changes[VALUE_DATA]),
            "-U",
        )
        return status

    async def delete(self, query: Descriptor) -> int:
        if _account(query) is not None:
            status, _, _ = await self._run("delete-generic-password", *self._item_args(query))
            return status
        return await self._delete_many(query.get(ATTR_SERVICE))

    async def _delete_many(self, service: str | None) -> int:
        status, stdout, _ = await self._run("dump-keychain")
        if status != OSStatus.SUCCESS:
            return status
        targets = [
            (svce, acct)
            for svce, acct in _parse_dump(stdout.decode("utf-8", errors="replace"))
            if service is None or svce == service
        ]
        if not targets:
            return OSStatus.ITEM_NOT_FOUND
        for svce, acct in targets:
            status, _, _ = await self._run("delete-generic-password", "-s", svce, "-a", acct)
            if status not in (OSStatus.SUCCESS, OSStatus.ITEM_NOT_FOUND):
                return status
        return OSStatus.SUCCESS
