"""Fernet-encrypted JSON file host keychain.

Used on Linux/Docker where macOS Keychain is not available. Derives an
encryption key from a master password using PBKDF2-HMAC-SHA256, then
encrypts the whole record table with Fernet.
"""

from __future__ import annotations

import base64
import json
import logging
import pathlib
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from keysafe.secrets.host import HostKeychain
from keysafe.secrets.memory import RecordTable
from keysafe.secrets.query import Descriptor
from keysafe.secrets.status import OSStatus

logger = logging.getLogger("keysafe.secrets")

# Fixed salt -- acceptable for a local-only file where the threat model is
# casual disk access, not offline brute-force against a leaked database.
_SALT = b"keysafe-encrypted-file-keychain-v1"
_ITERATIONS = 480_000

# Marker for bytes attributes in the JSON document
_BYTES_TAG = "$b64"


def _derive_key(master_password: str) -> bytes:
    """Derive a 32-byte Fernet key from the master password via PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_SALT,
        iterations=_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(master_password.encode("utf-8")))


def _dump_record(record: Descriptor) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in record.items():
        if isinstance(value, bytes):
            out[name] = {_BYTES_TAG: base64.b64encode(value).decode("ascii")}
        else:
            out[name] = value
    return out


def _load_record(raw: dict[str, Any]) -> Descriptor:
    out: Descriptor = {}
    for name, value in raw.items():
        if isinstance(value, dict) and _BYTES_TAG in value:
            out[name] = base64.b64decode(value[_BYTES_TAG], validate=True)
        else:
            out[name] = value
    return out


def _load_records(document: Any) -> list[Descriptor]:
    """Validate the decrypted document shape and decode its records."""
    if not isinstance(document, dict):
        raise TypeError("document is not an object")
    raw_records = document.get("records", [])
    if not isinstance(raw_records, list) or not all(isinstance(r, dict) for r in raw_records):
        raise TypeError("records is not a list of objects")
    return [_load_record(r) for r in raw_records]


class _UnreadableFile(Exception):
    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(status)


class EncryptedFileKeychain(HostKeychain):
    """Stores keychain records as a Fernet-encrypted JSON file on disk.

    Parameters
    ----------
    file_path:
        Path to the encrypted file. Created on first write.
    master_password:
        Password used to derive the Fernet encryption key via PBKDF2.
    """

    def __init__(self, file_path: pathlib.Path, master_password: str) -> None:
        self._path = file_path
        self._fernet = Fernet(_derive_key(master_password))

    def _read_table(self) -> RecordTable:
        """Read and decrypt the file. Returns an empty table if missing."""
        if not self._path.exists():
            return RecordTable()
        try:
            ciphertext = self._path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read keychain file %s: %s", self._path, exc)
            raise _UnreadableFile(OSStatus.NOT_AVAILABLE) from exc
        try:
            plaintext = self._fernet.decrypt(ciphertext)
            document = json.loads(plaintext)
        except (InvalidToken, ValueError) as exc:
            logger.warning("Cannot decrypt keychain file %s", self._path)
            raise _UnreadableFile(OSStatus.DECODE) from exc
        try:
            return RecordTable(_load_records(document))
        except (TypeError, ValueError) as exc:
            logger.warning("Malformed keychain file %s: %s", self._path, exc)
            raise _UnreadableFile(OSStatus.DECODE) from exc

    def _write_table(self, table: RecordTable) -> int:
        """Encrypt and write the table to disk."""
        document = {"records": [_dump_record(r) for r in table.records]}
        plaintext = json.dumps(document, sort_keys=True).encode("utf-8")
        ciphertext = self._fernet.encrypt(plaintext)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_bytes(ciphertext)
        except OSError as exc:
            logger.warning("Cannot write keychain file %s: %s", self._path, exc)
            return OSStatus.NOT_AVAILABLE
        return OSStatus.SUCCESS

    async def add(self, attributes: Descriptor) -> int:
        try:
            table = self._read_table()
        except _UnreadableFile as exc:
            return exc.status
        status = table.add(attributes)
        if status != OSStatus.SUCCESS:
            return status
        return self._write_table(table)

    async def copy_matching(self, query: Descriptor) -> tuple[int, bytes | None]:
        try:
            table = self._read_table()
        except _UnreadableFile as exc:
            return exc.status, None
        return table.find(query)

    async def update(self, query: Descriptor, changes: Descriptor) -> int:
        try:
            table = self._read_table()
        except _UnreadableFile as exc:
            return exc.status
        status = table.update(query, changes)
        if status != OSStatus.SUCCESS:
            return status
        return self._write_table(table)

    async def delete(self, query: Descriptor) -> int:
        try:
            table = self._read_table()
        except _UnreadableFile as exc:
            return exc.status
        status = table.delete(query)
        if status != OSStatus.SUCCESS:
            return status
        return self._write_table(table)
