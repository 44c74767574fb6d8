"""Keyed secret storage on top of a host keychain.

Each key maps to one generic-password record in the store's scope. All
public operations return a :class:`~keysafe.secrets.result.Result`; a
failure is never raised.
"""

from __future__ import annotations

import logging
from typing import Callable

from keysafe import log as app_log
from keysafe.secrets.errors import DuplicateItem, EncodingFailed, ItemNotFound
from keysafe.secrets.host import HostKeychain
from keysafe.secrets.query import VALUE_DATA, QueryBuilder
from keysafe.secrets.result import Result
from keysafe.secrets.status import translate

logger = logging.getLogger("keysafe.secrets")

LogSink = Callable[[str, str | None], None]

RESET_RECORD_CLASS = "record_class"
RESET_SERVICE = "service"


def _encode_value(value: str) -> bytes:
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingFailed(f"value: {exc.reason}") from exc


class SecretStore:
    """Add, read, remove and wipe string secrets by key.

    Parameters
    ----------
    host:
        Keychain the records live in.
    builder:
        Query builder carrying the scope for every per-key record.
    log:
        Callable taking ``(message, category)``. Errors it raises are
        dropped so logging can never change an operation's outcome.
    reset_scope:
        ``"record_class"`` (default) makes :meth:`reset_all` delete every
        generic-password record the host can reach, in any scope.
        ``"service"`` limits it to this store's scope.
    """

    def __init__(
        self,
        host: HostKeychain,
        builder: QueryBuilder,
        *,
        log: LogSink = app_log.log,
        reset_scope: str = RESET_RECORD_CLASS,
    ) -> None:
        if reset_scope not in (RESET_RECORD_CLASS, RESET_SERVICE):
            raise ValueError(f"Unknown reset scope: {reset_scope!r}")
        self._host = host
        self._builder = builder
        self._log = log
        self._reset_scope = reset_scope

    @property
    def scope(self) -> str:
        return self._builder.scope

    def _emit(self, message: str) -> None:
        try:
            self._log(message, app_log.NETWORK)
        except Exception:
            logger.debug("Log sink raised; ignoring", exc_info=True)

    async def add(self, key: str, value: str) -> Result[None]:
        """Store *value* under *key*, replacing any existing value."""
        try:
            data = _encode_value(value)
            attributes = self._builder.for_insert(key, data)
        except EncodingFailed as exc:
            return Result.failure(exc)

        result = translate(await self._host.add(attributes))
        if result.ok:
            self._emit(f"Value saved in keychain for key: {key}")
            return result
        if isinstance(result.error, DuplicateItem):
            return await self._update(key, data)
        return result

    async def _update(self, key: str, data: bytes) -> Result[None]:
        """Replace the value of an existing record. Never inserts.

        An absent record yields ``ItemNotFound``.
        """
        try:
            query = self._builder.base(key)
        except EncodingFailed as exc:
            return Result.failure(exc)

        result = translate(await self._host.update(query, {VALUE_DATA: data}))
        if result.ok:
            self._emit(f"The value in keychain for key {key} is updated")
        return result

    async def get(self, key: str) -> Result[str]:
        """Return the value stored under *key*."""
        try:
            query = self._builder.for_lookup(key)
        except EncodingFailed as exc:
            return Result.failure(exc)

        status, data = await self._host.copy_matching(query)
        result = translate(status)
        if not result.ok:
            return result
        if not isinstance(data, bytes):
            return Result.failure(EncodingFailed("no data returned"))
        try:
            return Result.success(data.decode("utf-8"))
        except UnicodeDecodeError as exc:
            return Result.failure(EncodingFailed(f"value: {exc.reason}"))

    async def get_optional(self, key: str) -> str | None:
        """Like :meth:`get` but returns ``None`` on any failure."""
        return (await self.get(key)).value_or(None)

    async def remove(self, key: str) -> Result[None]:
        """Delete the record for *key*. A missing record is ``ItemNotFound``."""
        try:
            query = self._builder.base(key)
        except EncodingFailed as exc:
            return Result.failure(exc)

        result = translate(await self._host.delete(query))
        if result.ok:
            self._emit(f"Value removed from keychain for key: {key}")
        return result

    async def reset_all(self) -> Result[None]:
        """Delete every record covered by the reset scope.

        Finding nothing to delete counts as success.
        """
        if self._reset_scope == RESET_SERVICE:
            query = self._builder.for_service()
        else:
            query = self._builder.for_record_class()

        result = translate(await self._host.delete(query))
        if result.ok:
            self._emit("Keychain data has been successfully reset")
            return result
        if isinstance(result.error, ItemNotFound):
            self._emit("No keychain data found. All clean")
            return Result.success()
        self._emit(f"Error resetting keychain data: {result.error}")
        return result
