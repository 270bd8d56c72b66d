"""Protocol definitions for data access."""

from __future__ import annotations

from typing import Any, Protocol


class CursorProtocol(Protocol):
    """The part of a DB-API cursor the repositories read after a write."""

    @property
    def lastrowid(self) -> int | None: ...


class DatabaseProtocol(Protocol):
    """Async database interface used by the registry and settings repositories.

    Writes are not committed implicitly; repositories call ``commit`` once per
    logical change.
    """

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> CursorProtocol: ...

    async def execute_many(self, sql: str, params_seq: list[tuple[Any, ...]]) -> None: ...

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[Any]: ...

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> Any | None: ...

    async def commit(self) -> None: ...
