"""Settings service: batched reads and incremental writes of string settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ccw.data.repositories import SettingsRepository
from ccw.services.errors import ServiceError, adapter_failure

if TYPE_CHECKING:
    from ccw.data.protocols import DatabaseProtocol

logger = logging.getLogger(__name__)


class SettingsService:
    """Key/value settings backed by the ``app_settings`` table."""

    def __init__(self, db: DatabaseProtocol) -> None:
        self._repo = SettingsRepository(db)

    async def get_settings(self, keys: list[str]) -> Result[dict[str, str], ServiceError]:
        """Read several keys in one query; absent keys are omitted."""
        try:
            return Ok(await self._repo.get_many(keys))
        except Exception as exc:
            logger.exception("Failed to read settings %s", keys)
            return Err(adapter_failure("Reading settings", exc))

    async def set_settings(self, values: dict[str, str]) -> Result[None, ServiceError]:
        """Upsert only the given keys."""
        try:
            await self._repo.set_many(values)
        except Exception as exc:
            logger.exception("Failed to write settings %s", sorted(values))
            return Err(adapter_failure("Writing settings", exc))
        return Ok(None)

    async def set_setting(self, key: str, value: str) -> Result[None, ServiceError]:
        return await self.set_settings({key: value})
