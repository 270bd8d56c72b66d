"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ccw.data.db import Database
from ccw.services.discovery_service import DiscoveryService
from ccw.services.registry_service import RegistryService
from ccw.services.settings_service import SettingsService

if TYPE_CHECKING:
    from ccw.config import Config


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, immutable."""

    db: Database
    registry_service: RegistryService
    discovery_service: DiscoveryService
    settings_service: SettingsService

    @classmethod
    async def create(cls, config: Config) -> ServiceContainer:
        """Async factory that wires all dependencies."""
        db = Database(config.db_path)
        await db.connect()

        return cls(
            db=db,
            registry_service=RegistryService(db),
            discovery_service=DiscoveryService(config),
            settings_service=SettingsService(db),
        )

    async def close(self) -> None:
        """Shut down all services."""
        await self.db.close()
