"""Protocol module smoke test."""

from __future__ import annotations

from ccw.data.db import Database
from ccw.data.protocols import DatabaseProtocol
from ccw.services import protocols
from ccw.services.discovery_service import DiscoveryService
from ccw.services.registry_service import RegistryService
from ccw.services.settings_service import SettingsService


def test_protocols_module_imports() -> None:
    assert hasattr(protocols, "DiscoveryAdapter")
    assert hasattr(protocols, "RegistryAdapter")
    assert hasattr(protocols, "SettingsAdapter")


def test_services_expose_adapter_methods() -> None:
    pairs = (
        (DiscoveryService, protocols.DiscoveryAdapter),
        (RegistryService, protocols.RegistryAdapter),
        (SettingsService, protocols.SettingsAdapter),
    )
    for service, protocol in pairs:
        members = [name for name in vars(protocol) if not name.startswith("_")]
        assert members
        for name in members:
            assert callable(getattr(service, name, None)), f"{service.__name__}.{name}"


def test_database_matches_protocol() -> None:
    for name in ("execute", "execute_many", "fetch_all", "fetch_one", "commit"):
        assert hasattr(DatabaseProtocol, name)
        assert callable(getattr(Database, name))
