"""Unit tests for services using fakes/mocks (no real DB files)."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from result import Err, Ok

from ccw.config import Config
from ccw.data.repositories import SettingsRepository, UserProjectRepository
from ccw.services.container import ServiceContainer
from ccw.services.discovery_service import DiscoveryService
from ccw.services.errors import ErrorKind, ServiceError, adapter_failure
from ccw.services.registry_service import RegistryService
from ccw.services.settings_service import SettingsService


class FakeDB:
    def __init__(self) -> None:
        self.fetch_all_result: list[dict[str, object]] = []
        self.fetch_one_result: dict[str, object] | None = None
        self.executed: list[tuple[str, tuple[object, ...]]] = []
        self.executed_many: list[tuple[str, list[tuple[object, ...]]]] = []
        self.commits = 0

    async def execute(self, sql: str, params: tuple[object, ...] = ()) -> SimpleNamespace:
        self.executed.append((sql, params))
        return SimpleNamespace(lastrowid=42)

    async def execute_many(self, sql: str, params_seq: list[tuple[object, ...]]) -> None:
        self.executed_many.append((sql, params_seq))

    async def fetch_all(
        self, sql: str, params: tuple[object, ...] = ()
    ) -> list[dict[str, object]]:
        self.executed.append((sql, params))
        return self.fetch_all_result

    async def fetch_one(
        self, sql: str, params: tuple[object, ...] = ()
    ) -> dict[str, object] | None:
        self.executed.append((sql, params))
        return self.fetch_one_result

    async def commit(self) -> None:
        self.commits += 1


def test_service_error_formatting() -> None:
    error = adapter_failure("Listing sessions", RuntimeError("boom"))
    assert error.kind is ErrorKind.ADAPTER_FAILURE
    assert str(error) == "Listing sessions failed: boom"
    assert error.user_visible is False
    assert ServiceError(ErrorKind.DUPLICATE_PATH, "dup").user_visible is True


@pytest.mark.asyncio
async def test_user_project_repository_update_builds_partial_sql() -> None:
    db = FakeDB()
    repo = UserProjectRepository(db)  # type: ignore[arg-type]

    await repo.update(7, name="New")
    sql, params = db.executed[-1]
    assert "name = ?" in sql
    assert "description" not in sql
    assert "is_active" not in sql
    assert params[0] == "New"
    assert params[-1] == 7
    assert db.commits == 1

    await repo.soft_delete(7)
    sql, params = db.executed[-1]
    assert "is_active = ?" in sql
    assert params[0] == 0


@pytest.mark.asyncio
async def test_user_project_repository_create_returns_rowid() -> None:
    db = FakeDB()
    repo = UserProjectRepository(db)  # type: ignore[arg-type]
    assert await repo.create(name="a", path="/a", description="d") == 42
    assert db.commits == 1


@pytest.mark.asyncio
async def test_settings_repository_batches() -> None:
    db = FakeDB()
    repo = SettingsRepository(db)  # type: ignore[arg-type]
    db.fetch_all_result = [{"key": "a", "value": "1"}]

    assert await repo.get_many(["a", "b"]) == {"a": "1"}
    sql, params = db.executed[-1]
    assert "IN (?,?)" in sql
    assert params == ("a", "b")

    await repo.set_many({"a": "2", "b": "3"})
    assert len(db.executed_many) == 1
    assert [row[0] for row in db.executed_many[0][1]] == ["a", "b"]
    assert db.commits == 1

    await repo.set_many({})
    assert len(db.executed_many) == 1


@pytest.mark.asyncio
async def test_registry_service_duplicate_check_runs_before_filesystem() -> None:
    db = FakeDB()
    db.fetch_one_result = {"cnt": 1}
    service = RegistryService(db)  # type: ignore[arg-type]

    result = await service.create_registered_project("/definitely/not/here")
    assert isinstance(result, Err)
    assert result.err_value.kind is ErrorKind.DUPLICATE_PATH
    assert not any(sql.startswith("INSERT") for sql, _ in db.executed)


@pytest.mark.asyncio
async def test_registry_service_wraps_db_errors() -> None:
    db = SimpleNamespace(fetch_all=AsyncMock(side_effect=RuntimeError("locked")))
    service = RegistryService(db)  # type: ignore[arg-type]
    result = await service.list_registered_projects()
    assert isinstance(result, Err)
    assert "locked" in result.err_value.message


@pytest.mark.asyncio
async def test_settings_service_wraps_db_errors() -> None:
    db = SimpleNamespace(
        fetch_all=AsyncMock(side_effect=RuntimeError("locked")),
        execute_many=AsyncMock(side_effect=RuntimeError("locked")),
    )
    service = SettingsService(db)  # type: ignore[arg-type]
    assert isinstance(await service.get_settings(["a"]), Err)
    assert isinstance(await service.set_setting("a", "1"), Err)


@pytest.mark.asyncio
async def test_service_container_create_and_close(tmp_path: Path) -> None:
    config = Config(claude_dir=tmp_path / ".claude", data_dir=tmp_path / "data")
    container = await ServiceContainer.create(config)
    try:
        assert config.db_path.exists()
        assert isinstance(container.registry_service, RegistryService)
        assert isinstance(container.discovery_service, DiscoveryService)
        assert isinstance(container.settings_service, SettingsService)
        listed = await container.registry_service.list_registered_projects()
        assert isinstance(listed, Ok)
        assert listed.ok_value == []
    finally:
        await container.close()
