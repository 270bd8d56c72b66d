"""Repository layer for SQL persistence and query access."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aiosqlite import Row

    from ccw.data.protocols import DatabaseProtocol


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


class UserProjectRepository:
    """SQL query repository for user-registered projects."""

    def __init__(self, db: DatabaseProtocol) -> None:
        self._db = db

    async def create(self, *, name: str, path: str, description: str = "") -> int:
        now = _now()
        cursor = await self._db.execute(
            """INSERT INTO user_projects (name, path, description, is_active, created_at, updated_at)
               VALUES (?, ?, ?, 1, ?, ?)""",
            (name, path, description, now, now),
        )
        await self._db.commit()
        if cursor.lastrowid is None:
            msg = f"Insert of user project {path!r} returned no row id"
            raise RuntimeError(msg)
        return cursor.lastrowid

    async def list_active_rows(self) -> list[Row]:
        return await self._db.fetch_all(
            "SELECT * FROM user_projects WHERE is_active = 1 ORDER BY created_at DESC, id DESC"
        )

    async def get_row(self, project_id: int) -> Row | None:
        return await self._db.fetch_one(
            "SELECT * FROM user_projects WHERE id = ?",
            (project_id,),
        )

    async def get_row_by_path(self, path: str) -> Row | None:
        """Latest record for ``path``, active or not."""
        return await self._db.fetch_one(
            "SELECT * FROM user_projects WHERE path = ? ORDER BY is_active DESC, id DESC LIMIT 1",
            (path,),
        )

    async def active_path_exists(self, path: str) -> bool:
        row = await self._db.fetch_one(
            "SELECT COUNT(*) as cnt FROM user_projects WHERE path = ? AND is_active = 1",
            (path,),
        )
        return bool(row and int(row["cnt"]) > 0)

    async def update(
        self,
        project_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> None:
        assignments: list[str] = []
        params: list[str | int] = []
        if name is not None:
            assignments.append("name = ?")
            params.append(name)
        if description is not None:
            assignments.append("description = ?")
            params.append(description)
        if is_active is not None:
            assignments.append("is_active = ?")
            params.append(int(is_active))
        assignments.append("updated_at = ?")
        params.extend([_now(), project_id])
        await self._db.execute(
            f"UPDATE user_projects SET {', '.join(assignments)} WHERE id = ?",
            tuple(params),
        )
        await self._db.commit()

    async def soft_delete(self, project_id: int) -> None:
        await self.update(project_id, is_active=False)

    async def hard_delete(self, project_id: int) -> None:
        await self._db.execute("DELETE FROM user_projects WHERE id = ?", (project_id,))
        await self._db.commit()


class SettingsRepository:
    """SQL query repository for the ``app_settings`` key/value table."""

    def __init__(self, db: DatabaseProtocol) -> None:
        self._db = db

    async def get_many(self, keys: list[str]) -> dict[str, str]:
        if not keys:
            return {}
        placeholders = ",".join("?" for _ in keys)
        rows = await self._db.fetch_all(
            f"SELECT key, value FROM app_settings WHERE key IN ({placeholders})",
            tuple(keys),
        )
        return {str(row["key"]): str(row["value"]) for row in rows}

    async def set_many(self, values: dict[str, str]) -> None:
        if not values:
            return
        now = _now()
        await self._db.execute_many(
            """INSERT INTO app_settings (key, value, created_at, updated_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            [(key, value, now, now) for key, value in values.items()],
        )
        await self._db.commit()
