"""Shared fixtures for CCW tests."""

from __future__ import annotations

import json
import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest

from ccw.config import Config
from ccw.data.db import Database

SAMPLE_PROJECT_PATH = "/Users/test/myproject"
SAMPLE_PROJECT_ID = "-Users-test-myproject"
OTHER_PROJECT_PATH = "/Users/test/other.app"
OTHER_PROJECT_ID = "-Users-test-other-app"


def _transcript_lines(session_id: str, cwd: str, prompt: str, timestamp: str) -> str:
    records = [
        {"type": "summary", "summary": "Sample", "leafUuid": "leaf-1"},
        {
            "type": "user",
            "sessionId": session_id,
            "cwd": cwd,
            "timestamp": timestamp,
            "message": {"role": "user", "content": prompt},
        },
        {
            "type": "assistant",
            "sessionId": session_id,
            "cwd": cwd,
            "timestamp": timestamp,
            "message": {"role": "assistant", "content": [{"type": "text", "text": "Sure."}]},
        },
    ]
    return "\n".join(json.dumps(record) for record in records) + "\n"


def write_transcript(
    project_dir: Path,
    session_id: str,
    *,
    cwd: str,
    prompt: str,
    timestamp: str = "2026-01-10T10:00:00Z",
    mtime: float | None = None,
) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / f"{session_id}.jsonl"
    path.write_text(_transcript_lines(session_id, cwd, prompt, timestamp), encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def tmp_claude_dir(tmp_path: Path) -> Path:
    """A Claude directory with two projects and three sessions."""
    claude_dir = tmp_path / ".claude"
    projects_dir = claude_dir / "projects"

    sample_dir = projects_dir / SAMPLE_PROJECT_ID
    write_transcript(
        sample_dir,
        "test-session-001",
        cwd=SAMPLE_PROJECT_PATH,
        prompt="Fix the login bug",
        mtime=1_700_000_100,
    )
    write_transcript(
        sample_dir,
        "test-session-002",
        cwd=SAMPLE_PROJECT_PATH,
        prompt="Add   a\nREADME",
        timestamp="2026-01-11T09:30:00Z",
        mtime=1_700_000_200,
    )
    index_data = {
        "version": 1,
        "entries": [
            {
                "sessionId": "test-session-001",
                "projectPath": SAMPLE_PROJECT_PATH,
                "created": "2026-01-10T10:00:00.000Z",
                "firstPrompt": "Fix the login bug",
            }
        ],
    }
    (sample_dir / "sessions-index.json").write_text(json.dumps(index_data), encoding="utf-8")

    write_transcript(
        projects_dir / OTHER_PROJECT_ID,
        "other-session-001",
        cwd=OTHER_PROJECT_PATH,
        prompt="Hello",
        mtime=1_700_000_300,
    )

    # A directory without transcripts is not a project.
    (projects_dir / "-Users-test-empty").mkdir(parents=True)
    return claude_dir


@pytest.fixture
def test_config(tmp_claude_dir: Path, tmp_path: Path) -> Config:
    """Config pointing at temporary test data."""
    return Config(claude_dir=tmp_claude_dir, data_dir=tmp_path / "data")


@pytest.fixture
async def test_db(tmp_path: Path) -> AsyncGenerator[Database]:
    """A fresh file-backed test database."""
    db_path = tmp_path / "test.db"
    db = Database(db_path)
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
async def in_memory_db() -> AsyncGenerator[Database]:
    """SQLite in-memory database for fast unit/integration tests."""
    db = Database(Path(":memory:"))
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
def project_dirs(tmp_path: Path) -> dict[str, Path]:
    """Real directories that can be registered as user projects."""
    dirs = {name: tmp_path / "work" / name for name in ("alpha", "beta", "gamma")}
    for path in dirs.values():
        path.mkdir(parents=True)
    return dirs


@pytest.fixture
def transcript_writer() -> Callable[..., Path]:
    """Write a small transcript file into a project directory."""
    return write_transcript
