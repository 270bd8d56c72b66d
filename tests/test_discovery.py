"""Tests for discovery module."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
from result import Err, Ok

from ccw.config import Config
from ccw.data.discovery import (
    _decode_project_id,
    _extract_prompt_text,
    _load_sessions_index,
    _scan_transcript_header,
    discover_projects,
    discover_sessions,
    encode_project_path,
    parse_timestamp,
)
from ccw.models.projects import ProjectOrigin, project_name_from_path
from ccw.models.sessions import SessionStatus
from ccw.services.discovery_service import DiscoveryService

SAMPLE_PROJECT_PATH = "/Users/test/myproject"
SAMPLE_PROJECT_ID = "-Users-test-myproject"
OTHER_PROJECT_PATH = "/Users/test/other.app"
OTHER_PROJECT_ID = "-Users-test-other-app"


class TestEncodeProjectPath:
    def test_basic_path(self) -> None:
        assert encode_project_path("/Users/foo/src/myproject") == "-Users-foo-src-myproject"

    def test_dots_and_underscores(self) -> None:
        assert encode_project_path("/Users/foo/my_app.v2") == "-Users-foo-my-app-v2"

    def test_strips_whitespace(self) -> None:
        assert encode_project_path("  /a/b ") == "-a-b"


class TestDecodeProjectId:
    def test_basic_path(self) -> None:
        assert _decode_project_id("-Users-foo-src-myproject") == "/Users/foo/src/myproject"

    def test_empty(self) -> None:
        assert _decode_project_id("") == ""


class TestProjectNameFromPath:
    def test_basic(self) -> None:
        assert project_name_from_path("/Users/foo/src/myproject") == "myproject"

    def test_empty(self) -> None:
        assert project_name_from_path("") == ""

    def test_trailing_slash(self) -> None:
        assert project_name_from_path("/foo/bar/") == "bar"


class TestDiscoverProjects:
    def test_discovers_projects(self, test_config: Config) -> None:
        projects = discover_projects(test_config)
        assert [p.project_id for p in projects] == [OTHER_PROJECT_ID, SAMPLE_PROJECT_ID]
        sample = projects[1]
        assert sample.project_path == SAMPLE_PROJECT_PATH
        assert sample.project_name == "myproject"
        assert sample.session_count == 2

    def test_path_from_transcript_when_no_index(self, test_config: Config) -> None:
        other = next(p for p in discover_projects(test_config) if p.project_id == OTHER_PROJECT_ID)
        assert other.project_path == OTHER_PROJECT_PATH
        assert other.project_name == "other.app"

    def test_missing_dir(self, tmp_path: Path) -> None:
        config = Config(claude_dir=tmp_path / "nonexistent", data_dir=tmp_path / "data")
        assert discover_projects(config) == []

    def test_falls_back_to_decoded_id(self, tmp_path: Path) -> None:
        claude_dir = tmp_path / ".claude"
        project_dir = claude_dir / "projects" / "-srv-api"
        project_dir.mkdir(parents=True)
        (project_dir / "abc.jsonl").write_text("not json\n", encoding="utf-8")
        config = Config(claude_dir=claude_dir, data_dir=tmp_path / "data")
        projects = discover_projects(config)
        assert [p.project_path for p in projects] == ["/srv/api"]

    def test_root_project_is_named_unknown(self, tmp_path: Path) -> None:
        claude_dir = tmp_path / ".claude"
        project_dir = claude_dir / "projects" / "-"
        project_dir.mkdir(parents=True)
        (project_dir / "abc.jsonl").write_text("not json\n", encoding="utf-8")
        config = Config(claude_dir=claude_dir, data_dir=tmp_path / "data")
        projects = discover_projects(config)
        assert [(p.project_path, p.project_name) for p in projects] == [("/", "Unknown")]


class TestDiscoverSessions:
    def test_sessions_newest_first(self, test_config: Config) -> None:
        sessions = discover_sessions(test_config, SAMPLE_PROJECT_ID)
        assert [s.session_id for s in sessions] == ["test-session-002", "test-session-001"]

    def test_metadata_from_index_and_header(self, test_config: Config) -> None:
        by_id = {s.session_id: s for s in discover_sessions(test_config, SAMPLE_PROJECT_ID)}
        indexed = by_id["test-session-001"]
        assert indexed.first_prompt == "Fix the login bug"
        assert indexed.created == "2026-01-10T10:00:00.000Z"
        scanned = by_id["test-session-002"]
        assert scanned.project_path == SAMPLE_PROJECT_PATH
        assert scanned.created == "2026-01-11T09:30:00Z"
        assert scanned.first_prompt == "Add   a\nREADME"

    @pytest.mark.parametrize("project_id", ["", "..", "../outside", "-missing"])
    def test_rejects_unknown_or_escaping_ids(self, test_config: Config, project_id: str) -> None:
        assert discover_sessions(test_config, project_id) == []


class TestHelpers:
    def test_extract_prompt_text(self) -> None:
        assert _extract_prompt_text({"content": " hi "}) == "hi"
        assert (
            _extract_prompt_text(
                {"content": [{"type": "image"}, {"type": "text", "text": "look"}]}
            )
            == "look"
        )
        assert _extract_prompt_text("nope") == ""

    def test_scan_header_skips_bad_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_text(
            "\n".join(
                [
                    "garbage",
                    "[1, 2]",
                    json.dumps({"type": "user", "cwd": "/x", "message": {"content": "go"}}),
                ]
            ),
            encoding="utf-8",
        )
        header = _scan_transcript_header(path)
        assert header.cwd == "/x"
        assert header.first_prompt == "go"
        assert header.timestamp == ""

    def test_load_sessions_index_malformed(self, tmp_path: Path) -> None:
        (tmp_path / "sessions-index.json").write_text("{bad", encoding="utf-8")
        assert _load_sessions_index(tmp_path) == {}

    def test_parse_timestamp(self) -> None:
        parsed = parse_timestamp("2026-01-10T10:00:00Z")
        assert parsed == datetime(2026, 1, 10, 10, 0, tzinfo=UTC)
        naive = parse_timestamp("2026-01-10T10:00:00")
        assert naive.tzinfo is UTC
        assert parse_timestamp("bogus", fallback_ms=1_000) == datetime.fromtimestamp(1, tz=UTC)
        assert parse_timestamp("", fallback_ms=0) == datetime.fromtimestamp(0, tz=UTC)


class TestDiscoveryService:
    @pytest.mark.asyncio
    async def test_lists_projects(self, test_config: Config) -> None:
        result = await DiscoveryService(test_config).list_discovered_projects()
        assert isinstance(result, Ok)
        projects = result.ok_value
        assert all(p.origin is ProjectOrigin.DISCOVERED for p in projects)
        assert all(p.internal_id is None for p in projects)
        sample = next(p for p in projects if p.id == SAMPLE_PROJECT_ID)
        assert sample.session_count == 2
        assert sample.path == SAMPLE_PROJECT_PATH

    @pytest.mark.asyncio
    async def test_lists_confirmed_sessions(self, test_config: Config) -> None:
        result = await DiscoveryService(test_config).list_sessions(SAMPLE_PROJECT_ID)
        assert isinstance(result, Ok)
        sessions = result.ok_value
        assert all(s.status is SessionStatus.CONFIRMED for s in sessions)
        assert all(not s.created_locally for s in sessions)
        assert sessions[0].first_message_preview == "Add a README"
        assert sessions[1].created_at == datetime(2026, 1, 10, 10, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_sessions_for_registered_path(
        self, tmp_path: Path, transcript_writer: Callable[..., Path]
    ) -> None:
        claude_dir = tmp_path / ".claude"
        work = "/home/me/work.repo"
        transcript_writer(
            claude_dir / "projects" / encode_project_path(work), "abc", cwd=work, prompt="hi"
        )
        config = Config(claude_dir=claude_dir, data_dir=tmp_path / "data")
        result = await DiscoveryService(config).list_sessions(encode_project_path(work))
        assert isinstance(result, Ok)
        assert [s.id for s in result.ok_value] == ["abc"]

    @pytest.mark.asyncio
    async def test_scan_errors_are_wrapped(
        self, test_config: Config, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(*_args: object) -> list[object]:
            raise OSError("permission denied")

        monkeypatch.setattr("ccw.services.discovery_service.discover_projects", boom)
        monkeypatch.setattr("ccw.services.discovery_service.discover_sessions", boom)
        service = DiscoveryService(test_config)

        projects = await service.list_discovered_projects()
        sessions = await service.list_sessions(SAMPLE_PROJECT_ID)
        assert isinstance(projects, Err)
        assert "permission denied" in projects.err_value.message
        assert isinstance(sessions, Err)
