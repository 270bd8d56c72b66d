"""Discover Claude Code projects and sessions from the engine's history store."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ccw.config import Config
from ccw.models.projects import project_name_from_path

logger = logging.getLogger(__name__)

_ENCODE_PATTERN = re.compile(r"[^A-Za-z0-9-]")
_HEADER_SCAN_LINES = 200


@dataclass
class DiscoveredSession:
    """A session transcript with the metadata needed for list views."""

    session_id: str
    project_id: str
    project_path: str
    file_path: Path
    mtime_ms: int
    created: str = ""
    first_prompt: str = ""


@dataclass
class DiscoveredProject:
    """A project directory under ``<claude_dir>/projects``."""

    project_id: str
    project_path: str
    project_name: str
    dir_path: Path
    last_activity_ms: int = 0
    session_files: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def session_count(self) -> int:
        return len(self.session_files)


@dataclass
class _TranscriptHeader:
    cwd: str = ""
    timestamp: str = ""
    first_prompt: str = ""


def encode_project_path(project_path: str) -> str:
    """Encode a path the way the engine names its project directories.

    '/Users/foo/my.app' -> '-Users-foo-my-app'
    """
    return _ENCODE_PATTERN.sub("-", project_path.strip())


def _decode_project_id(project_id: str) -> str:
    """Best-effort inverse of encode_project_path; lossy for '-', '.' and '_'."""
    if not project_id:
        return ""
    return project_id.replace("-", "/")


def discover_projects(config: Config) -> list[DiscoveredProject]:
    """Discover engine-known projects, most recently active first."""
    projects_dir = config.projects_dir
    if not projects_dir.is_dir():
        logger.info("Claude projects directory not found: %s", projects_dir)
        return []

    projects: list[DiscoveredProject] = []
    for entry in sorted(projects_dir.iterdir()):
        if not entry.is_dir():
            continue
        session_files = _session_files(entry)
        if not session_files:
            continue
        project_path = _resolve_project_path(entry, session_files)
        projects.append(
            DiscoveredProject(
                project_id=entry.name,
                project_path=project_path,
                project_name=project_name_from_path(project_path) or "Unknown",
                dir_path=entry,
                last_activity_ms=max(_mtime_ms(path) for path in session_files),
                session_files=tuple(session_files),
            )
        )

    projects.sort(key=lambda p: p.last_activity_ms, reverse=True)
    return projects


def discover_sessions(config: Config, project_id: str) -> list[DiscoveredSession]:
    """Discover the sessions of one project directory, newest first."""
    project_dir = config.projects_dir / project_id
    if project_id in {"", ".", ".."} or project_dir.parent != config.projects_dir:
        return []
    if not project_dir.is_dir():
        return []

    index_data = _load_sessions_index(project_dir)
    sessions: list[DiscoveredSession] = []
    for jsonl_path in _session_files(project_dir):
        session_id = jsonl_path.stem
        metadata = index_data.get(session_id, {})
        header = _scan_transcript_header(jsonl_path)
        project_path = (
            str(metadata.get("projectPath", "")).strip()
            or header.cwd
            or _decode_project_id(project_id)
        )
        sessions.append(
            DiscoveredSession(
                session_id=session_id,
                project_id=project_id,
                project_path=project_path,
                file_path=jsonl_path,
                mtime_ms=_mtime_ms(jsonl_path),
                created=str(metadata.get("created", "")) or header.timestamp,
                first_prompt=str(metadata.get("firstPrompt", "")) or header.first_prompt,
            )
        )

    sessions.sort(key=lambda s: s.mtime_ms, reverse=True)
    return sessions


def parse_timestamp(value: str, fallback_ms: int = 0) -> datetime:
    """Parse an ISO timestamp, falling back to a millisecond epoch value."""
    raw = value.strip()
    if raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparsable timestamp %r", raw)
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.fromtimestamp(fallback_ms / 1000, tz=UTC)


def _session_files(project_dir: Path) -> list[Path]:
    return sorted(path for path in project_dir.glob("*.jsonl") if path.is_file())


def _mtime_ms(path: Path) -> int:
    try:
        return int(path.stat().st_mtime * 1000)
    except OSError:
        return 0


def _resolve_project_path(project_dir: Path, session_files: list[Path]) -> str:
    index_data = _load_sessions_index(project_dir)
    for entry in index_data.values():
        project_path = str(entry.get("projectPath", "")).strip()
        if project_path:
            return project_path
    for session_file in session_files:
        header = _scan_transcript_header(session_file)
        if header.cwd:
            return header.cwd
    return _decode_project_id(project_dir.name)


def _scan_transcript_header(path: Path) -> _TranscriptHeader:
    """Read the working directory, start time and first user prompt of a transcript."""
    header = _TranscriptHeader()
    try:
        with open(path, encoding="utf-8") as file:
            for line_number, line in enumerate(file):
                if line_number >= _HEADER_SCAN_LINES:
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    raw = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(raw, dict):
                    continue
                cwd = raw.get("cwd")
                if not header.cwd and isinstance(cwd, str):
                    header.cwd = cwd
                timestamp = raw.get("timestamp")
                if not header.timestamp and isinstance(timestamp, str):
                    header.timestamp = timestamp
                if not header.first_prompt and raw.get("type") == "user":
                    header.first_prompt = _extract_prompt_text(raw.get("message"))
                if header.cwd and header.timestamp and header.first_prompt:
                    break
    except OSError:
        logger.warning("Failed to read transcript header from %s", path)
    return header


def _extract_prompt_text(message: object) -> str:
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str) and text.strip():
                    return text.strip()
    return ""


def _load_sessions_index(project_dir: Path) -> dict[str, dict[str, object]]:
    """Load sessions-index.json and return entries keyed by sessionId."""
    index_path = project_dir / "sessions-index.json"
    if not index_path.is_file():
        return {}
    try:
        with open(index_path, encoding="utf-8") as file:
            data = json.load(file)
        entries = data.get("entries", [])
        return {e["sessionId"]: e for e in entries if isinstance(e, dict) and "sessionId" in e}
    except (json.JSONDecodeError, OSError, AttributeError) as exc:
        logger.warning("Failed to load sessions index %s: %s", index_path, exc)
        return {}
