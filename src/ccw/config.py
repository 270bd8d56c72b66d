"""Configuration for CCW."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    claude_dir: Path = field(default_factory=lambda: Path.home() / ".claude")
    data_dir: Path = field(default_factory=lambda: Path.home() / ".local" / "share" / "ccw")

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "workspace.db"
