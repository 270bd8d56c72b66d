"""Session-level models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class SessionStatus(StrEnum):
    """Lifecycle of a session as seen by the workspace."""

    PLACEHOLDER = "placeholder"
    RECONCILING = "reconciling"
    CONFIRMED = "confirmed"


class Session(BaseModel):
    """One conversation thread scoped to a project."""

    id: str
    project_id: str
    project_path: str = ""
    created_at: datetime
    status: SessionStatus = SessionStatus.CONFIRMED
    first_message_preview: str | None = None
    created_locally: bool = False
    view_token: str = ""

    @property
    def is_pending(self) -> bool:
        """True until the engine has assigned a real id."""
        return self.status is not SessionStatus.CONFIRMED


class ConversationProps(BaseModel):
    """What the conversation renderer is handed for the current selection."""

    key: str
    session: Session | None = None
    project_path: str
