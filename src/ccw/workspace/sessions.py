"""Placeholder sessions shown before the engine assigns a real id."""

from __future__ import annotations

import itertools
import re
import time
from datetime import UTC, datetime

from ccw.models.projects import Project
from ccw.models.sessions import Session, SessionStatus

PLACEHOLDER_PREFIX = "new-session-"
PREVIEW_LENGTH = 60

_PLACEHOLDER_PATTERN = re.compile(rf"^{PLACEHOLDER_PREFIX}\d+-\d+$")
_counter = itertools.count(1)


def new_placeholder_id() -> str:
    """A process-unique id that can never be mistaken for an engine UUID."""
    return f"{PLACEHOLDER_PREFIX}{time.time_ns() // 1_000_000}-{next(_counter)}"


def is_placeholder_id(session_id: str) -> bool:
    return bool(_PLACEHOLDER_PATTERN.match(session_id))


def create_placeholder(project: Project) -> Session:
    placeholder_id = new_placeholder_id()
    return Session(
        id=placeholder_id,
        project_id=project.id,
        project_path=project.path,
        created_at=datetime.now(tz=UTC),
        status=SessionStatus.PLACEHOLDER,
        first_message_preview=None,
        created_locally=True,
        view_token=placeholder_id,
    )


def make_preview(text: str) -> str | None:
    """Collapse whitespace and cut to the list preview length."""
    collapsed = " ".join(text.split())
    if not collapsed:
        return None
    if len(collapsed) <= PREVIEW_LENGTH:
        return collapsed
    return collapsed[:PREVIEW_LENGTH].rstrip() + "..."


def view_key(project: Project | None, session: Session | None) -> str | None:
    """Render identity for the conversation view.

    Sessions created in this window are keyed by the placeholder id they
    started with, so the swap to the engine id keeps the same view instance
    while each new placeholder still gets a fresh one.
    """
    if project is None or session is None:
        return None
    if session.created_locally and session.view_token:
        return f"new:{project.id}:{session.view_token}"
    return f"session:{session.id}"
