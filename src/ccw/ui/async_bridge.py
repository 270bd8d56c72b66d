"""Async bridge: qasync event loop integration for the PySide6 workspace."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

from PySide6.QtWidgets import QApplication
from qasync import QEventLoop

P = ParamSpec("P")
T = TypeVar("T")

logger = logging.getLogger(__name__)
_PENDING: set[asyncio.Task[Any]] = set()


def create_event_loop(app: QApplication) -> QEventLoop:
    """Create and install a qasync event loop bridging Qt and asyncio."""
    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    return loop


def async_slot(
    func: Callable[P, Coroutine[Any, Any, T]],
) -> Callable[P, None]:
    """Run a coroutine method as a fire-and-forget Qt slot.

    Usage::

        @async_slot
        async def _on_new_session_clicked(self) -> None:
            await self._orchestrator.new_session()
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> None:
        schedule(func(*args, **kwargs), name=func.__qualname__)

    return wrapper


def schedule(coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
    """Schedule a coroutine on the running loop, keeping a reference until it ends."""
    task: asyncio.Task[T] = asyncio.create_task(coro, name=name)
    _PENDING.add(task)
    task.add_done_callback(_finish)
    return task


def cancel_all_tasks() -> None:
    """Cancel every tracked task except the caller's own."""
    current = asyncio.current_task()
    for task in list(_PENDING):
        if task is not current:
            task.cancel()


def pending_tasks() -> int:
    return len(_PENDING)


def _finish(task: asyncio.Task[Any]) -> None:
    _PENDING.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Unhandled exception in task %s", task.get_name(), exc_info=exc)
