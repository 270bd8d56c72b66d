"""Error values carried in ``Err`` results by the workspace services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    ADAPTER_FAILURE = "adapter-failure"
    DUPLICATE_PATH = "duplicate-path"
    INACCESSIBLE_PATH = "inaccessible-path"
    NOT_FOUND = "not-found"
    ORPHANED_INTERNAL_ID = "orphaned-internal-id"
    INVALID_OPERATION = "invalid-operation"


@dataclass(frozen=True)
class ServiceError:
    """A failure a caller can branch on by ``kind`` and show by ``message``."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def user_visible(self) -> bool:
        return self.kind is not ErrorKind.ADAPTER_FAILURE


def adapter_failure(operation: str, exc: BaseException) -> ServiceError:
    return ServiceError(ErrorKind.ADAPTER_FAILURE, f"{operation} failed: {exc}")
