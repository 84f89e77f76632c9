"""Storage-boundary adapters."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..schemas import Task, Worker
from .firestore import FirestoreExportAdapter


@runtime_checkable
class DocumentAdapter(Protocol):
    """Storage document adapter contract.

    Implementations validate raw stored documents into the typed models the
    assignment engine consumes, raising ``ValueError`` for records that do not
    fit the schema.
    """

    source: str

    def can_handle(self, blob: bytes | str | dict[str, Any]) -> bool:
        """Return True when the adapter understands the given document."""

    def parse_worker(self, document: bytes | str | dict[str, Any]) -> Worker:
        """Parse a users-collection document."""

    def parse_task(self, document: bytes | str | dict[str, Any]) -> Task:
        """Parse a tasks-collection document."""


__all__ = ["DocumentAdapter", "FirestoreExportAdapter"]
