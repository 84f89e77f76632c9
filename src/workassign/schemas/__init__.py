"""Pydantic schema definitions for stored users, tasks and drafts."""

from __future__ import annotations

from .session import AdminSession
from .task import ACTIVE_TASK_STATUSES, Task, TaskDraft, TaskStatus
from .worker import AccountStatus, UserRole, Worker

__all__ = [
    "ACTIVE_TASK_STATUSES",
    "AccountStatus",
    "AdminSession",
    "Task",
    "TaskDraft",
    "TaskStatus",
    "UserRole",
    "Worker",
]
