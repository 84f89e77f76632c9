"""Core assignment engine components."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

# NOTE: keep imports explicit for export clarity.
from .assignment import (
    AssignmentConfig,
    AssignmentEvaluator,
    AssignmentExplanation,
    AssignmentResult,
    CandidateDiagnostic,
    WorkerMatch,
    count_active_tasks,
)
from .decision import (
    DECISION_MODES,
    Assigned,
    Broadcast,
    OpenUnassigned,
    TaskDecision,
    TaskPlan,
    build_task_record,
    decide,
    notification_recipients,
    plan_task,
)
from ..schemas import Task, TaskDraft, Worker


@runtime_checkable
class Evaluator(Protocol):
    """Contract for selecting workers for a task draft."""

    def evaluate(
        self,
        task_draft: TaskDraft,
        all_workers: Sequence[Worker],
        all_tasks: Sequence[Task],
    ) -> AssignmentResult:
        """Return ranked candidates and diagnostics for the draft."""


__all__ = [
    "DECISION_MODES",
    "Assigned",
    "AssignmentConfig",
    "AssignmentEvaluator",
    "AssignmentExplanation",
    "AssignmentResult",
    "Broadcast",
    "CandidateDiagnostic",
    "Evaluator",
    "OpenUnassigned",
    "TaskDecision",
    "TaskPlan",
    "WorkerMatch",
    "build_task_record",
    "count_active_tasks",
    "decide",
    "notification_recipients",
    "plan_task",
]
