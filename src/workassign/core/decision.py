"""Turn an evaluation into the task document that gets persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

import pendulum

from ..schemas import AdminSession, TaskDraft
from .assignment import AssignmentResult

DecisionMode = Literal["assign", "broadcast", "open"]
DECISION_MODES: tuple[str, ...] = ("assign", "broadcast", "open")


@dataclass(frozen=True, slots=True)
class Assigned:
    """Task goes straight to the top-ranked worker."""

    worker_id: str
    worker_email: str | None = None
    kind: Literal["assigned"] = "assigned"


@dataclass(frozen=True, slots=True)
class Broadcast:
    """Task is visible only to the eligible candidates."""

    candidate_worker_ids: tuple[str, ...]
    candidate_emails: tuple[str, ...] = ()
    kind: Literal["broadcast"] = "broadcast"


@dataclass(frozen=True, slots=True)
class OpenUnassigned:
    """Task is open to every worker."""

    reason: str = ""
    kind: Literal["open"] = "open"


TaskDecision = Union[Assigned, Broadcast, OpenUnassigned]


@dataclass(slots=True)
class TaskPlan:
    """Decision together with the record it produces."""

    decision: TaskDecision
    record: dict[str, Any] = field(default_factory=dict)
    recipients: list[str] = field(default_factory=list)


def decide(result: AssignmentResult, mode: str) -> TaskDecision:
    """Pick the decision variant for the operator's chosen mode.

    Both ``assign`` and ``broadcast`` fall back to an open task when the
    evaluation produced no candidates.
    """
    if mode not in DECISION_MODES:
        raise ValueError(f"Unknown decision mode: {mode!r}")

    if mode == "open":
        return OpenUnassigned(reason="operator declined assignment")

    if not result.candidates or result.best_worker is None:
        return OpenUnassigned(reason=result.analysis.outcome)

    if mode == "assign":
        best = result.best_worker
        return Assigned(worker_id=best.id, worker_email=best.email)

    return Broadcast(
        candidate_worker_ids=tuple(worker.id for worker in result.candidates),
        candidate_emails=tuple(worker.email for worker in result.candidates if worker.email),
    )


def build_task_record(
    draft: TaskDraft,
    decision: TaskDecision,
    session: AdminSession,
    *,
    now: pendulum.DateTime | None = None,
) -> dict[str, Any]:
    """Return the task document in its stored (camelCase) shape."""
    timestamp = (now or pendulum.now("UTC")).to_iso8601_string()

    record: dict[str, Any] = {
        "title": draft.title.strip(),
        "description": draft.description.strip(),
        "category": draft.category.strip(),
        "skills": list(draft.skills),
        "weeklyPayout": draft.weekly_payout,
        "deadline": draft.deadline,
        "submissionUrl": "",
        "createdAt": timestamp,
        "createdBy": session.admin_id,
    }
    if draft.project_details:
        record["projectDetails"] = draft.project_details

    if isinstance(decision, Assigned):
        record.update(
            status="in-progress",
            assignedTo=decision.worker_id,
            assignedAt=timestamp,
        )
    elif isinstance(decision, Broadcast):
        record.update(
            status="available",
            assignedTo=None,
            candidateWorkerIds=list(decision.candidate_worker_ids),
        )
    else:
        record.update(status="available", assignedTo=None)
    return record


def notification_recipients(decision: TaskDecision) -> list[str]:
    if isinstance(decision, Assigned):
        return [decision.worker_email] if decision.worker_email else []
    if isinstance(decision, Broadcast):
        return list(decision.candidate_emails)
    return []


def plan_task(
    draft: TaskDraft,
    result: AssignmentResult,
    session: AdminSession,
    *,
    mode: str = "assign",
    now: pendulum.DateTime | None = None,
) -> TaskPlan:
    decision = decide(result, mode)
    return TaskPlan(
        decision=decision,
        record=build_task_record(draft, decision, session, now=now),
        recipients=notification_recipients(decision),
    )
