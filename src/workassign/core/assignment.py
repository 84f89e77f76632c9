"""Automatic worker selection for newly drafted tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from ..schemas import Task, TaskDraft, Worker

ELIGIBLE = "Eligible"
NO_SKILLS_OUTCOME = "No skills required by task. Skipping auto-assign."
NO_CANDIDATES_OUTCOME = "No suitable candidates found."


@dataclass
class AssignmentConfig:
    """Gates applied to every worker."""

    workload_limit: int = 2
    # Zero means the skill gate never rejects anyone.
    skill_threshold_percent: float = 0.0


@dataclass(slots=True)
class CandidateDiagnostic:
    """Per-worker accept/reject record."""

    worker_id: str
    worker_name: str
    match_percentage: float
    match_count: int
    total_required: int
    active_tasks: int
    status: str
    matched_skills: list[str] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return self.status == ELIGIBLE


@dataclass(slots=True)
class WorkerMatch:
    """Eligible worker with the data used to rank it."""

    worker: Worker
    matches: list[str]
    score: float
    active_tasks: int


@dataclass(slots=True)
class AssignmentExplanation:
    """Structured explanation shown to the admin before committing a task."""

    requirements: str
    task_skills: list[str]
    candidates: list[CandidateDiagnostic] = field(default_factory=list)
    outcome: str = ""


@dataclass(slots=True)
class AssignmentResult:
    """Evaluator output consumed by the task-creation workflow."""

    candidates: list[Worker]
    best_worker: Worker | None
    log: str
    analysis: AssignmentExplanation
    matches: list[WorkerMatch] = field(default_factory=list)

    @property
    def has_candidates(self) -> bool:
        return bool(self.candidates)


def count_active_tasks(workers: Iterable[Worker], tasks: Iterable[Task]) -> dict[str, int]:
    """Return the number of assigned or in-progress tasks held by each worker."""
    counts = {worker.id: 0 for worker in workers}
    for task in tasks:
        if not task.assigned_to or not task.is_active:
            continue
        if task.assigned_to in counts:
            counts[task.assigned_to] += 1
    return counts


class AssignmentEvaluator:
    """Rank active workers for a task draft and explain every decision."""

    def __init__(self, *, config: AssignmentConfig | None = None) -> None:
        self._config = config or AssignmentConfig()

    @property
    def requirements(self) -> str:
        return (
            f"Account Active AND Match >= {_format_number(self._config.skill_threshold_percent)}% skills"
            f" AND Active Tasks < {self._config.workload_limit}"
        )

    def evaluate(
        self,
        task_draft: TaskDraft,
        all_workers: Sequence[Worker],
        all_tasks: Sequence[Task],
    ) -> AssignmentResult:
        requirements = self.requirements
        lines = ["Auto-Assignment Debug Log:", f"- Requirement: {requirements}"]
        analysis = AssignmentExplanation(
            requirements=requirements,
            task_skills=list(task_draft.skills),
        )

        if not task_draft.skills:
            lines.append(f"- {NO_SKILLS_OUTCOME}")
            analysis.outcome = NO_SKILLS_OUTCOME
            return AssignmentResult(
                candidates=[],
                best_worker=None,
                log=_join(lines),
                analysis=analysis,
            )

        required = [skill.lower() for skill in task_draft.skills]
        lines.append(f"- Task Skills: {', '.join(required)}")

        workloads = count_active_tasks(all_workers, all_tasks)
        eligible: list[WorkerMatch] = []

        for worker in all_workers:
            diagnostic = self._diagnose(worker, required, workloads.get(worker.id, 0))
            analysis.candidates.append(diagnostic)
            lines.append(
                f"  - [{worker.full_name}]: Match {_format_percent(diagnostic.match_percentage)}%"
                f" ({diagnostic.match_count}/{diagnostic.total_required}),"
                f" Active: {diagnostic.active_tasks}, Account: {worker.account_status}."
                f" Status: {diagnostic.status}"
            )
            if diagnostic.eligible:
                eligible.append(
                    WorkerMatch(
                        worker=worker,
                        matches=list(diagnostic.matched_skills),
                        score=diagnostic.match_percentage,
                        active_tasks=diagnostic.active_tasks,
                    )
                )

        if not eligible:
            lines.append(f"=> Result: {NO_CANDIDATES_OUTCOME}")
            analysis.outcome = NO_CANDIDATES_OUTCOME
            return AssignmentResult(
                candidates=[],
                best_worker=None,
                log=_join(lines),
                analysis=analysis,
            )

        # Stable sort: full ties keep roster order.
        eligible.sort(key=lambda match: (-match.score, match.active_tasks))
        ranked = [match.worker for match in eligible]
        best = ranked[0]

        lines.append(f"=> Result: Found {len(ranked)} candidates. Best match: {best.full_name}")
        analysis.outcome = f"Found {len(ranked)} candidates. Top match: {best.full_name}"

        return AssignmentResult(
            candidates=ranked,
            best_worker=best,
            log=_join(lines),
            analysis=analysis,
            matches=eligible,
        )

    def _diagnose(self, worker: Worker, required: list[str], workload: int) -> CandidateDiagnostic:
        worker_skills = {skill.lower() for skill in worker.skills}
        matched = [skill for skill in required if skill in worker_skills]
        total = len(required)
        percentage = (len(matched) / total) * 100 if total else 0.0

        return CandidateDiagnostic(
            worker_id=worker.id,
            worker_name=worker.full_name,
            match_percentage=percentage,
            match_count=len(matched),
            total_required=total,
            active_tasks=workload,
            status=self._status(worker, workload, percentage),
            matched_skills=matched,
        )

    def _status(self, worker: Worker, workload: int, percentage: float) -> str:
        if not worker.is_active:
            return f"INACTIVE (Status: {worker.account_status})"
        if workload >= self._config.workload_limit:
            return "BUSY (Too many tasks)"
        if percentage < self._config.skill_threshold_percent:
            return f"LOW SKILL ({_format_percent(percentage)}%)"
        return ELIGIBLE


def _format_number(value: float) -> str:
    return f"{value:g}"


def _format_percent(value: float) -> str:
    return str(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _join(lines: list[str]) -> str:
    return "\n".join(lines) + "\n"
