"""Assignment pipeline assembly and execution."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

import pendulum
import structlog

from . import __version__
from .adapters import DocumentAdapter, FirestoreExportAdapter
from .core import AssignmentEvaluator, AssignmentResult, TaskPlan, plan_task
from .notifications import Notifier
from .schemas import AdminSession, Task, TaskDraft, Worker

T = TypeVar("T")


@dataclass(slots=True)
class EvaluationRun:
    """Inputs and outcome of one evaluation."""

    draft: TaskDraft
    workers: list[Worker]
    tasks: list[Task]
    result: AssignmentResult
    errors: list[str] = field(default_factory=list)


class RosterLoadError(ValueError):
    """Raised when roster loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Any]):
        super().__init__("Roster loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Roster loading failed: {self.errors}"


class RosterLoader:
    """Load user and task exports through a document adapter.

    Files may hold a JSON array of documents or one document per line.
    """

    def __init__(self, adapter: DocumentAdapter):
        self._adapter = adapter

    def load_workers(self, path: Path) -> list[Worker]:
        """Load the users export, keeping only worker accounts."""
        try:
            users = self._load(path, self._adapter.parse_worker)
        except RosterLoadError as exc:
            raise RosterLoadError(exc.errors, _workers_only(exc.partial)) from exc
        return _workers_only(users)

    def load_tasks(self, path: Path) -> list[Task]:
        return self._load(path, self._adapter.parse_task)

    def _load(self, path: Path, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        records: list[T] = []
        errors: list[str] = []
        for idx, document, problem in self._iter_documents(path):
            if problem:
                errors.append(f"record {idx}: {problem}")
                continue
            try:
                records.append(parse(document))
            except ValueError as exc:
                errors.append(f"record {idx}: {exc}")
        if errors:
            raise RosterLoadError(errors, records)
        return records

    @staticmethod
    def _iter_documents(path: Path) -> Iterator[tuple[int, dict[str, Any], str | None]]:
        text = path.read_text(encoding="utf-8")
        if text.lstrip().startswith("["):
            try:
                items = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON array in {path.name}: {exc}") from exc
            for idx, item in enumerate(items, start=1):
                if not isinstance(item, dict):
                    yield idx, {}, "document must be a JSON object"
                    continue
                yield idx, item, None
            return

        for idx, line in enumerate(text.splitlines(), start=1):
            raw = line.strip()
            if not raw:
                continue
            try:
                item = json.loads(raw)
            except json.JSONDecodeError as exc:
                yield idx, {}, f"invalid JSON ({exc})"
                continue
            if not isinstance(item, dict):
                yield idx, {}, "document must be a JSON object"
                continue
            yield idx, item, None


class DraftLoader:
    """Load task draft documents."""

    def load(self, path: Path) -> TaskDraft:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid task draft JSON: {exc}") from exc
        return TaskDraft.model_validate(data)


class OutputWriter:
    """Persist pipeline output."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class AssignmentPipeline:
    """Load rosters, evaluate a draft and persist the resulting task."""

    def __init__(
        self,
        *,
        evaluator: AssignmentEvaluator,
        roster_loader: RosterLoader | None = None,
        draft_loader: DraftLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._rosters = roster_loader or RosterLoader(FirestoreExportAdapter())
        self._drafts = draft_loader or DraftLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def evaluate(
        self,
        *,
        draft_path: Path,
        workers_path: Path,
        tasks_path: Path,
    ) -> EvaluationRun:
        draft = self._drafts.load(draft_path)
        errors: list[str] = []
        workers = self._load_partial(self._rosters.load_workers, workers_path, "workers", errors)
        tasks = self._load_partial(self._rosters.load_tasks, tasks_path, "tasks", errors)

        result = self._evaluator.evaluate(draft, workers, tasks)
        self._logger.info(
            "assignment.evaluated",
            task_title=draft.title,
            worker_count=len(workers),
            task_count=len(tasks),
            candidate_count=len(result.candidates),
            best_worker=result.best_worker.id if result.best_worker else None,
            outcome=result.analysis.outcome,
        )
        return EvaluationRun(
            draft=draft,
            workers=workers,
            tasks=tasks,
            result=result,
            errors=errors,
        )

    def run(
        self,
        *,
        draft_path: Path,
        workers_path: Path,
        tasks_path: Path,
        output_path: Path,
        session: AdminSession,
        mode: str = "assign",
        audit_logger: AuditLogger | None = None,
        notifier: Notifier | None = None,
    ) -> dict[str, Any]:
        run = self.evaluate(
            draft_path=draft_path,
            workers_path=workers_path,
            tasks_path=tasks_path,
        )
        draft, result = run.draft, run.result
        plan = plan_task(draft, result, session, mode=mode)
        self._logger.info(
            "task.planned",
            decision=plan.decision.kind,
            status=plan.record["status"],
            assigned_to=plan.record.get("assignedTo"),
            created_by=session.admin_id,
        )

        payload = {
            "metadata": {
                "worker_count": len(run.workers),
                "task_count": len(run.tasks),
                "errors": run.errors,
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "evaluation": serialize_result(result),
            "decision": serialize_plan(plan),
            "task": plan.record,
            "notified": False,
        }
        # The task record is persisted before anyone is notified.
        self._writer.write(output_path, payload)

        notified = self._notify(notifier, plan.recipients, draft.title)
        if notified:
            payload["notified"] = True
            self._writer.write(output_path, payload)

        if audit_logger:
            audit_logger.append(
                {
                    "task_title": draft.title,
                    "created_by": session.admin_id,
                    "decision": plan.decision.kind,
                    "candidate_ids": [worker.id for worker in result.candidates],
                    "best_worker": result.best_worker.id if result.best_worker else None,
                    "outcome": result.analysis.outcome,
                    "recipients": plan.recipients,
                    "notified": notified,
                }
            )

        return payload

    def _notify(self, notifier: Notifier | None, recipients: list[str], task_title: str) -> bool:
        if not notifier or not recipients:
            return False
        try:
            return bool(notifier.send(recipients, task_title))
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("notify.failed", error=str(exc), task_title=task_title)
            return False

    def _load_partial(
        self,
        load: Callable[[Path], list[T]],
        path: Path,
        kind: str,
        errors: list[str],
    ) -> list[T]:
        try:
            return load(path)
        except RosterLoadError as exc:
            errors.extend(f"{kind} {message}" for message in exc.errors)
            self._logger.warning("roster.partial_load", roster=kind, errors=exc.errors)
            return list(exc.partial)


def _workers_only(users: list[Worker]) -> list[Worker]:
    return [user for user in users if user.role == "worker"]


def serialize_result(result: AssignmentResult) -> dict[str, Any]:
    """JSON-ready view of an evaluation."""
    return {
        "candidates": [worker.id for worker in result.candidates],
        "best_worker": result.best_worker.id if result.best_worker else None,
        "analysis": asdict(result.analysis),
        "log": result.log,
    }


def serialize_plan(plan: TaskPlan) -> dict[str, Any]:
    decision = asdict(plan.decision)
    for key, value in decision.items():
        if isinstance(value, tuple):
            decision[key] = list(value)
    decision["recipients"] = plan.recipients
    return decision
