from __future__ import annotations

import json
from pathlib import Path

import pytest

from workassign.adapters import FirestoreExportAdapter
from workassign.core import AssignmentEvaluator
from workassign.pipeline import DraftLoader, RosterLoadError, RosterLoader
from workassign.schemas import TaskDraft, Worker


def write_jsonl(path: Path, records: list[object]) -> None:
    path.write_text("\n".join(json.dumps(item, ensure_ascii=False) for item in records), encoding="utf-8")


def test_roster_loader_raises_on_invalid_json(tmp_path: Path):
    loader = RosterLoader(FirestoreExportAdapter())
    path = tmp_path / "users.jsonl"
    path.write_text('{"id": "w1", "role": "worker"}\n{invalid}', encoding="utf-8")

    with pytest.raises(RosterLoadError) as exc:
        loader.load_workers(path)
    assert "invalid JSON" in str(exc.value)
    assert [worker.id for worker in exc.value.partial] == ["w1"]


def test_roster_loader_skips_invalid_and_reports(tmp_path: Path):
    loader = RosterLoader(FirestoreExportAdapter())
    path = tmp_path / "tasks.jsonl"
    write_jsonl(
        path,
        [
            {"id": "t1", "status": "in-progress", "assignedTo": "w1"},
            {"id": "t2", "status": "archived"},
        ],
    )

    with pytest.raises(RosterLoadError) as exc:
        loader.load_tasks(path)
    error = exc.value
    assert error.errors[0].startswith("record 2:")
    assert len(error.partial) == 1


def test_roster_loader_reads_json_array_and_drops_admins(tmp_path: Path):
    loader = RosterLoader(FirestoreExportAdapter())
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps(
            [
                {"uid": "w1", "fullName": "Asha", "accountStatus": "active", "skills": ["Python"]},
                {"id": "a1", "fullName": "Root", "role": "admin", "accountStatus": "active"},
            ]
        ),
        encoding="utf-8",
    )

    workers = loader.load_workers(path)

    assert [worker.id for worker in workers] == ["w1"]


def test_roster_loader_rejects_non_object_documents(tmp_path: Path):
    loader = RosterLoader(FirestoreExportAdapter())
    path = tmp_path / "users.json"
    path.write_text('[{"id": "w1"}, 42]', encoding="utf-8")

    with pytest.raises(RosterLoadError) as exc:
        loader.load_workers(path)
    assert "record 2: document must be a JSON object" in exc.value.errors


def test_adapter_converts_firestore_timestamps():
    adapter = FirestoreExportAdapter()

    task = adapter.parse_task({"id": "t1", "createdAt": {"_seconds": 0, "_nanoseconds": 0}})

    assert task.model_extra["createdAt"] == "1970-01-01T00:00:00Z"


def test_adapter_rejects_unknown_account_status():
    adapter = FirestoreExportAdapter()

    with pytest.raises(ValueError):
        adapter.parse_worker({"id": "w1", "accountStatus": "vacation"})
    assert adapter.can_handle('{"uid": "w1"}')
    assert not adapter.can_handle("{broken")


def test_draft_loader_invalid_json(tmp_path: Path):
    path = tmp_path / "draft.json"
    path.write_text("{invalid", encoding="utf-8")

    with pytest.raises(ValueError):
        DraftLoader().load(path)


def test_tasks_with_checklists_still_count_toward_workload(tmp_path: Path):
    loader = RosterLoader(FirestoreExportAdapter())
    path = tmp_path / "tasks.jsonl"
    write_jsonl(
        path,
        [
            {"id": "t1", "status": "in-progress", "assignedTo": "w1"},
            {
                "id": "t2",
                "status": "in-progress",
                "assignedTo": "w1",
                "progress": None,
                "checklist": [{"text": "x", "completed": False, "id": "c1"}],
            },
        ],
    )

    tasks = loader.load_tasks(path)
    worker = Worker(id="w1", fullName="Asha", accountStatus="active", skills=["Python"])
    result = AssignmentEvaluator().evaluate(TaskDraft(title="ETL", skills=["Python"]), [worker], tasks)

    assert [task.id for task in tasks] == ["t1", "t2"]
    assert result.analysis.candidates[0].status == "BUSY (Too many tasks)"
    assert result.candidates == []
