from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from workassign.cli import _build_container, app
from workassign.notifications import HTTPBroadcastNotifier

USERS = [
    {"id": "a", "fullName": "Asha", "email": "asha@example.com", "accountStatus": "active", "skills": ["Python"]},
    {"id": "b", "fullName": "Ben", "email": "ben@example.com", "accountStatus": "suspended", "skills": ["Python"]},
    {"id": "c", "fullName": "Chen", "accountStatus": "active", "skills": ["python"]},
    {"id": "d", "fullName": "Dara", "accountStatus": "active", "skills": ["Java"]},
    {"id": "root", "fullName": "Admin", "role": "admin", "accountStatus": "active", "skills": ["Python"]},
]

TASKS = [
    {"id": "t1", "status": "in-progress", "assignedTo": "c"},
    {"id": "t2", "status": "assigned", "assignedTo": "c"},
    {"id": "t3", "status": "completed", "assignedTo": "a"},
]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def inputs(tmp_path: Path) -> dict[str, Path]:
    draft_path = tmp_path / "draft.json"
    workers_path = tmp_path / "users.jsonl"
    tasks_path = tmp_path / "tasks.json"
    config_path = tmp_path / "config.yaml"

    draft_path.write_text(
        json.dumps({"title": "Data cleanup", "category": "development", "skills": ["Python"]}),
        encoding="utf-8",
    )
    workers_path.write_text("\n".join(json.dumps(user) for user in USERS), encoding="utf-8")
    tasks_path.write_text(json.dumps(TASKS), encoding="utf-8")
    config_path.write_text("assignment:\n  skill_threshold_percent: 40\n", encoding="utf-8")
    return {"draft": draft_path, "workers": workers_path, "tasks": tasks_path, "config": config_path}


def test_cli_evaluate_prints_trace_log(runner: CliRunner, inputs: dict[str, Path]) -> None:
    result = runner.invoke(
        app,
        [
            "evaluate",
            "--draft",
            str(inputs["draft"]),
            "--workers",
            str(inputs["workers"]),
            "--tasks",
            str(inputs["tasks"]),
            "--config",
            str(inputs["config"]),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Auto-Assignment Debug Log:" in result.output
    assert "[Ben]: Match 100% (1/1), Active: 0, Account: suspended. Status: INACTIVE (Status: suspended)" in result.output
    assert "[Chen]: Match 100% (1/1), Active: 2, Account: active. Status: BUSY (Too many tasks)" in result.output
    assert "Status: LOW SKILL (0%)" in result.output
    assert "[Admin]" not in result.output
    assert "=> Result: Found 1 candidates. Best match: Asha" in result.output


def test_cli_evaluate_json_output(runner: CliRunner, inputs: dict[str, Path]) -> None:
    result = runner.invoke(
        app,
        [
            "evaluate",
            "--draft",
            str(inputs["draft"]),
            "--workers",
            str(inputs["workers"]),
            "--tasks",
            str(inputs["tasks"]),
            "--json",
        ],
    )

    assert result.exit_code == 0, result.output
    rendered = json.loads(result.stdout)
    assert rendered["candidates"] == ["a", "d"]
    assert rendered["best_worker"] == "a"
    assert len(rendered["analysis"]["candidates"]) == 4


def test_cli_create_writes_assigned_task(runner: CliRunner, inputs: dict[str, Path], tmp_path: Path) -> None:
    output_path = tmp_path / "out" / "task.json"

    result = runner.invoke(
        app,
        [
            "create",
            "--draft",
            str(inputs["draft"]),
            "--workers",
            str(inputs["workers"]),
            "--tasks",
            str(inputs["tasks"]),
            "--output",
            str(output_path),
            "--admin-id",
            "root",
            "--config",
            str(inputs["config"]),
            "--log-level",
            "WARNING",
        ],
    )

    assert result.exit_code == 0, result.output
    assert output_path.exists()

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["task"]["status"] == "in-progress"
    assert rendered["task"]["assignedTo"] == "a"
    assert rendered["task"]["createdBy"] == "root"
    assert rendered["decision"]["kind"] == "assigned"
    assert rendered["evaluation"]["candidates"] == ["a"]
    assert rendered["metadata"]["worker_count"] == 4
    assert rendered["metadata"]["errors"] == []
    assert rendered["notified"] is False


def test_cli_create_rejects_unknown_mode(runner: CliRunner, inputs: dict[str, Path], tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "create",
            "--draft",
            str(inputs["draft"]),
            "--workers",
            str(inputs["workers"]),
            "--tasks",
            str(inputs["tasks"]),
            "--output",
            str(tmp_path / "task.json"),
            "--admin-id",
            "root",
            "--mode",
            "auto",
        ],
    )

    assert result.exit_code != 0
    assert not (tmp_path / "task.json").exists()


def test_cli_rejects_non_mapping_config(runner: CliRunner, inputs: dict[str, Path], tmp_path: Path) -> None:
    bad_config = tmp_path / "bad.yaml"
    bad_config.write_text("- just\n- a list\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "evaluate",
            "--draft",
            str(inputs["draft"]),
            "--workers",
            str(inputs["workers"]),
            "--tasks",
            str(inputs["tasks"]),
            "--config",
            str(bad_config),
        ],
    )

    assert result.exit_code != 0


def test_cli_notify_endpoint_keeps_yaml_notification_settings(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "notifications:\n"
        "  endpoint: http://yaml.test/api/send-broadcast-email\n"
        "  api_key: from-yaml\n"
        "  timeout: 2\n",
        encoding="utf-8",
    )

    notifier = _build_container(
        config_path,
        notify_endpoint="http://cli.test/api/send-broadcast-email",
    ).notifier()

    assert isinstance(notifier, HTTPBroadcastNotifier)
    assert notifier._endpoint == "http://cli.test/api/send-broadcast-email"
    assert notifier._api_key == "from-yaml"
    assert notifier._timeout == 2

    overridden = _build_container(
        config_path,
        notify_endpoint="http://cli.test/api/send-broadcast-email",
        notify_api_key="from-cli",
    ).notifier()
    assert overridden._api_key == "from-cli"
    assert overridden._timeout == 2
