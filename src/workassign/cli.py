"""Typer CLI entrypoint for task auto-assignment."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import AssignmentContainer, create_container
from .core import DECISION_MODES
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas import AdminSession
from .schemas.config import load_config

app = typer.Typer(help="Cehpoint Work task auto-assignment CLI.")


def _load_settings(config: Path | None) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_name="config")
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


def _build_container(
    config: Path | None,
    *,
    notify_endpoint: str | None = None,
    notify_api_key: str | None = None,
) -> AssignmentContainer:
    """Build the container from the YAML config, with CLI options taking precedence."""
    settings = _load_settings(config)
    cli_notifications = {"endpoint": notify_endpoint, "api_key": notify_api_key}
    cli_notifications = {key: value for key, value in cli_notifications.items() if value}
    if cli_notifications:
        settings["notifications"] = {**settings.get("notifications", {}), **cli_notifications}
    return create_container(settings=settings)


@app.command()
def evaluate(
    draft: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Task draft JSON path."),
    workers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Users export (JSON or JSONL)."),
    tasks: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Tasks export (JSON or JSONL)."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    as_json: bool = typer.Option(False, "--json", help="Print the structured analysis instead of the trace log."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Show which workers would receive a task and why."""
    configure_logging(log_level)
    container = _build_container(config)
    run = container.pipeline().evaluate(draft_path=draft, workers_path=workers, tasks_path=tasks)

    if as_json:
        rendered: dict[str, Any] = {
            "candidates": [worker.id for worker in run.result.candidates],
            "best_worker": run.result.best_worker.id if run.result.best_worker else None,
            "analysis": asdict(run.result.analysis),
            "errors": run.errors,
        }
        typer.echo(json.dumps(rendered, ensure_ascii=False, indent=2))
        return

    typer.echo(run.result.log, nl=False)
    for message in run.errors:
        typer.echo(f"! skipped {message}", err=True)


@app.command()
def create(
    draft: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Task draft JSON path."),
    workers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Users export (JSON or JSONL)."),
    tasks: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Tasks export (JSON or JSONL)."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path for the task record.",
    ),
    admin_id: str = typer.Option(..., help="Id of the admin creating the task."),
    admin_email: Optional[str] = typer.Option(None, help="Email of the admin creating the task."),
    mode: str = typer.Option("assign", help="assign | broadcast | open"),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    notify_endpoint: Optional[str] = typer.Option(None, help="Broadcast email API endpoint."),
    notify_api_key: Optional[str] = typer.Option(None, help="Broadcast email API key."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Evaluate a draft, decide how to publish it and write the task record."""
    if mode not in DECISION_MODES:
        raise typer.BadParameter(f"Mode must be one of {', '.join(DECISION_MODES)}", param_name="mode")

    configure_logging(log_level)
    container = _build_container(
        config,
        notify_endpoint=notify_endpoint,
        notify_api_key=notify_api_key,
    )
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None
    notifier = container.notifier()

    payload = pipeline.run(
        draft_path=draft,
        workers_path=workers,
        tasks_path=tasks,
        output_path=output,
        session=AdminSession(admin_id=admin_id, email=admin_email),
        mode=mode,
        audit_logger=audit_logger,
        notifier=notifier,
    )
    task = payload["task"]
    typer.echo(
        f"Task {task['title']!r} saved as {task['status']}"
        f" ({payload['decision']['kind']}). Result written to {output}."
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
