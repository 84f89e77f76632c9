"""Dependency injection container for the assignment service."""

from __future__ import annotations

from dependency_injector import containers, providers

from .adapters import FirestoreExportAdapter
from .core import AssignmentConfig, AssignmentEvaluator
from .notifications import HTTPBroadcastNotifier
from .pipeline import AssignmentPipeline, DraftLoader, RosterLoader


class AssignmentContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    document_adapter = providers.Singleton(FirestoreExportAdapter)

    roster_loader = providers.Singleton(RosterLoader, adapter=document_adapter)
    draft_loader = providers.Singleton(DraftLoader)

    assignment_config = providers.Singleton(AssignmentConfig)

    evaluator = providers.Singleton(AssignmentEvaluator, config=assignment_config)

    notifier = providers.Object(None)

    pipeline = providers.Factory(
        AssignmentPipeline,
        evaluator=evaluator,
        roster_loader=roster_loader,
        draft_loader=draft_loader,
    )


def create_container(*, settings: dict | None = None) -> AssignmentContainer:
    """Instantiate container with optional overrides."""

    container = AssignmentContainer()

    if not settings:
        return container

    assignment_settings = settings.get("assignment") or {}
    if assignment_settings:
        container.assignment_config.override(
            providers.Singleton(AssignmentConfig, **assignment_settings)
        )

    notification_settings = settings.get("notifications") or {}
    if notification_settings.get("endpoint"):
        container.notifier.override(
            providers.Singleton(
                HTTPBroadcastNotifier,
                notification_settings["endpoint"],
                notification_settings.get("api_key"),
                timeout=notification_settings.get("timeout", 10.0),
            )
        )

    return container
