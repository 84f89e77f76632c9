"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class AssignmentSettings(BaseModel):
    workload_limit: int | None = Field(default=None, ge=1)
    skill_threshold_percent: float | None = Field(default=None, ge=0.0, le=100.0)


class NotificationSettings(BaseModel):
    endpoint: str | None = None
    api_key: str | None = None
    timeout: float | None = Field(default=None, gt=0.0)


class AppConfig(BaseModel):
    assignment: AssignmentSettings = Field(default_factory=AssignmentSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        assignment = self.assignment.model_dump(exclude_none=True)
        if assignment:
            settings["assignment"] = assignment
        notifications = self.notifications.model_dump(exclude_none=True)
        if notifications:
            settings["notifications"] = notifications
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
