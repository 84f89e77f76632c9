from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .worker import coerce_skill_list

TaskStatus = Literal[
    "available",
    "assigned",
    "in-progress",
    "submitted",
    "completed",
    "rejected",
]

ACTIVE_TASK_STATUSES: frozenset[str] = frozenset({"assigned", "in-progress"})


class Task(BaseModel):
    """Persisted task document.

    Workload counting only needs id, status and assignee; other stored fields
    are kept in ``model_extra`` without validation.
    """

    id: str
    status: TaskStatus = "available"
    assigned_to: str | None = Field(default=None, alias="assignedTo")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_TASK_STATUSES


class TaskDraft(BaseModel):
    """Task submitted by an admin for auto-assignment, not yet persisted."""

    title: str = ""
    description: str = ""
    category: str = ""
    skills: list[str] = Field(default_factory=list)
    weekly_payout: float = Field(default=500.0, alias="weeklyPayout")
    deadline: str | None = None
    project_details: str | None = Field(default=None, alias="projectDetails")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("skills", mode="before")
    @classmethod
    def _normalize_skills(cls, value: Any) -> list[str]:
        return coerce_skill_list(value)
