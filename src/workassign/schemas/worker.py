from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

AccountStatus = Literal["pending", "active", "suspended", "terminated"]
UserRole = Literal["worker", "admin"]


def coerce_skill_list(value: Any) -> list[str]:
    """Treat absent or malformed skill lists as empty."""
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


class Worker(BaseModel):
    """Worker document as stored in the users collection.

    Only the fields the assignment engine reads are declared; everything else
    in the document is kept as-is in ``model_extra``.
    """

    id: str
    full_name: str = Field(default="", alias="fullName")
    email: str | None = None
    skills: list[str] = Field(default_factory=list)
    account_status: AccountStatus = Field(default="pending", alias="accountStatus")
    role: UserRole = "worker"

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("skills", mode="before")
    @classmethod
    def _normalize_skills(cls, value: Any) -> list[str]:
        return coerce_skill_list(value)

    @field_validator("full_name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def is_active(self) -> bool:
        return self.account_status == "active"
