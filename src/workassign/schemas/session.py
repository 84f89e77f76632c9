"""Explicit admin session passed through task-creation calls."""

from __future__ import annotations

from dataclasses import dataclass

from .worker import Worker


@dataclass(frozen=True, slots=True)
class AdminSession:
    """Identity of the admin performing an action."""

    admin_id: str
    email: str | None = None

    def __post_init__(self) -> None:
        if not self.admin_id:
            raise ValueError("Admin session requires an admin id.")

    @classmethod
    def from_user(cls, user: Worker) -> "AdminSession":
        if user.role != "admin":
            raise ValueError(f"User {user.id!r} is not an admin.")
        return cls(admin_id=user.id, email=user.email)
