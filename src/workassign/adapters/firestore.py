"""Firestore export adapter."""

from __future__ import annotations

import json
from typing import Any

import pendulum
from pydantic import ValidationError

from ..schemas import Task, Worker

_TIMESTAMP_FIELDS = ("createdAt", "assignedAt", "submittedAt", "completedAt", "deadline")


class FirestoreExportAdapter:
    """Validate exported users/tasks documents into typed models."""

    source = "firestore"

    def can_handle(self, blob: bytes | str | dict[str, Any]) -> bool:
        try:
            data = self._load(blob)
        except ValueError:
            return False
        return isinstance(data, dict) and ("id" in data or "uid" in data)

    def parse_worker(self, document: bytes | str | dict[str, Any]) -> Worker:
        data = self._normalize(self._load(document))
        try:
            return Worker.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid user document {data.get('id')!r}: {exc}") from exc

    def parse_task(self, document: bytes | str | dict[str, Any]) -> Task:
        data = self._normalize(self._load(document))
        try:
            return Task.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid task document {data.get('id')!r}: {exc}") from exc

    def _normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        normalized = dict(data)
        if not normalized.get("id") and normalized.get("uid"):
            normalized["id"] = normalized["uid"]
        for key in _TIMESTAMP_FIELDS:
            if key in normalized:
                normalized[key] = self._timestamp(normalized[key])
        return normalized

    @staticmethod
    def _timestamp(value: Any) -> Any:
        if isinstance(value, dict):
            seconds = value.get("_seconds", value.get("seconds"))
            if seconds is not None:
                return pendulum.from_timestamp(int(seconds), tz="UTC").to_iso8601_string()
        return value

    @staticmethod
    def _load(blob: bytes | str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(blob, dict):
            return blob
        if isinstance(blob, bytes):
            blob = blob.decode("utf-8")
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as exc:
            raise ValueError("Invalid Firestore document") from exc
        if not isinstance(data, dict):
            raise ValueError("Firestore document must be a JSON object")
        return data
