"""Helpers for triggering new-task email notifications."""

from __future__ import annotations

import http.client
import json
from typing import Any, Iterable, Protocol, runtime_checkable
from urllib import error, request

import structlog


@runtime_checkable
class Notifier(Protocol):
    def send(self, emails: list[str], task_title: str) -> bool:
        """Alert the given recipients about a task."""


def build_broadcast_payload(emails: Iterable[str], task_title: str) -> dict[str, Any]:
    """Construct the body expected by the broadcast-email endpoint."""

    unique: list[str] = []
    for email in emails:
        if email and email not in unique:
            unique.append(email)
    return {"emails": unique, "taskTitle": task_title}


class HTTPBroadcastNotifier:
    """POST recipient lists to the broadcast-email endpoint."""

    def __init__(self, endpoint: str, api_key: str | None = None, *, timeout: float = 10.0):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._logger = structlog.get_logger(__name__)

    def send(self, emails: list[str], task_title: str) -> bool:
        payload = build_broadcast_payload(emails, task_title)
        if not payload["emails"]:
            return False

        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
            with request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
        except error.HTTPError as exc:
            self._logger.warning("notify.rejected", status=exc.code, task_title=task_title)
            return False
        except (OSError, ValueError, http.client.HTTPException) as exc:
            # URLError, timeouts and dropped connections are all OSError.
            self._logger.warning("notify.request_failed", error=str(exc), task_title=task_title)
            return False

        if not 200 <= status < 300:
            self._logger.warning("notify.rejected", status=status, task_title=task_title)
            return False

        self._logger.info("notify.sent", recipients=len(payload["emails"]), task_title=task_title)
        return True
