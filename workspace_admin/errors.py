"""Exception types and HttpError classification."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from googleapiclient.errors import HttpError

if TYPE_CHECKING:
    from workspace_admin.batch import BatchResult

_RATE_LIMIT_REASONS = (
    "quota",
    "ratelimitexceeded",
    "userratelimitexceeded",
    "rate limit",
)


class WorkspaceAdminError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(WorkspaceAdminError, ValueError):
    """Missing or malformed configuration."""


class BatchError(WorkspaceAdminError):
    """One or more items of a bulk operation failed."""

    def __init__(self, result: "BatchResult") -> None:
        self.result = result
        super().__init__(
            f"{result.label}: {len(result.failed)} of {result.total} items failed"
        )


def _status(error: HttpError) -> int:
    return int(getattr(error.resp, "status", 0) or 0)


def _text(error: HttpError) -> str:
    """Message and reasons from the response body.

    ``str(error)`` embeds the request URI, which carries group and user keys,
    so it is never matched against.
    """
    content = getattr(error, "content", None) or b""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        body = json.loads(content)
    except ValueError:
        return content.lower()

    detail = body.get("error") if isinstance(body, dict) else None
    if not isinstance(detail, dict):
        return str(detail or "").lower()
    parts = [str(detail.get("message") or ""), str(detail.get("status") or "")]
    for item in detail.get("errors") or []:
        if isinstance(item, dict):
            parts.append(str(item.get("reason") or ""))
            parts.append(str(item.get("message") or ""))
    return " ".join(parts).lower()


def is_retryable(error: HttpError) -> bool:
    """Rate limiting, quota exhaustion and server-side failures."""
    status = _status(error)
    if status == 429 or status >= 500:
        return True
    if status == 403:
        text = _text(error)
        return any(reason in text for reason in _RATE_LIMIT_REASONS)
    return False


def is_duplicate(error: HttpError) -> bool:
    return _status(error) == 409 or "duplicate" in _text(error)


def is_not_found(error: HttpError) -> bool:
    return _status(error) == 404


def is_bad_request(error: HttpError) -> bool:
    return _status(error) == 400
