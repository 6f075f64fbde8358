"""Structured exception hierarchy following RFC 7807 Problem Details.

The scoring engine itself never raises these; they come from the input
boundary (window parsing, event loading, the CLI).
"""

from __future__ import annotations

from typing import Any


class RewindError(Exception):
    """Base exception for all Change Rewind domain errors."""

    status_code: int = 500
    error_type: str = "about:blank"
    title: str = "Internal Error"

    def __init__(
        self,
        detail: str = "",
        *,
        instance: str = "",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail or self.title
        self.instance = instance
        self.extra = extra or {}
        super().__init__(self.detail)

    def to_problem_detail(self) -> dict[str, Any]:
        """RFC 7807 Problem Details JSON object."""
        body: dict[str, Any] = {
            "type": self.error_type,
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
        }
        if self.instance:
            body["instance"] = self.instance
        if self.extra:
            body.update(self.extra)
        return body


class ValidationError(RewindError):
    status_code = 400
    error_type = "urn:rewind:error:validation"
    title = "Validation Error"


class NotFoundError(RewindError):
    status_code = 404
    error_type = "urn:rewind:error:not-found"
    title = "Not Found"
