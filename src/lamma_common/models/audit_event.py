"""One entry of lamma's action history."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


class AuditEvent(BaseModel):
    """A command run: who ran it, on which site or version, and how it ended."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str = ""
    action: str = ""
    target: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    result: Literal["success", "failure"] = "success"
    error: str | None = None
    duration_ms: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.result == "success"

    @property
    def outcome(self) -> str:
        """``success``, or the error message for a failed run."""
        return "success" if self.succeeded else (self.error or "failure")

    def to_jsonl(self) -> str:
        return self.model_dump_json()
