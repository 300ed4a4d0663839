"""Result types for one orchestration run.

``KbOutcome`` is the per-stage result of KB retrieval; synthesis consumes it
with an exhaustive ``match``. The pydantic models are the caller-facing
output, serialized with camelCase aliases.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class KbSkipped:
    """Retrieval was not attempted (greeting, or disabled by the caller)."""

    reason: str


@dataclass(frozen=True)
class KbUnavailable:
    """No usable KB: not configured, not found, no tool, or empty content."""

    reason: str


@dataclass(frozen=True)
class KbUnreachable:
    """The KB server was found but launching or talking to it failed."""

    error: str


@dataclass(frozen=True)
class KbSuccess:
    snippet: str
    tool: str


KbOutcome = Union[KbSkipped, KbUnavailable, KbUnreachable, KbSuccess]


def new_correlation_id() -> str:
    return str(uuid.uuid4())


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class OrchestrationResult(_WireModel):
    """A best-effort answer with every degradation explained."""

    status: Literal["ok"] = "ok"
    answer: str
    confidence: Literal["high", "medium"]
    kb_used: bool
    disclaimers: list[str] = Field(default_factory=list)
    correlation_id: str = Field(default_factory=new_correlation_id)
    diagnostics: dict[str, Any] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    message: str
    code: str


class OrchestrationError(_WireModel):
    """Terminal error (input validation, or an unexpected internal failure)."""

    status: Literal["error"] = "error"
    error: ErrorDetail
    correlation_id: str = Field(default_factory=new_correlation_id)

    @classmethod
    def create(cls, message: str, code: str = "validation", correlation_id: str | None = None) -> "OrchestrationError":
        return cls(
            error=ErrorDetail(message=message, code=code),
            correlation_id=correlation_id or new_correlation_id(),
        )
