"""Request, result and message types for claude-code-provider."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from claude_code_provider.exceptions import FailureKind


class InvocationRequest(BaseModel):
    """Everything the launcher needs for one CLI run.

    ``argument_vector`` never contains the executable itself; each entry of
    ``executable_path_candidates`` is prepended in turn.
    """

    model_config = ConfigDict(frozen=True)

    executable_path_candidates: tuple[str, ...] = Field(..., min_length=1)
    argument_vector: tuple[str, ...] = ()
    input_payload: str
    timeout_ms: int = Field(..., gt=0)


@dataclass
class InvocationResult:
    """Captured output of a CLI run that exited with status 0."""

    stdout: str
    stderr: str
    executable: str = ""
    execution_time: float = 0.0


class HandleState(str, Enum):
    PENDING = "pending"
    SETTLED = "settled"


@dataclass(frozen=True)
class ExtractionSuccess:
    structured: Any


@dataclass(frozen=True)
class ExtractionFailure:
    kind: FailureKind
    message: str
    raw_snippet: str = ""


ExtractionOutcome = ExtractionSuccess | ExtractionFailure


class Message(BaseModel):
    """A single role-tagged chat message."""

    role: Literal["system", "user", "assistant"]
    content: str


class GenerationParams(BaseModel):
    """Parameters accepted by the provider's generate/stream operations."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str = Field(..., min_length=1, alias="modelId")
    messages: list[Message] = Field(..., min_length=1)
    max_tokens: int | None = Field(default=None, gt=0, alias="maxTokens")
    temperature: float | None = Field(default=None, ge=0, le=1)
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    timeout_ms: int | None = Field(default=None, gt=0, alias="timeoutMs")


class Usage(BaseModel):
    """Usage metadata; the CLI reports cost but never token counts."""

    model_config = ConfigDict(populate_by_name=True)

    input_tokens: int = Field(default=0, alias="inputTokens")
    output_tokens: int = Field(default=0, alias="outputTokens")
    total_tokens: int = Field(default=0, alias="totalTokens")
    cost_usd: float = Field(default=0.0, alias="costUSD")


class TextResult(BaseModel):
    text: str
    usage: Usage


class ObjectResult(BaseModel):
    object: Any
    usage: Usage


@dataclass
class StreamResult:
    """Single-chunk stand-in for a streaming response.

    ``text_stream`` yields the complete text once and is then exhausted;
    ``usage`` is already resolved when this object is returned.
    """

    text_stream: AsyncIterator[str]
    usage: asyncio.Future[Usage]
    text: str
