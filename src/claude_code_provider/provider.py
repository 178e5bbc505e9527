"""ClaudeCodeProvider - completions from the local claude CLI instead of the API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any, NoReturn

from pydantic import ValidationError

from claude_code_provider.command import build_command_args
from claude_code_provider.exceptions import (
    INSTALL_HINT,
    ExecutableNotFoundError,
    FailureKind,
    InvalidRequestError,
    ProviderError,
    ResponseError,
    SchemaMissingError,
)
from claude_code_provider.extractor import ResponseExtractor, bounded_snippet, parse_json_payload
from claude_code_provider.launcher import ProcessLauncher, resolve_executable_candidates
from claude_code_provider.prompts import format_messages_for_cli, inject_schema_instructions
from claude_code_provider.settings import Settings, settings
from claude_code_provider.types import (
    ExtractionFailure,
    ExtractionSuccess,
    GenerationParams,
    InvocationRequest,
    Message,
    ObjectResult,
    StreamResult,
    TextResult,
    Usage,
)

logger = logging.getLogger(__name__)

TRUNCATED_GUIDANCE = (
    "Claude Code CLI response appears to be truncated. "
    "Try reducing the size of your input or breaking it into smaller sections."
)


class ClaudeCodeProvider:
    """Provider that shells out to the claude CLI for every completion.

    The CLI authenticates with the user's local login, so there is no API key
    and no client object. Token counts are always zero; the CLI only reports
    cost.
    """

    name = "ClaudeCodeProvider"

    def __init__(
        self,
        config: Settings | None = None,
        launcher: ProcessLauncher | None = None,
        extractor: ResponseExtractor | None = None,
    ):
        self.config = config or settings
        self.launcher = launcher or ProcessLauncher()
        self.extractor = extractor or ResponseExtractor(self.config.snippet_chars)

    def validate_auth(self, params: Any = None) -> bool:
        """The CLI uses local authentication; there is nothing to check."""
        return True

    def get_client(self, params: Any = None) -> None:
        """Not applicable for a CLI-backed provider."""
        return None

    def validate_params(self, params: GenerationParams | Mapping[str, Any]) -> GenerationParams:
        if isinstance(params, GenerationParams):
            return params
        try:
            return GenerationParams.model_validate(params)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid generation params: {e}") from e

    def validate_messages(self, messages: Sequence[Message]) -> None:
        if not messages:
            raise InvalidRequestError("Invalid or empty messages array provided")
        for message in messages:
            if not message.content:
                raise InvalidRequestError(f"Invalid message format: {message.role} message has no content")

    async def generate_text(self, params: GenerationParams | Mapping[str, Any]) -> TextResult:
        """Generate text for a chat-style message list."""
        try:
            request = self.validate_params(params)
            self.validate_messages(request.messages)
            return await self._generate_text(request)
        except Exception as e:
            self._handle_error("text generation", e)

    async def stream_text(self, params: GenerationParams | Mapping[str, Any]) -> StreamResult:
        """Return a one-chunk stream around a regular generation.

        The CLI has no incremental output mode; this exists only for callers that
        expect the streaming shape.
        """
        logger.debug("[STREAM] Claude Code CLI does not support streaming. Using regular generation.")
        result = await self.generate_text(params)

        usage: asyncio.Future[Usage] = asyncio.get_running_loop().create_future()
        usage.set_result(result.usage)

        async def single_chunk() -> AsyncIterator[str]:
            yield result.text

        return StreamResult(text_stream=single_chunk(), usage=usage, text=result.text)

    async def generate_object(self, params: GenerationParams | Mapping[str, Any]) -> ObjectResult:
        """Generate a JSON value matching ``params.schema``."""
        try:
            request = self.validate_params(params)
            self.validate_messages(request.messages)
            if request.schema_ is None:
                raise SchemaMissingError()

            logger.debug(f"[PROVIDER] Generating Claude Code object with model preference: {request.model_id}")
            messages = inject_schema_instructions(request.messages, request.schema_)
            text_result = await self._generate_text(request.model_copy(update={"messages": messages}))

            try:
                parsed = parse_json_payload(text_result.text)
            except ValueError as e:
                raise ResponseError(
                    FailureKind.MALFORMED_JSON,
                    f"Failed to parse Claude Code CLI response as JSON: {e}",
                    bounded_snippet(text_result.text, self.config.snippet_chars),
                ) from e

            return ObjectResult(object=parsed, usage=text_result.usage)
        except Exception as e:
            self._handle_error("object generation", e)

    async def _generate_text(self, request: GenerationParams) -> TextResult:
        logger.debug(f"[PROVIDER] Generating Claude Code text with model preference: {request.model_id}")
        prompt = format_messages_for_cli(request.messages)

        if len(prompt) > self.config.long_prompt_chars:
            logger.warning(
                f"[PROVIDER] Very long prompt detected ({len(prompt)} chars). "
                "This might cause issues with Claude Code CLI."
            )

        args = build_command_args(request.model_id)
        logger.debug(f"[PROVIDER] Executing Claude Code CLI with args {args}, prompt length: {len(prompt)} chars")

        result = await self.launcher.invoke(
            InvocationRequest(
                executable_path_candidates=resolve_executable_candidates(self.config),
                argument_vector=tuple(args),
                input_payload=prompt,
                timeout_ms=request.timeout_ms or self.config.timeout_ms,
            )
        )
        if result.stderr:
            logger.warning(f"[PROVIDER] Claude Code CLI stderr: {result.stderr}")
        logger.debug(f"[PROVIDER] Claude Code CLI stdout length: {len(result.stdout)} characters")

        response = self._structured_response(result.stdout, result.stderr)
        cost = _cost_from(response)
        logger.debug(f"[PROVIDER] Claude Code CLI response received. Cost: ${cost}")

        return TextResult(text=str(response.get("result") or ""), usage=Usage(cost_usd=cost))

    def _structured_response(self, stdout: str, stderr: str) -> dict[str, Any]:
        match self.extractor.extract(stdout, stderr):
            case ExtractionFailure(kind=kind, message=message, raw_snippet=snippet):
                raise ResponseError(kind, message, snippet)
            case ExtractionSuccess(structured=dict() as response):
                pass
            case ExtractionSuccess():
                raise ResponseError(
                    FailureKind.MALFORMED_JSON,
                    "Claude Code CLI response is not a JSON object",
                    bounded_snippet(stdout, self.config.snippet_chars),
                )

        # Valid JSON can still describe a failed run
        if response.get("is_error"):
            detail = response.get("error") or response.get("result") or "Unknown error"
            raise ResponseError(
                FailureKind.REPORTED_ERROR,
                f"Claude Code CLI error: {detail}",
                bounded_snippet(stdout, self.config.snippet_chars),
            )
        return response

    def _handle_error(self, operation: str, error: Exception) -> NoReturn:
        if isinstance(error, ExecutableNotFoundError):
            logger.error("[PROVIDER] Claude Code CLI not found. Please ensure it is installed and in PATH.")
            raise ExecutableNotFoundError(
                error.tried,
                f"Claude Code CLI not found. Please install it first: {INSTALL_HINT}",
            ) from error
        if isinstance(error, ResponseError) and error.kind is FailureKind.TRUNCATED:
            raise ResponseError(FailureKind.TRUNCATED, TRUNCATED_GUIDANCE, error.raw_snippet) from error
        if isinstance(error, ProviderError):
            logger.error(f"[PROVIDER] {operation} failed ({error.kind.value if error.kind else 'error'}): {error}")
            raise error
        logger.error(f"[PROVIDER] Unexpected failure during {operation}: {error}")
        raise ProviderError(f"Claude Code CLI error during {operation}: {error}") from error


def _cost_from(response: dict[str, Any]) -> float:
    # Newer CLI releases report total_cost_usd instead of cost_usd
    if "cost_usd" in response:
        cost = response["cost_usd"]
    else:
        cost = response.get("total_cost_usd", 0)
    try:
        return float(cost)
    except (TypeError, ValueError):
        logger.warning(f"[PROVIDER] Ignoring non-numeric cost value: {cost!r}")
        return 0.0
