"""Claude Code provider - completions from the locally installed claude CLI."""

from claude_code_provider.command import MODEL_ALIASES, build_command_args, resolve_model_alias
from claude_code_provider.exceptions import (
    ExecutableNotFoundError,
    FailureKind,
    InvalidRequestError,
    LaunchFailureError,
    NonZeroExitError,
    ProcessTimeoutError,
    ProviderError,
    ResponseError,
    SchemaMissingError,
)
from claude_code_provider.extractor import ResponseExtractor, extract, parse_json_payload
from claude_code_provider.launcher import ProcessHandle, ProcessLauncher, resolve_executable_candidates
from claude_code_provider.logging import configure_logging
from claude_code_provider.prompts import format_messages_for_cli, inject_schema_instructions
from claude_code_provider.provider import ClaudeCodeProvider
from claude_code_provider.settings import Settings, settings
from claude_code_provider.types import (
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionSuccess,
    GenerationParams,
    InvocationRequest,
    InvocationResult,
    Message,
    ObjectResult,
    StreamResult,
    TextResult,
    Usage,
)

__all__ = [
    "MODEL_ALIASES",
    "ClaudeCodeProvider",
    "ExecutableNotFoundError",
    "ExtractionFailure",
    "ExtractionOutcome",
    "ExtractionSuccess",
    "FailureKind",
    "GenerationParams",
    "InvalidRequestError",
    "InvocationRequest",
    "InvocationResult",
    "LaunchFailureError",
    "Message",
    "NonZeroExitError",
    "ObjectResult",
    "ProcessHandle",
    "ProcessLauncher",
    "ProcessTimeoutError",
    "ProviderError",
    "ResponseError",
    "ResponseExtractor",
    "SchemaMissingError",
    "Settings",
    "StreamResult",
    "TextResult",
    "Usage",
    "build_command_args",
    "configure_logging",
    "extract",
    "format_messages_for_cli",
    "inject_schema_instructions",
    "parse_json_payload",
    "resolve_executable_candidates",
    "resolve_model_alias",
    "settings",
]
