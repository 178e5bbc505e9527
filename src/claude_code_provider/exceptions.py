"""Exceptions for claude-code-provider."""

from __future__ import annotations

from enum import Enum

INSTALL_HINT = "npm install -g @anthropic-ai/claude-code"


class FailureKind(str, Enum):
    """Classification of every way a completion can fail."""

    EXECUTABLE_NOT_FOUND = "executable_not_found"
    TIMEOUT = "timeout"
    LAUNCH_FAILURE = "launch_failure"
    NON_ZERO_EXIT = "non_zero_exit"
    EMPTY_OUTPUT = "empty_output"
    REPORTED_ERROR = "reported_error"
    TRUNCATED = "truncated"
    MALFORMED_JSON = "malformed_json"
    NOT_JSON = "not_json"
    SCHEMA_MISSING = "schema_missing"
    INVALID_REQUEST = "invalid_request"


class ProviderError(Exception):
    """Base exception for provider errors."""

    kind: FailureKind | None = None

    def __init__(self, message: str, kind: FailureKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ExecutableNotFoundError(ProviderError):
    """Raised when no executable candidate could be spawned."""

    kind = FailureKind.EXECUTABLE_NOT_FOUND

    def __init__(self, tried: list[str] | tuple[str, ...], message: str | None = None):
        self.tried = tuple(tried)
        super().__init__(message or f"Claude Code CLI not found (tried: {', '.join(self.tried)})")


class ProcessTimeoutError(ProviderError):
    """Raised when the CLI does not exit before the deadline."""

    kind = FailureKind.TIMEOUT

    def __init__(self, elapsed_ms: int):
        self.elapsed_ms = elapsed_ms
        super().__init__(f"Claude Code CLI timed out after {elapsed_ms}ms")


class LaunchFailureError(ProviderError):
    """Raised when the OS refuses to start the CLI for a reason other than absence."""

    kind = FailureKind.LAUNCH_FAILURE

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        super().__init__(f"Claude Code CLI failed to launch ({error_code}): {message}")


class NonZeroExitError(ProviderError):
    """Raised when the CLI exits with a non-zero status."""

    kind = FailureKind.NON_ZERO_EXIT

    def __init__(self, exit_code: int, stderr: str):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Claude Code CLI exited with code {exit_code}: {stderr}")


class ResponseError(ProviderError):
    """Raised when CLI output cannot be turned into a usable result."""

    def __init__(self, kind: FailureKind, message: str, raw_snippet: str = ""):
        self.raw_snippet = raw_snippet
        super().__init__(message, kind)


class SchemaMissingError(ProviderError):
    """Raised when object generation is requested without a schema."""

    kind = FailureKind.SCHEMA_MISSING

    def __init__(self) -> None:
        super().__init__("Schema is required for object generation")


class InvalidRequestError(ProviderError):
    """Raised when generation params or messages fail validation."""

    kind = FailureKind.INVALID_REQUEST
