"""Argument vector construction for the claude CLI."""

from __future__ import annotations

# Dated model ids mapped to the CLI's short aliases
MODEL_ALIASES: dict[str, str] = {
    "claude-3-opus-20240229": "opus",
    "claude-3-5-sonnet-20241022": "sonnet",
    "claude-3-5-haiku-20241022": "haiku",
    "claude-sonnet-4-20250514": "sonnet",
    "claude-3-7-sonnet-20250219": "sonnet",
}

BASE_ARGS: tuple[str, ...] = ("--print", "--output-format", "json")


def resolve_model_alias(model_id: str) -> str:
    """Return the CLI alias for a known model id, or the id unchanged."""
    return MODEL_ALIASES.get(model_id, model_id)


def build_command_args(model_id: str | None = None) -> list[str]:
    """Build the argument vector (without the executable) for one print-mode run.

    The prompt is never part of the arguments; it is written to stdin.
    """
    args = list(BASE_ARGS)
    if model_id and model_id != "default":
        args.extend(["--model", resolve_model_alias(model_id)])
    return args
