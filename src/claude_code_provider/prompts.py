"""Prompt construction for the claude CLI."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from claude_code_provider.types import Message

SCHEMA_INSTRUCTIONS_TEMPLATE = "You must respond with a valid JSON object that matches this schema: {schema}"


def format_messages_for_cli(messages: Sequence[Message]) -> str:
    """Flatten chat messages into the single prompt the CLI reads from stdin.

    The first system message becomes a ``System:`` preamble; user messages follow
    in order, separated by blank lines. Assistant turns are not replayed.
    """
    prompt = ""

    system_message = next((m for m in messages if m.role == "system"), None)
    if system_message is not None and system_message.content:
        prompt += f"System: {system_message.content}\n\n"

    prompt += "\n\n".join(m.content for m in messages if m.role == "user")
    return prompt


def build_schema_instructions(schema: dict[str, Any]) -> str:
    return SCHEMA_INSTRUCTIONS_TEMPLATE.format(schema=json.dumps(schema, separators=(",", ":")))


def inject_schema_instructions(messages: Sequence[Message], schema: dict[str, Any]) -> list[Message]:
    """Return a copy of ``messages`` whose system prompt demands JSON matching ``schema``."""
    instructions = build_schema_instructions(schema)
    modified = list(messages)

    for index, message in enumerate(modified):
        if message.role == "system":
            modified[index] = message.model_copy(update={"content": f"{message.content}\n\n{instructions}"})
            return modified

    modified.insert(0, Message(role="system", content=instructions))
    return modified
