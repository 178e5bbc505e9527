"""Recover structured JSON from raw claude CLI output.

The CLI mixes structured and unstructured output: partial writes, banner
text, crash messages. Extraction is strict first, then one lenient pass:

1. empty output and error markers are rejected outright
2. the whole trimmed text is parsed strictly
3. text with no ``{`` is not JSON
4. the span from the first ``{`` to the last ``}`` is parsed once
5. if that fails too, output not ending in ``}`` is reported as truncated,
   anything else as malformed
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from claude_code_provider.exceptions import FailureKind
from claude_code_provider.settings import settings
from claude_code_provider.types import ExtractionFailure, ExtractionOutcome, ExtractionSuccess

logger = logging.getLogger(__name__)

ERROR_MARKERS: tuple[str, ...] = ("Error:", "error:")
ERROR_MESSAGE_CHARS = 200


def bounded_snippet(text: str, limit: int | None = None) -> str:
    """Return the head and tail of ``text``, at most ``limit`` chars each."""
    limit = limit or settings.snippet_chars
    if len(text) <= limit * 2:
        return text
    omitted = len(text) - limit * 2
    return f"{text[:limit]}... ({omitted} chars omitted) ...{text[-limit:]}"


# Returned by a parse strategy that found nothing; None is a valid JSON value
NOT_FOUND = object()


def _parse_strict(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return NOT_FOUND


def _parse_brace_span(text: str) -> Any:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        return NOT_FOUND
    return _parse_strict(text[start : end + 1])


# Tried in priority order; each returns a parsed value or NOT_FOUND
PARSE_STRATEGIES: tuple[tuple[str, Callable[[str], Any]], ...] = (
    ("strict", _parse_strict),
    ("brace_span", _parse_brace_span),
)


def parse_json_payload(text: str) -> Any:
    """Parse ``text`` with each strategy in priority order.

    Raises:
        ValueError: if no strategy produced a value.
    """
    stripped = text.strip()
    for name, strategy in PARSE_STRATEGIES:
        value = strategy(stripped)
        if value is not NOT_FOUND:
            if name != "strict":
                logger.debug(f"[EXTRACT] Parsed payload using {name} strategy")
            return value
    raise ValueError("no JSON value found in payload")


class ResponseExtractor:
    """Turns captured CLI output into an ExtractionOutcome. Never raises."""

    def __init__(self, snippet_chars: int | None = None):
        self.snippet_chars = snippet_chars or settings.snippet_chars

    def extract(self, stdout: str, stderr: str = "") -> ExtractionOutcome:
        trimmed = stdout.strip()
        logger.debug(f"[EXTRACT] stdout={len(stdout)} chars, stderr={len(stderr)} chars")

        if not trimmed:
            return self._fail(FailureKind.EMPTY_OUTPUT, "Claude Code CLI returned empty response", stdout)

        if any(marker in stdout for marker in ERROR_MARKERS):
            logger.error(f"[EXTRACT] CLI reported an error in stdout: {stdout[: self.snippet_chars]}")
            return self._fail(
                FailureKind.REPORTED_ERROR,
                f"Claude Code CLI error detected in output: {stdout[:ERROR_MESSAGE_CHARS]}",
                stdout,
            )

        try:
            return ExtractionSuccess(json.loads(trimmed))
        except json.JSONDecodeError as exc:
            parse_error = exc

        logger.error(f"[EXTRACT] Failed to parse CLI JSON response: {parse_error}")
        logger.debug(f"[EXTRACT] Raw stdout: {self._snippet(stdout)}")

        if "{" not in trimmed:
            return self._fail(
                FailureKind.NOT_JSON,
                f"Claude Code CLI response is not valid JSON: {parse_error}",
                stdout,
            )

        recovered = _parse_brace_span(trimmed)
        if recovered is not NOT_FOUND:
            logger.debug("[EXTRACT] Recovered JSON object from surrounding output")
            return ExtractionSuccess(recovered)

        if not trimmed.endswith("}"):
            logger.error("[EXTRACT] Response appears to be truncated - doesn't end with closing brace")
            return self._fail(
                FailureKind.TRUNCATED,
                "Claude Code CLI response appears to be truncated",
                stdout,
            )

        return self._fail(
            FailureKind.MALFORMED_JSON,
            f"Claude Code CLI returned malformed JSON: {parse_error}",
            stdout,
        )

    def _snippet(self, text: str) -> str:
        return bounded_snippet(text, self.snippet_chars)

    def _fail(self, kind: FailureKind, message: str, raw: str) -> ExtractionFailure:
        return ExtractionFailure(kind=kind, message=message, raw_snippet=self._snippet(raw))


def extract(stdout: str, stderr: str = "") -> ExtractionOutcome:
    """Module-level shortcut for ``ResponseExtractor().extract``."""
    return ResponseExtractor().extract(stdout, stderr)
