"""Unit tests for settings, request models and logging configuration."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from claude_code_provider.logging import configure_logging, should_use_rich
from claude_code_provider.settings import Settings
from claude_code_provider.types import GenerationParams, Usage


class TestSettings:
    """Tests for environment-driven Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that Settings has the documented default values."""
        monkeypatch.delenv("CLAUDE_CODE_TIMEOUT_MS", raising=False)
        monkeypatch.delenv("CLAUDE_CODE_COMMAND", raising=False)

        config = Settings(_env_file=None)

        assert config.command == "claude"
        assert config.local_install_path == ".claude/local/claude"
        assert config.timeout_ms == 300_000
        assert config.long_prompt_chars == 100_000

    def test_prefixed_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAUDE_CODE_TIMEOUT_MS", "1500")
        monkeypatch.setenv("CLAUDE_CODE_COMMAND", "claude-nightly")

        config = Settings(_env_file=None)

        assert config.timeout_ms == 1500
        assert config.command == "claude-nightly"

    def test_home_read_from_unprefixed_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", "/home/someone")

        assert Settings(_env_file=None).home == "/home/someone"

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(timeout_ms=0, _env_file=None)


class TestGenerationParams:
    """Tests for GenerationParams validation."""

    def test_camel_case_aliases(self) -> None:
        params = GenerationParams.model_validate(
            {
                "modelId": "claude-3-opus-20240229",
                "messages": [{"role": "user", "content": "hi"}],
                "maxTokens": 100,
                "timeoutMs": 5000,
                "schema": {"type": "object"},
            }
        )

        assert params.model_id == "claude-3-opus-20240229"
        assert params.max_tokens == 100
        assert params.timeout_ms == 5000
        assert params.schema_ == {"type": "object"}

    def test_temperature_range_enforced(self) -> None:
        with pytest.raises(ValidationError):
            GenerationParams(model_id="default", messages=[{"role": "user", "content": "hi"}], temperature=1.5)

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            GenerationParams(model_id="default", messages=[{"role": "tool", "content": "hi"}])

        assert "role" in str(exc_info.value)

    def test_usage_serializes_with_wire_names(self) -> None:
        assert Usage(cost_usd=0.5).model_dump(by_alias=True) == {
            "inputTokens": 0,
            "outputTokens": 0,
            "totalTokens": 0,
            "costUSD": 0.5,
        }


class TestLoggingConfiguration:
    """Tests for configure_logging and its helpers."""

    def test_plain_handler_when_rich_disabled(self, restore_root_logger) -> None:
        handler = configure_logging(logging.DEBUG, force_rich=False)

        assert not isinstance(handler, RichHandler)
        assert logging.getLogger().handlers == [handler]
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_rich_handler_when_forced(self, restore_root_logger) -> None:
        handler = configure_logging(force_rich=True)

        assert isinstance(handler, RichHandler)
        assert handler.markup is False

    def test_bracketed_text_logs_verbatim(self, restore_root_logger, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that text resembling Rich markup is logged without being parsed."""
        configure_logging(logging.INFO, force_rich=True)

        logging.getLogger("claude_code_provider.test").warning("wrote [/tmp/out] and [bold]x[/]")

        err = capsys.readouterr().err
        assert "[/tmp/out]" in err
        assert "[bold]x[/]" in err

    @pytest.mark.parametrize(("value", "expected"), [("1", True), ("yes", True), ("0", False), ("false", False)])
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
        monkeypatch.setenv("CLAUDE_CODE_RICH_LOGS", value)

        assert should_use_rich() is expected

