"""Unit tests for the logcore exception hierarchy."""

from __future__ import annotations

import pytest

from logcore.utils.errors import (
    ConfigurationError,
    GenerationError,
    InputError,
    LoadError,
    LogCoreError,
    PipelineError,
)


class TestLogCoreError:
    def test_str_without_provider(self) -> None:
        assert str(LogCoreError("boom")) == "boom"

    def test_str_prefixes_provider(self) -> None:
        exc = GenerationError(message="quota exceeded", provider_name="openai")
        assert str(exc) == "[openai] quota exceeded"
        assert exc.message == "quota exceeded"
        assert exc.provider_name == "openai"

    @pytest.mark.parametrize(
        "error_cls",
        [InputError, LoadError, GenerationError, ConfigurationError, PipelineError],
    )
    def test_subclasses_share_base(self, error_cls: type[LogCoreError]) -> None:
        exc = error_cls()
        assert isinstance(exc, LogCoreError)
        assert exc.message
        assert exc.provider_name is None

    def test_input_error_default_names_all_sources(self) -> None:
        message = InputError().message
        assert "path" in message
        assert "url" in message
        assert "text" in message

    def test_can_be_caught_as_base(self) -> None:
        with pytest.raises(LogCoreError):
            raise LoadError(message="missing", provider_name="file")
