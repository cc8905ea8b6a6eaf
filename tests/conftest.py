"""Shared pytest fixtures for the logcore test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import logging

import pytest
import structlog
import tiktoken

from logcore.config.settings import Settings
from logcore.interfaces.llm_provider import ILLMProvider
from logcore.models.document import Chunk
from logcore.services.agent import GenerationAgent
from logcore.services.chunker import TokenChunker

# ---------------------------------------------------------------------------
# Global logging state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_logging_config() -> Iterable[None]:
    """Undo ``configure_logging`` calls made inside a test.

    The CLI binds logging to ``sys.stderr``, which under pytest capture is a
    per-test stream closed afterwards; later tests must not log into it.
    """
    was_configured = structlog.is_configured()
    structlog_config = structlog.get_config()
    root_logger = logging.getLogger()
    root_handlers = root_logger.handlers[:]
    root_level = root_logger.level
    yield
    if was_configured:
        structlog.configure(**structlog_config)
    else:
        structlog.reset_defaults()
    root_logger.handlers[:] = root_handlers
    root_logger.setLevel(root_level)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Settings with test defaults that ignore any local .env file."""
    defaults: dict[str, Any] = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "anthropic_api_key": "",
        "ollama_base_url": "http://localhost:11434",
        "llm_provider": "auto",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# ---------------------------------------------------------------------------
# Tokenizer / chunker
# ---------------------------------------------------------------------------


@pytest.fixture
def byte_encoding() -> tiktoken.Encoding:
    """A tiktoken encoding with one token per byte.

    Built in memory so tests never download BPE files; for ASCII text the
    token count equals the character count.
    """
    return tiktoken.Encoding(
        name="test-bytes",
        pat_str=r"\S+|\s+",
        mergeable_ranks={bytes([i]): i for i in range(256)},
        special_tokens={},
    )


@pytest.fixture
def make_chunker(byte_encoding: tiktoken.Encoding) -> Callable[..., TokenChunker]:
    def _make(max_tokens: int = 10, overlap_tokens: int = 0) -> TokenChunker:
        return TokenChunker(
            max_tokens=max_tokens,
            overlap_tokens=overlap_tokens,
            encoding=byte_encoding,
        )

    return _make


def chunks_of(*texts: str) -> list[Chunk]:
    return [Chunk(text=t) for t in texts]


# ---------------------------------------------------------------------------
# LLM collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider; override ``complete.return_value`` per test."""
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.get_model_name.return_value = "mock-model"
    mock.is_available.return_value = True
    mock.validate_credentials = AsyncMock(return_value=True)
    mock.complete = AsyncMock(return_value='{"updated": true, "summary": "ok"}')
    return mock


@pytest.fixture
def call_log() -> list[tuple[str, str]]:
    """Ordered ``(agent_name, prompt)`` record shared by agents from ``make_agent``."""
    return []


@pytest.fixture
def make_agent(call_log: list[tuple[str, str]]) -> Callable[..., MagicMock]:
    """Build a GenerationAgent stub that replays canned results in order.

    Each entry of *structured* / *text* is returned by the next call of
    ``generate_structured`` / ``generate``; an exception entry is raised
    instead.  A callable entry receives the prompt and returns the result.
    Every call is appended to ``call_log``.
    """

    def _make(
        name: str,
        structured: Iterable[Any] = (),
        text: Iterable[Any] = (),
    ) -> MagicMock:
        structured_results = list(structured)
        text_results = list(text)

        def _next(results: list[Any], prompt: str) -> Any:
            call_log.append((name, prompt))
            result = results.pop(0)
            if isinstance(result, Exception):
                raise result
            if callable(result):
                return result(prompt)
            return result

        async def generate_structured(prompt: str, schema: type) -> Any:
            return _next(structured_results, prompt)

        async def generate(prompt: str) -> Any:
            return _next(text_results, prompt)

        agent = MagicMock(spec=GenerationAgent)
        agent.name = name
        agent.generate_structured = AsyncMock(side_effect=generate_structured)
        agent.generate = AsyncMock(side_effect=generate)
        return agent

    return _make
