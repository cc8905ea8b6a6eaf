"""Integration tests for LogAnalysisPipeline: real loader and chunker, stub agents."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import structlog
from structlog.testing import capture_logs

from logcore.interfaces.source_loader import ISourceLoader
from logcore.models.document import AnalysisRequest
from logcore.models.pipeline import RefinementOutput, Report, SinglePassOutput
from logcore.pipeline.orchestrator import LogAnalysisPipeline
from logcore.services.chunker import TokenChunker
from logcore.services.loader import DocumentLoader
from logcore.utils.errors import GenerationError, InputError, LoadError, PipelineError


def _pipeline(
    make_agent: Callable[..., MagicMock],
    chunker: TokenChunker,
    *,
    loader: ISourceLoader | None = None,
    initial: list | None = None,
    refine: list | None = None,
    formatter_structured: list | None = None,
    formatter_text: list | None = None,
) -> tuple[LogAnalysisPipeline, MagicMock, MagicMock, MagicMock]:
    analyzer = make_agent("initial", structured=initial or [])
    refiner = make_agent("refiner", structured=refine or [])
    formatter = make_agent(
        "formatter", structured=formatter_structured or [], text=formatter_text or []
    )
    pipeline = LogAnalysisPipeline(
        loader=loader or DocumentLoader(),
        chunker=chunker,
        initial_analyzer=analyzer,
        refiner=refiner,
        formatter=formatter,
    )
    return pipeline, analyzer, refiner, formatter


def _no_llm_calls(*agents: MagicMock) -> bool:
    return all(
        agent.generate.await_count == 0 and agent.generate_structured.await_count == 0
        for agent in agents
    )


# ======================================================================
# Request validation
# ======================================================================


class TestRequestValidation:
    @pytest.mark.asyncio
    async def test_empty_request_fails_before_any_io(self, make_agent, make_chunker) -> None:
        loader = MagicMock(spec=ISourceLoader)
        loader.load = AsyncMock()
        chunker = MagicMock(spec=TokenChunker)
        pipeline, *agents = _pipeline(make_agent, chunker, loader=loader)

        with capture_logs() as logs, pytest.raises(InputError):
            await pipeline.run(AnalysisRequest())

        loader.load.assert_not_awaited()
        chunker.chunk.assert_not_called()
        assert _no_llm_calls(*agents)
        assert any(e.get("stage") == "validate-input" for e in logs)

    @pytest.mark.asyncio
    async def test_two_sources_rejected(self, make_agent, make_chunker) -> None:
        loader = MagicMock(spec=ISourceLoader)
        loader.load = AsyncMock()
        pipeline, *agents = _pipeline(make_agent, make_chunker(), loader=loader)

        with pytest.raises(InputError, match="url, text"):
            await pipeline.run(AnalysisRequest(url="https://example.com/a", text="t"))

        loader.load.assert_not_awaited()
        assert _no_llm_calls(*agents)


# ======================================================================
# Load failures
# ======================================================================


class TestLoadFailures:
    @pytest.mark.asyncio
    async def test_missing_file_makes_no_llm_calls(
        self, make_agent, make_chunker, tmp_path: Path
    ) -> None:
        pipeline, *agents = _pipeline(make_agent, make_chunker())

        with capture_logs() as logs, pytest.raises(LoadError):
            await pipeline.run(AnalysisRequest(path=str(tmp_path / "missing.log")))

        assert _no_llm_calls(*agents)
        failed = [e for e in logs if e["event"] == "stage_failed"]
        assert failed[0]["stage"] == "load-data"
        assert failed[0]["error_type"] == "LoadError"

    @pytest.mark.asyncio
    async def test_unreachable_url_makes_no_llm_calls(self, make_agent, make_chunker) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        loader = DocumentLoader(http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))
        pipeline, *agents = _pipeline(make_agent, make_chunker(), loader=loader)

        with pytest.raises(LoadError) as exc_info:
            await pipeline.run(AnalysisRequest(url="https://logs.invalid/build.log"))

        assert exc_info.value.provider_name == "url"
        assert _no_llm_calls(*agents)

    @pytest.mark.asyncio
    async def test_whitespace_text_is_a_load_error(self, make_agent, make_chunker) -> None:
        pipeline, *agents = _pipeline(make_agent, make_chunker())

        with pytest.raises(LoadError):
            await pipeline.run(AnalysisRequest(text="   \n  "))

        assert _no_llm_calls(*agents)


# ======================================================================
# End-to-end runs
# ======================================================================


class TestPipelineRun:
    @pytest.mark.asyncio
    async def test_small_text_uses_single_pass(self, make_agent, make_chunker, call_log) -> None:
        pipeline, analyzer, refiner, formatter = _pipeline(
            make_agent,
            make_chunker(max_tokens=1000),
            formatter_structured=[
                SinglePassOutput(
                    markdown="## Errors\n- 10:02 connection refused",
                    summary="One connection error at 10:02.",
                )
            ],
        )

        report = await pipeline.run(
            AnalysisRequest(
                text="ERROR at 10:02 connection refused",
                analysis_context="focus on errors",
            )
        )

        assert "connection refused" in report.markdown
        assert report.summary == "One connection error at 10:02."
        assert [name for name, _ in call_log] == ["formatter"]
        prompt = call_log[0][1]
        assert "ERROR at 10:02 connection refused" in prompt
        assert "focus on errors" in prompt
        assert _no_llm_calls(analyzer, refiner)

    @pytest.mark.asyncio
    async def test_crlf_input_reaches_model_normalized(
        self, make_agent, make_chunker, call_log
    ) -> None:
        pipeline, *_ = _pipeline(
            make_agent,
            make_chunker(max_tokens=1000),
            formatter_structured=[SinglePassOutput(markdown="m", summary="s")],
        )

        await pipeline.run(AnalysisRequest(text="line1\r\nline2\r\n"))

        assert "line1\nline2\n" in call_log[0][1]
        assert "\r" not in call_log[0][1]

    @pytest.mark.asyncio
    async def test_large_file_uses_iterative_refinement(
        self, make_agent, make_chunker, call_log, tmp_path: Path
    ) -> None:
        log = tmp_path / "service.log"
        log.write_text("x" * 25, encoding="utf-8")
        pipeline, analyzer, refiner, formatter = _pipeline(
            make_agent,
            make_chunker(max_tokens=10),
            initial=[RefinementOutput(updated=True, summary="S0")],
            refine=[
                RefinementOutput(updated=True, summary="S1"),
                RefinementOutput(updated=False),
            ],
            formatter_text=["# Report", "Summary."],
        )

        with capture_logs() as logs:
            report = await pipeline.run(AnalysisRequest(path=str(log)))

        assert report == Report(markdown="# Report", summary="Summary.")
        assert [name for name, _ in call_log] == [
            "initial",
            "refiner",
            "refiner",
            "formatter",
            "formatter",
        ]
        selected = [e for e in logs if e["event"] == "strategy_selected"]
        assert selected[0]["strategy"] == "iterative-refinement"
        assert selected[0]["chunk_count"] == 3
        assert any(e["event"] == "analysis_complete" for e in logs)

    @pytest.mark.asyncio
    async def test_chunking_is_logged_once(self, make_agent, make_chunker) -> None:
        pipeline, *_ = _pipeline(
            make_agent,
            make_chunker(max_tokens=1000),
            formatter_structured=[SinglePassOutput(markdown="m", summary="s")],
        )

        with capture_logs() as logs:
            await pipeline.run(AnalysisRequest(text="ERROR once"))

        chunked = [e for e in logs if e["event"] == "chunking_complete"]
        assert len(chunked) == 1
        assert chunked[0]["chunk_count"] == 1
        assert chunked[0]["total_tokens"] == len("ERROR once")

    @pytest.mark.asyncio
    async def test_run_id_is_bound_only_during_the_run(self, make_agent, make_chunker) -> None:
        seen: list[dict] = []
        real_loader = DocumentLoader()

        async def load(request: AnalysisRequest):
            seen.append(structlog.contextvars.get_contextvars())
            return await real_loader.load(request)

        loader = MagicMock(spec=ISourceLoader)
        loader.load = AsyncMock(side_effect=load)
        pipeline, *_ = _pipeline(
            make_agent,
            make_chunker(max_tokens=1000),
            loader=loader,
            formatter_structured=[SinglePassOutput(markdown="m", summary="s")],
        )

        await pipeline.run(AnalysisRequest(text="hello"))

        assert len(seen[0]["run_id"]) == 12
        assert "run_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_generation_error_is_terminal(self, make_agent, make_chunker) -> None:
        pipeline, *_ = _pipeline(
            make_agent,
            make_chunker(max_tokens=1000),
            formatter_structured=[GenerationError(message="schema violation")],
        )

        with pytest.raises(GenerationError, match="schema violation"):
            await pipeline.run(AnalysisRequest(text="hello"))


class TestAnalyzeChunks:
    @pytest.mark.asyncio
    async def test_zero_chunks_is_pipeline_error(self, make_agent, make_chunker) -> None:
        pipeline, *agents = _pipeline(make_agent, make_chunker())

        with pytest.raises(PipelineError):
            await pipeline.analyze_chunks([])

        assert _no_llm_calls(*agents)

    def test_strategy_properties(self, make_agent, make_chunker) -> None:
        pipeline, *_ = _pipeline(make_agent, make_chunker())
        assert pipeline.single_pass.name == "single-pass"
        assert pipeline.iterative.name == "iterative-refinement"

