"""Central orchestrator for the log / document analysis workflow.

Drives one run end to end:

    validate request → load → chunk → decide → run strategy → Report

ARCHITECTURE NOTE:
    The orchestrator never touches files or the network; it depends on an
    injected :class:`ISourceLoader`, a :class:`TokenChunker`, and three
    :class:`GenerationAgent` roles.  The decision between the single-pass
    and the iterative path is a pure branch on the chunk count (see
    :mod:`logcore.pipeline.strategies`).

    Nothing is retried.  Any error (bad request, failed load, failed or
    malformed LLM call) is logged with the failing stage and re-raised
    unchanged, so the caller receives exactly one terminal error.

    Each run binds a ``run_id`` into structlog's context variables for its
    duration; concurrent runs share no mutable state.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Sequence

import structlog

from logcore.interfaces.source_loader import ISourceLoader
from logcore.models.document import AnalysisRequest, Chunk
from logcore.models.pipeline import Report
from logcore.pipeline.strategies import (
    IterativeRefinementStrategy,
    RunStrategy,
    SinglePassStrategy,
    select_strategy,
    stage,
)
from logcore.services.agent import GenerationAgent
from logcore.services.chunker import TokenChunker
from logcore.utils.errors import InputError, PipelineError
from logcore.utils.logging import get_logger


class LogAnalysisPipeline:
    """Loads a source, chunks it, and produces a markdown report plus summary.

    Parameters
    ----------
    loader:
        Resolves the request's single source into normalised text.
    chunker:
        Splits the text into ordered, token-bounded chunks.
    initial_analyzer:
        Strong model, called once on chunk 0 of multi-chunk documents.
    refiner:
        Cheap model, called once per remaining chunk.
    formatter:
        Produces the single-pass report, or the two finalize outputs.
    """

    def __init__(
        self,
        loader: ISourceLoader,
        chunker: TokenChunker,
        initial_analyzer: GenerationAgent,
        refiner: GenerationAgent,
        formatter: GenerationAgent,
    ) -> None:
        self._loader = loader
        self._chunker = chunker
        self._single_pass = SinglePassStrategy(formatter)
        self._iterative = IterativeRefinementStrategy(initial_analyzer, refiner, formatter)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def single_pass(self) -> SinglePassStrategy:
        return self._single_pass

    @property
    def iterative(self) -> IterativeRefinementStrategy:
        return self._iterative

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, request: AnalysisRequest) -> Report:
        """Run the whole workflow for *request*.

        Raises
        ------
        InputError
            If the request names no source or more than one; raised before
            any loading, chunking, or LLM call.
        LoadError
            If the source cannot be loaded.
        GenerationError
            If any LLM call fails or returns malformed structured output.
        PipelineError
            If chunking produced no chunks.
        """
        run_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(run_id=run_id):
            started = time.perf_counter()
            self._validate_request(request)

            with stage(self._logger, "load-data"):
                loaded = await self._loader.load(request)
            self._logger.info(
                "data_loaded",
                source=loaded.metadata.source_kind.value,
                size_mb=loaded.metadata.size_mb,
                estimated_tokens=loaded.metadata.estimated_tokens,
            )

            with stage(self._logger, "chunk"):
                # Tokenising a large file is CPU-bound; keep the event loop free.
                chunks = await asyncio.to_thread(self._chunker.chunk, loaded.text)

            report = await self.analyze_chunks(chunks, request.analysis_context)
            self._logger.info(
                "analysis_complete",
                chunk_count=len(chunks),
                markdown_length=len(report.markdown),
                summary_length=len(report.summary),
                duration_s=round(time.perf_counter() - started, 2),
            )
            return report

    async def analyze_chunks(
        self,
        chunks: Sequence[Chunk],
        context: str | None = None,
    ) -> Report:
        """Decide between single pass and iterative refinement, then run it."""
        if not chunks:
            self._logger.error("stage_failed", stage="decide-and-run", error="no chunks")
            raise PipelineError(message="Chunking produced no chunks; nothing to analyze")

        strategy = self.select_strategy(chunks)
        self._logger.info("strategy_selected", strategy=strategy.name, chunk_count=len(chunks))
        return await strategy.run(chunks, context)

    def select_strategy(self, chunks: Sequence[Chunk]) -> RunStrategy:
        return select_strategy(chunks, self._single_pass, self._iterative)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_request(self, request: AnalysisRequest) -> None:
        sources = request.provided_sources()
        if len(sources) == 1:
            return
        if not sources:
            error = InputError()
        else:
            names = ", ".join(kind.value for kind in sources)
            error = InputError(message=f"Provide exactly one input source, got: {names}")
        self._logger.error("stage_failed", stage="validate-input", error=error.message)
        raise error
