"""The two run strategies of the analysis pipeline.

Both strategies honour the same contract, ``run(chunks, context) -> Report``,
and :func:`select_strategy` picks one from the chunk count alone:

    1 chunk   →  SinglePassStrategy
                 one formatter call returning markdown + summary together
    n ≥ 2     →  IterativeRefinementStrategy
                 initial (strong model, chunk 0)
                 → refine × (n - 1) (cheap model, chunks 1..n-1, in order)
                 → finalize (markdown from the running summary, then the
                   concise summary from that markdown)

Every LLM call is awaited before the next one starts: chunk ``i + 1`` is
refined against the summary produced for chunk ``i``.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator, Sequence
from typing import Protocol

import structlog

from logcore.models.document import Chunk
from logcore.models.pipeline import LoopState, RefinementOutput, Report, SinglePassOutput
from logcore.services import prompts
from logcore.services.agent import GenerationAgent
from logcore.utils.errors import PipelineError
from logcore.utils.logging import get_logger
from logcore.utils.text import preview


class RunStrategy(Protocol):
    """Anything that turns an ordered chunk sequence into a report."""

    name: str

    async def run(self, chunks: Sequence[Chunk], context: str | None = None) -> Report: ...


@contextlib.contextmanager
def stage(logger: structlog.BoundLogger, name: str, **fields: object) -> Iterator[None]:
    """Log a ``stage_failed`` event naming *name*, then re-raise unchanged."""
    try:
        yield
    except Exception as exc:
        logger.error(
            "stage_failed",
            stage=name,
            error_type=type(exc).__name__,
            error=str(exc),
            **fields,
        )
        raise


# ---------------------------------------------------------------------------
# Single pass
# ---------------------------------------------------------------------------


class SinglePassStrategy:
    """Direct analysis for documents that fit in one chunk."""

    name = "single-pass"

    def __init__(self, formatter: GenerationAgent) -> None:
        self._formatter = formatter
        self._logger = get_logger(__name__)

    async def run(self, chunks: Sequence[Chunk], context: str | None = None) -> Report:
        if len(chunks) != 1:
            # Diagnostic only; the first chunk is still analysed.
            self._logger.warning("single_pass_multiple_chunks", chunk_count=len(chunks))

        text = chunks[0].text if chunks else ""
        self._logger.debug(
            "single_pass_start",
            text_length=len(text),
            analysis_context=context,
        )

        with stage(self._logger, "single-pass-analysis"):
            output = await self._formatter.generate_structured(
                prompts.single_pass_prompt(text, context),
                SinglePassOutput,
            )

        self._logger.debug(
            "single_pass_complete",
            markdown_length=len(output.markdown),
            summary_length=len(output.summary),
        )
        # Missing fields were already defaulted to "" by SinglePassOutput.
        return Report(markdown=output.markdown, summary=output.summary)


# ---------------------------------------------------------------------------
# Iterative refinement
# ---------------------------------------------------------------------------


class IterativeRefinementStrategy:
    """Initial analysis, a refine loop over the remaining chunks, then finalize.

    The loop state is an explicit frozen :class:`LoopState` value; each
    stage takes one and returns a new one.
    """

    name = "iterative-refinement"

    def __init__(
        self,
        initial_analyzer: GenerationAgent,
        refiner: GenerationAgent,
        formatter: GenerationAgent,
    ) -> None:
        self._initial_analyzer = initial_analyzer
        self._refiner = refiner
        self._formatter = formatter
        self._logger = get_logger(__name__)

    async def run(self, chunks: Sequence[Chunk], context: str | None = None) -> Report:
        state = await self.initial(chunks, context)
        # do-while: the condition is checked after each refine step.
        while True:
            state = await self.refine(state)
            if not state.idx < len(state.chunks):
                break
        return await self.finalize(state)

    async def initial(self, chunks: Sequence[Chunk], context: str | None = None) -> LoopState:
        """Summarise chunk 0 with the strong model and open the loop at ``idx = 1``.

        The ``updated`` flag is ignored here: with no prior summary there
        is nothing to compare against.
        """
        if not chunks:
            raise PipelineError(message="Iterative refinement needs at least one chunk")

        first = chunks[0].text
        self._logger.debug(
            "initial_summary_start",
            first=preview(first),
            chunk_length=len(first),
            analysis_context=context,
        )

        with stage(self._logger, "initial-summary"):
            output = await self._initial_analyzer.generate_structured(
                prompts.user_initial_prompt(first, context),
                RefinementOutput,
            )

        summary = output.summary if output.summary is not None else ""
        self._logger.debug("initial_summary_complete", summary_length=len(summary))
        return LoopState(idx=1, chunks=tuple(chunks), summary=summary, context=context)

    async def refine(self, state: LoopState) -> LoopState:
        """Fold ``chunks[idx]`` into the running summary and advance ``idx`` by one.

        The running summary is replaced only when the refiner reports
        ``updated=true`` and returns a summary; otherwise it is kept as is.
        """
        if state.idx >= len(state.chunks):
            # Nothing left to read; the loop condition should have stopped us.
            self._logger.warning(
                "refine_past_end",
                idx=state.idx,
                total=len(state.chunks),
            )
            return state

        chunk = state.chunks[state.idx].text
        if not chunk:
            return state.model_copy(update={"idx": state.idx + 1})

        self._logger.debug(
            "refine_step",
            current=state.idx + 1,
            total=len(state.chunks),
        )

        with stage(self._logger, "refine-summary", chunk_index=state.idx):
            output = await self._refiner.generate_structured(
                prompts.user_refine_prompt(state.summary, chunk, state.context),
                RefinementOutput,
            )

        replaced = output.updated and output.summary is not None
        summary = output.summary if replaced else state.summary

        self._logger.debug(
            "refine_step_complete",
            current=state.idx + 1,
            updated=replaced,
        )
        return state.model_copy(update={"idx": state.idx + 1, "summary": summary})

    async def finalize(self, state: LoopState) -> Report:
        """Write the markdown report, then distil the concise summary from it."""
        self._logger.debug(
            "final_markdown_start",
            summary=preview(state.summary),
            analysis_context=state.context,
        )
        with stage(self._logger, "finalize-markdown"):
            markdown = await self._formatter.generate(
                prompts.user_markdown_prompt(state.summary, state.context)
            )
        self._logger.debug("final_markdown_complete", length=len(markdown))

        with stage(self._logger, "finalize-summary"):
            summary = await self._formatter.generate(
                prompts.user_concise_summary_prompt(markdown, state.context)
            )
        self._logger.debug("concise_summary_complete", length=len(summary))

        return Report(markdown=markdown, summary=summary)


def select_strategy(
    chunks: Sequence[Chunk],
    single_pass: SinglePassStrategy,
    iterative: IterativeRefinementStrategy,
) -> RunStrategy:
    """Pick the run strategy from the chunk count alone."""
    if not chunks:
        raise PipelineError(message="No chunks to analyze")
    if len(chunks) == 1:
        return single_pass
    return iterative
