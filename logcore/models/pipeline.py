"""State and result models for the analysis orchestrator.

``LoopState`` is the explicit value threaded through the iterative
refinement loop.  It is frozen: every stage returns a new instance via
``model_copy(update={...})`` so no step can mutate a state another step
still holds.

``RefinementOutput`` and ``SinglePassOutput`` are the structured shapes
requested from the LLM collaborators.  Their defaults implement the
best-effort field policy: a missing ``markdown``/``summary`` becomes ``""``
and a missing ``updated`` flag counts as "nothing new".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from logcore.models.document import Chunk


class LoopState(BaseModel):
    """Working state of one iterative refinement run.

    Invariants:
        * ``0 <= idx <= len(chunks)``
        * ``summary`` is the running synthesis of ``chunks[:idx]``
        * ``chunks`` never changes after creation
    """

    model_config = ConfigDict(frozen=True)

    idx: int = Field(ge=0)
    chunks: tuple[Chunk, ...]
    summary: str
    context: str | None = None

    @model_validator(mode="after")
    def _idx_within_bounds(self) -> LoopState:
        if self.idx > len(self.chunks):
            raise ValueError(f"idx {self.idx} exceeds chunk count {len(self.chunks)}")
        return self

    @property
    def done(self) -> bool:
        return self.idx >= len(self.chunks)


class RefinementOutput(BaseModel):
    """Structured answer of the initial analyzer and of the refiner.

    ``summary`` stays ``None`` when the model omitted it, so the refine
    stage can tell "no summary returned" apart from an empty one.
    """

    updated: bool = Field(
        default=False,
        description="True only if this chunk added information worth merging.",
    )
    summary: str | None = Field(
        default=None,
        description="The full running summary including the new information.",
    )

    @field_validator("updated", mode="before")
    @classmethod
    def _null_updated_is_false(cls, value: object) -> object:
        return False if value is None else value


class SinglePassOutput(BaseModel):
    """Structured answer of the single-pass formatter call."""

    markdown: str = Field(default="", description="Full markdown analysis report.")
    summary: str = Field(default="", description="Concise summary of the report.")

    @field_validator("markdown", "summary", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class Report(BaseModel):
    """Terminal artifact of a workflow run."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    summary: str
