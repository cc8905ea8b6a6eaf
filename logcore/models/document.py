"""Source and chunk models for the logcore workflow.

Covers everything that happens before the orchestrator takes over: the
caller's :class:`AnalysisRequest`, the loader's :class:`LoadResult`, and
the chunker's ordered :class:`Chunk` sequence.  All models are frozen.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(str, Enum):  # noqa: UP042  (StrEnum is 3.11+)
    """Where the analysed text came from."""

    FILE = "file"
    URL = "url"
    TEXT = "text"


class AnalysisRequest(BaseModel):
    """One workflow invocation: exactly one source plus optional guidance.

    Validation of "exactly one source" is done by the pipeline, not here,
    so that a bad request surfaces as :class:`~logcore.utils.errors.InputError`
    instead of a pydantic ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str | None = None
    url: str | None = None
    text: str | None = None
    # Free-text guidance passed unchanged to every LLM call of the run.
    analysis_context: str | None = Field(default=None, alias="analysisContext")

    def provided_sources(self) -> list[SourceKind]:
        """Return the source kinds that carry a non-empty value, in priority order."""
        provided: list[SourceKind] = []
        if self.path:
            provided.append(SourceKind.FILE)
        if self.url:
            provided.append(SourceKind.URL)
        if self.text:
            provided.append(SourceKind.TEXT)
        return provided


class LoadMetadata(BaseModel):
    """Size information about a loaded source."""

    model_config = ConfigDict(frozen=True)

    source_kind: SourceKind
    # File path, URL, or "<text>" for in-memory input.
    source: str
    # Size in bytes before line-ending normalisation.
    original_size: int = Field(ge=0)
    estimated_tokens: int = Field(ge=0)

    @property
    def size_mb(self) -> float:
        return round(self.original_size / 1024 / 1024, 2)


class LoadResult(BaseModel):
    """Normalised text plus metadata, as returned by a source loader."""

    model_config = ConfigDict(frozen=True)

    text: str
    metadata: LoadMetadata


class Chunk(BaseModel):
    """One bounded slice of the source document, in processing order."""

    model_config = ConfigDict(frozen=True)

    text: str
