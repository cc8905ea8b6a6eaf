"""Pydantic data models for the logcore workflow."""

from logcore.models.document import (
    AnalysisRequest,
    Chunk,
    LoadMetadata,
    LoadResult,
    SourceKind,
)
from logcore.models.pipeline import LoopState, RefinementOutput, Report, SinglePassOutput

__all__ = [
    "AnalysisRequest",
    "Chunk",
    "LoadMetadata",
    "LoadResult",
    "LoopState",
    "RefinementOutput",
    "Report",
    "SinglePassOutput",
    "SourceKind",
]
