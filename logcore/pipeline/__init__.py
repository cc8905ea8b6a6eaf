"""Analysis pipeline: run strategies and the orchestrator."""

from logcore.pipeline.orchestrator import LogAnalysisPipeline
from logcore.pipeline.strategies import (
    IterativeRefinementStrategy,
    RunStrategy,
    SinglePassStrategy,
    select_strategy,
)

__all__ = [
    "IterativeRefinementStrategy",
    "LogAnalysisPipeline",
    "RunStrategy",
    "SinglePassStrategy",
    "select_strategy",
]
