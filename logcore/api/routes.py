"""FastAPI routes for the logcore workflow.

# Endpoint             Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/analyze      POST    Load → chunk → analyze → {markdown, summary}
# /api/v1/health       GET     Health check + provider/model per role
#
# Services are resolved from ``app.state`` (populated in main.py's
# lifespan) through ``Depends`` helpers, so tests can mount the router on
# a bare FastAPI app with mocks on its state.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from logcore import __version__
from logcore.api.schemas import AnalyzeRequest, AnalyzeResponse, HealthResponse
from logcore.pipeline.orchestrator import LogAnalysisPipeline

router = APIRouter(prefix="/api/v1")


def _get_pipeline(request: Request) -> LogAnalysisPipeline:
    """Return the pipeline orchestrator from application state."""
    return request.app.state.pipeline


PipelineDep = Annotated[LogAnalysisPipeline, Depends(_get_pipeline)]


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="Analyze a log file, URL, or raw text",
)
async def analyze(body: AnalyzeRequest, pipeline: PipelineDep) -> AnalyzeResponse:
    """Produce a structured markdown report and a concise summary.

    Errors are converted to JSON by ErrorHandlingMiddleware: 400 for a bad
    request, 422 for a source that cannot be loaded, 502 for an LLM failure.
    """
    report = await pipeline.run(body.to_domain())
    return AnalyzeResponse(markdown=report.markdown, summary=report.summary)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return status, version, and which model serves each collaborator role."""
    provider = getattr(request.app.state, "provider_name", "")
    models = dict(getattr(request.app.state, "role_models", {}))
    pipeline = getattr(request.app.state, "pipeline", None)
    return HealthResponse(
        status="healthy" if pipeline is not None else "unhealthy",
        version=__version__,
        provider=provider,
        models=models,
    )
