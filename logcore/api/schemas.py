"""Pydantic request/response schemas for the logcore HTTP API.

Request schemas end with "Request", response schemas end with "Response".
Field names follow the workflow's public tool contract, so the analysis
context is spelled ``analysisContext`` on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from logcore.models.document import AnalysisRequest


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/v1/analyze``.  Provide exactly ONE source."""

    model_config = ConfigDict(populate_by_name=True)

    path: str | None = Field(
        default=None,
        description='Absolute file path on the server, e.g. "/var/log/app.log".',
    )
    url: str | None = Field(
        default=None,
        description="HTTP/HTTPS URL of raw text or log content.",
    )
    text: str | None = Field(
        default=None,
        description="Raw text content to analyze.",
    )
    analysis_context: str | None = Field(
        default=None,
        alias="analysisContext",
        description='What to focus on, e.g. "Look for timeout errors".',
    )

    def to_domain(self) -> AnalysisRequest:
        return AnalysisRequest(
            path=self.path,
            url=self.url,
            text=self.text,
            analysis_context=self.analysis_context,
        )


class AnalyzeResponse(BaseModel):
    """Markdown report plus concise summary."""

    markdown: str
    summary: str


class HealthResponse(BaseModel):
    """Application health, version, and the model bound to each role."""

    status: str
    version: str
    provider: str
    models: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Sanitised error body returned for every application error."""

    error: str
    detail: str
