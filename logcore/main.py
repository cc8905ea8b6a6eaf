"""logcore composition root and FastAPI application entry point.

Wires settings, LLM providers, collaborator agents, loader, chunker, and
the orchestrator together.  ``build_pipeline`` is shared by the HTTP app
and the CLI; ``create_app`` builds the FastAPI application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from logcore import __version__
from logcore.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from logcore.api.routes import router as api_router
from logcore.config.settings import Settings
from logcore.interfaces.llm_provider import ILLMProvider
from logcore.pipeline.orchestrator import LogAnalysisPipeline
from logcore.providers.llm.anthropic_provider import AnthropicLLMProvider
from logcore.providers.llm.ollama_provider import OllamaLLMProvider
from logcore.providers.llm.openai_provider import OpenAILLMProvider
from logcore.services import prompts
from logcore.services.agent import GenerationAgent
from logcore.services.chunker import TokenChunker
from logcore.services.loader import DocumentLoader
from logcore.utils.logging import configure_logging, get_logger

_PROVIDER_CLASSES: dict[str, type] = {
    "anthropic": AnthropicLLMProvider,
    "openai": OpenAILLMProvider,
    "ollama": OllamaLLMProvider,
}


# ---------------------------------------------------------------------------
# Provider / agent factories
# ---------------------------------------------------------------------------


def build_llm_provider(app_settings: Settings, model: str) -> ILLMProvider:
    """Build the configured provider bound to *model*.

    Provider choice follows ``Settings.resolve_llm_provider`` (Anthropic →
    OpenAI → Ollama when ``llm_provider=auto``).
    """
    provider_cls = _PROVIDER_CLASSES[app_settings.resolve_llm_provider()]
    return provider_cls(settings=app_settings, model=model)


def build_agents(app_settings: Settings) -> dict[str, GenerationAgent]:
    """Build the three collaborator roles, each on its own model."""
    common = {
        "temperature": app_settings.llm_temperature,
        "max_tokens": app_settings.llm_max_output_tokens,
    }
    return {
        "initial": GenerationAgent(
            name="initial-analyzer-agent",
            instructions=prompts.INITIAL_ANALYZER_INSTRUCTIONS,
            provider=build_llm_provider(app_settings, app_settings.initial_model),
            **common,
        ),
        "refinement": GenerationAgent(
            name="refinement-agent",
            instructions=prompts.REFINEMENT_AGENT_INSTRUCTIONS,
            provider=build_llm_provider(app_settings, app_settings.refinement_model),
            **common,
        ),
        "formatter": GenerationAgent(
            name="report-formatter-agent",
            instructions=prompts.REPORT_FORMATTER_INSTRUCTIONS,
            provider=build_llm_provider(app_settings, app_settings.formatter_model),
            **common,
        ),
    }


@dataclass
class PipelineComponents:
    """Everything a caller needs to run and later tear down the workflow."""

    pipeline: LogAnalysisPipeline
    loader: DocumentLoader
    provider_name: str
    role_models: dict[str, str]


def build_pipeline(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> PipelineComponents:
    """Validate configuration and assemble a ready-to-run pipeline.

    Raises
    ------
    ConfigurationError
        If required run configuration is missing or inconsistent.
    """
    app_settings.validate_for_run()

    agents = build_agents(app_settings)
    loader = DocumentLoader(
        max_source_bytes=app_settings.max_source_bytes,
        fetch_timeout=app_settings.fetch_timeout_seconds,
        http_client=http_client,
        allowed_root=app_settings.allowed_source_root or None,
        allowed_hosts=app_settings.allowed_url_hosts or None,
    )
    chunker = TokenChunker(
        max_tokens=app_settings.chunk_max_tokens,
        overlap_tokens=app_settings.chunk_overlap_tokens,
        encoding_name=app_settings.chunk_tokenizer,
    )
    pipeline = LogAnalysisPipeline(
        loader=loader,
        chunker=chunker,
        initial_analyzer=agents["initial"],
        refiner=agents["refinement"],
        formatter=agents["formatter"],
    )
    return PipelineComponents(
        pipeline=pipeline,
        loader=loader,
        provider_name=agents["initial"].provider.get_provider_name(),
        role_models={role: agent.provider.get_model_name() for role, agent in agents.items()},
    )


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )
    logger: structlog.BoundLogger = get_logger(app_settings.logger_name)

    @asynccontextmanager
    async def lifespan(application: FastAPI):  # noqa: ANN202
        components = build_pipeline(app_settings)
        application.state.pipeline = components.pipeline
        application.state.provider_name = components.provider_name
        application.state.role_models = components.role_models
        logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            provider=components.provider_name,
            models=components.role_models,
        )

        yield

        await components.loader.aclose()
        logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="logcore API",
        version=__version__,
        description=(
            "Analyze log files, technical documents, or any text content. "
            "Produces a structured markdown report with key findings and a "
            "concise summary. Provide exactly one of path, url, or text."
        ),
        lifespan=lifespan,
    )

    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.cors_allowed_origins)

    application.include_router(api_router)
    return application


if __name__ == "__main__":
    _settings = Settings()
    uvicorn.run(
        "logcore.main:create_app",
        factory=True,
        host=_settings.app_host,
        port=_settings.app_port,
        reload=(_settings.app_env == "development"),
    )
