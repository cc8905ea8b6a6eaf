"""Application settings loaded via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from these sources (highest priority first):
#
#   1. **Init arguments**: Settings(chunk_max_tokens=2000)
#   2. **Environment variables**: e.g. OPENAI_API_KEY=sk-abc123
#   3. **.env file**: key=value lines in the project root .env file
#   4. **YAML file**: config/config.yaml, or the file named by
#      LOGCORE_CONFIG_FILE; top-level keys are field names
#
# Field name `initial_model` maps to env var `INITIAL_MODEL`.
# Defaults below are used when no source sets a field.
# ──────────────────────────────────────────────────────────────────────
"""

import os

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from logcore.utils.errors import ConfigurationError

_PROVIDER_CHOICES = ("auto", "openai", "anthropic", "ollama")

CONFIG_FILE_ENV = "LOGCORE_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "config/config.yaml"


class Settings(BaseSettings):
    """logcore application settings.

    Environment variables override the .env file, which overrides the YAML
    file, which overrides the defaults.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # A missing YAML file contributes nothing.
        yaml_settings = YamlConfigSettingsSource(
            settings_cls,
            yaml_file=os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE),
        )
        return (init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings)

    # === LLM Providers ===
    # Empty string = "not configured"; provider selection skips it.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, vLLM, ...)
    anthropic_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"
    llm_provider: str = "auto"

    # === Models per collaborator role ===
    # The initial analyzer runs once on chunk 0, so it gets the strongest
    # model; the refiner runs once per remaining chunk and must stay cheap.
    initial_model: str = "gpt-4.1"
    refinement_model: str = "gpt-4.1-nano"
    formatter_model: str = "gpt-4.1"
    llm_temperature: float = 0.2
    llm_max_output_tokens: int = 8000
    llm_timeout_seconds: float = 120.0

    # === Chunking ===
    chunk_tokenizer: str = "o200k_base"
    chunk_max_tokens: int = 100_000
    chunk_overlap_tokens: int = 500

    # === Loading ===
    fetch_timeout_seconds: float = 30.0
    max_source_bytes: int = 100 * 1024 * 1024
    # Empty means unrestricted. Lists come from env vars as JSON, e.g.
    # ALLOWED_URL_HOSTS='["logs.example.com"]'
    allowed_source_root: str = ""
    allowed_url_hosts: list[str] = []

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    cors_allowed_origins: list[str] = ["*"]
    app_env: str = "development"
    log_level: str = "INFO"
    logger_name: str = "log-core-analyzer"

    def get_available_llm_providers(self) -> list[str]:
        """Return the LLM provider names that have credentials configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers

    def resolve_llm_provider(self) -> str:
        """Return the concrete provider name to use for every collaborator role.

        ``auto`` picks Anthropic, then OpenAI, then Ollama, in that order of
        configured credentials.
        """
        choice = self.llm_provider.lower()
        if choice not in _PROVIDER_CHOICES:
            raise ConfigurationError(
                message=f"Unknown llm_provider {self.llm_provider!r}; "
                f"expected one of {', '.join(_PROVIDER_CHOICES)}"
            )
        if choice != "auto":
            if choice not in self.get_available_llm_providers():
                raise ConfigurationError(
                    message=f"llm_provider={choice} selected but no credentials are configured",
                    provider_name=choice,
                )
            return choice
        available = self.get_available_llm_providers()
        if not available:
            raise ConfigurationError(
                message="No LLM provider configured (set ANTHROPIC_API_KEY, "
                "OPENAI_API_KEY, or OLLAMA_BASE_URL)"
            )
        return available[0]

    def validate_for_run(self) -> None:
        """Raise :class:`ConfigurationError` if a workflow run cannot be configured."""
        for role, model in (
            ("initial_model", self.initial_model),
            ("refinement_model", self.refinement_model),
            ("formatter_model", self.formatter_model),
        ):
            if not model.strip():
                raise ConfigurationError(message=f"{role} must not be empty")
        if self.chunk_max_tokens <= 0:
            raise ConfigurationError(message="chunk_max_tokens must be positive")
        if self.chunk_overlap_tokens < 0:
            raise ConfigurationError(message="chunk_overlap_tokens must not be negative")
        if self.chunk_overlap_tokens >= self.chunk_max_tokens:
            raise ConfigurationError(
                message="chunk_overlap_tokens must be smaller than chunk_max_tokens"
            )
        if not self.chunk_tokenizer.strip():
            raise ConfigurationError(message="chunk_tokenizer must not be empty")
        if self.max_source_bytes <= 0:
            raise ConfigurationError(message="max_source_bytes must be positive")
        self.resolve_llm_provider()
