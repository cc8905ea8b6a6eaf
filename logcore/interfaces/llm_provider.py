"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used by the
analysis collaborators (initial analyzer, refiner, report formatter).
Implementations wrap the OpenAI API (or an OpenAI-compatible endpoint),
Anthropic, or a local Ollama server.  Every call-site stays
provider-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider, OllamaLLMProvider
# Located in: logcore/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used throughout the logcore workflow.

    One provider instance is bound to one model; the composition root
    builds one instance per collaborator role.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 8000,
        json_output: bool = False,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request or data.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.
        json_output:
            Ask the backend to constrain its answer to a single JSON object
            where the backend supports it.  Callers still validate.

        Returns
        -------
        str
            The model's text response, possibly empty.

        Raises
        ------
        logcore.utils.errors.GenerationError
            If the API call fails, times out, or returns no answer at all.
            An empty answer is returned as ``""``, not raised.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider.

        Example return values: ``"openai"``, ``"anthropic"``, ``"ollama"``.
        """

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the model this provider instance sends requests to."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations should verify that credentials are present without
        making an inference call.
        """

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm credentials are valid.

        Returns
        -------
        bool
            ``True`` if the provider accepted the credentials; ``False``
            otherwise.  Unlike :meth:`is_available`, this method actively
            contacts the remote service.
        """
