"""LLM provider adapters.

Three concrete implementations of ILLMProvider (logcore/interfaces/llm_provider.py):
    - OpenAILLMProvider   : OpenAI, or any OpenAI-compatible base URL
    - AnthropicLLMProvider: Claude via the Messages API
    - OllamaLLMProvider   : local models via an Ollama server

``logcore.main.build_llm_provider`` picks one per collaborator role.
"""

from logcore.providers.llm.anthropic_provider import AnthropicLLMProvider
from logcore.providers.llm.ollama_provider import OllamaLLMProvider
from logcore.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
