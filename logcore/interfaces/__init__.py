"""Public interface definitions for external collaborators.

The workflow reaches LLM backends and content sources exclusively through
the abstract base classes defined here.  Concrete adapters implement them
and are injected by the composition root (``logcore/main.py``), so unit
tests can pass mocks without touching the network.

CONCRETE IMPLEMENTATION MAP:
    Interface        →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    ILLMProvider     →  OpenAILLMProvider, AnthropicLLMProvider,
                        OllamaLLMProvider   (logcore/providers/llm/)
    ISourceLoader    →  DocumentLoader      (logcore/services/loader.py)
"""

from logcore.interfaces.llm_provider import ILLMProvider
from logcore.interfaces.source_loader import ISourceLoader

__all__ = ["ILLMProvider", "ISourceLoader"]
