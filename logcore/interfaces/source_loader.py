"""Abstract base class for source loaders.

A source loader turns one of {file path, URL, raw text} into normalised
text plus size metadata.  The orchestrator only sees the result; it never
touches files or the network itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from logcore.models.document import AnalysisRequest, LoadResult


class ISourceLoader(ABC):
    """Contract for resolving an analysis request into text."""

    @abstractmethod
    async def load(self, request: AnalysisRequest) -> LoadResult:
        """Load the single source named by *request*.

        Raises
        ------
        logcore.utils.errors.InputError
            If *request* names no source, or more than one.
        logcore.utils.errors.LoadError
            If the source is unreachable, unreadable, too large, or empty.
        """

    @abstractmethod
    async def load_from_file(self, path: str) -> LoadResult:
        """Read a local file."""

    @abstractmethod
    async def load_from_url(self, url: str) -> LoadResult:
        """Fetch an http(s) URL."""

    @abstractmethod
    async def load_from_text(self, text: str) -> LoadResult:
        """Wrap in-memory text."""
