"""Source loader: local files, http(s) URLs, and in-memory text.

Resolves the single source of an :class:`AnalysisRequest` into
line-ending-normalised text plus size metadata.  URL content is fetched
with httpx; HTML pages are reduced to their main text with trafilatura,
everything else (plain-text logs, JSON, CSV) is used verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from urllib.parse import urlparse

import httpx
import trafilatura

from logcore.interfaces.source_loader import ISourceLoader
from logcore.models.document import AnalysisRequest, LoadMetadata, LoadResult, SourceKind
from logcore.utils.errors import InputError, LoadError
from logcore.utils.logging import get_logger
from logcore.utils.text import estimate_tokens, normalize_line_endings

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_MAX_BYTES = 100 * 1024 * 1024
_DEFAULT_HEADERS = {
    "User-Agent": "logcore-analyzer/0.1 (+https://github.com/logcore-analyzer)",
    "Accept": "text/plain, text/html;q=0.9, */*;q=0.8",
}
_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


class DocumentLoader(ISourceLoader):
    """Loads text from exactly one of {file, URL, raw text}.

    Parameters
    ----------
    max_source_bytes:
        Upper bound on the raw size of any source.  Larger sources raise
        :class:`LoadError` before they are decoded.
    fetch_timeout:
        Timeout in seconds for URL fetches.
    http_client:
        Optional shared client; when omitted the loader creates its own and
        closes it in :meth:`aclose`.
    allowed_root:
        When set, file sources must resolve to a path inside this directory.
    allowed_hosts:
        When set, URL sources (and the final URL after redirects) must have
        one of these host names.
    """

    def __init__(
        self,
        max_source_bytes: int = _DEFAULT_MAX_BYTES,
        fetch_timeout: float = _DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        allowed_root: str | Path | None = None,
        allowed_hosts: Iterable[str] | None = None,
    ) -> None:
        self._max_bytes = max_source_bytes
        self._allowed_root = Path(allowed_root).expanduser().resolve() if allowed_root else None
        self._allowed_hosts = (
            frozenset(host.lower() for host in allowed_hosts) if allowed_hosts else None
        )
        self._logger = get_logger(__name__)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(fetch_timeout),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # ISourceLoader implementation
    # ------------------------------------------------------------------

    async def load(self, request: AnalysisRequest) -> LoadResult:
        """Dispatch on the single source named by *request*."""
        sources = request.provided_sources()
        if not sources:
            raise InputError()
        if len(sources) > 1:
            names = ", ".join(kind.value for kind in sources)
            raise InputError(message=f"Provide exactly one input source, got: {names}")

        kind = sources[0]
        if kind is SourceKind.FILE:
            return await self.load_from_file(request.path or "")
        if kind is SourceKind.URL:
            return await self.load_from_url(request.url or "")
        return await self.load_from_text(request.text or "")

    async def load_from_file(self, path: str) -> LoadResult:
        """Read *path* from the local filesystem as UTF-8 (undecodable bytes replaced)."""
        file_path = Path(path).expanduser()
        if self._allowed_root is not None and not file_path.resolve().is_relative_to(
            self._allowed_root
        ):
            raise LoadError(
                message=f"Path is outside the allowed root: {path}",
                provider_name="file",
            )
        if not file_path.exists():
            raise LoadError(message=f"File not found: {path}", provider_name="file")
        if not file_path.is_file():
            raise LoadError(message=f"Not a regular file: {path}", provider_name="file")

        try:
            size = file_path.stat().st_size
            if size > self._max_bytes:
                raise LoadError(
                    message=f"File too large: {size} bytes (limit {self._max_bytes})",
                    provider_name="file",
                )
            raw = file_path.read_bytes()
        except OSError as exc:
            raise LoadError(
                message=f"Cannot read file {path}: {exc}",
                provider_name="file",
            ) from exc

        text = raw.decode("utf-8", errors="replace")
        return self._build_result(text, SourceKind.FILE, str(file_path), len(raw))

    async def load_from_url(self, url: str) -> LoadResult:
        """Fetch *url* and return its text content."""
        scheme = urlparse(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise LoadError(
                message=f"Unsupported URL scheme {scheme or '(none)'!r}: {url}",
                provider_name="url",
            )
        self._check_host(urlparse(url).hostname or "", url)

        try:
            async with self._client.stream("GET", url) as response:
                self._check_host(response.url.host, url)
                response.raise_for_status()
                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > self._max_bytes:
                    raise LoadError(
                        message=f"Content too large: {declared} bytes (limit {self._max_bytes})",
                        provider_name="url",
                    )
                body = bytearray()
                async for part in response.aiter_bytes():
                    body.extend(part)
                    if len(body) > self._max_bytes:
                        raise LoadError(
                            message=f"Content exceeds {self._max_bytes} bytes",
                            provider_name="url",
                        )
                content_type = response.headers.get("content-type", "").lower()
                encoding = response.charset_encoding or "utf-8"
        except httpx.TimeoutException as exc:
            raise LoadError(message=f"Timeout fetching {url}: {exc}", provider_name="url") from exc
        except httpx.HTTPStatusError as exc:
            raise LoadError(
                message=f"HTTP {exc.response.status_code} for {url}",
                provider_name="url",
            ) from exc
        except httpx.HTTPError as exc:
            raise LoadError(message=f"HTTP error fetching {url}: {exc}", provider_name="url") from exc

        try:
            raw_text = bytes(body).decode(encoding, errors="replace")
        except LookupError:
            # Server declared a charset Python doesn't know.
            raw_text = bytes(body).decode("utf-8", errors="replace")
        text = raw_text
        if content_type.startswith(_HTML_CONTENT_TYPES):
            extracted = trafilatura.extract(raw_text, include_comments=False, include_tables=True)
            if extracted:
                text = extracted
            else:
                self._logger.warning("html_extraction_empty", url=url)

        return self._build_result(text, SourceKind.URL, url, len(body))

    async def load_from_text(self, text: str) -> LoadResult:
        """Wrap in-memory *text*."""
        return self._build_result(text, SourceKind.TEXT, "<text>", len(text.encode("utf-8")))

    async def aclose(self) -> None:
        """Close the HTTP client if this loader created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_result(
        text: str,
        kind: SourceKind,
        source: str,
        original_size: int,
    ) -> LoadResult:
        normalized = normalize_line_endings(text)
        if not normalized.strip():
            raise LoadError(message=f"Source is empty: {source}", provider_name=kind.value)
        return LoadResult(
            text=normalized,
            metadata=LoadMetadata(
                source_kind=kind,
                source=source,
                original_size=original_size,
                estimated_tokens=estimate_tokens(normalized),
            ),
        )

    def _check_host(self, host: str, url: str) -> None:
        if self._allowed_hosts is not None and host.lower() not in self._allowed_hosts:
            raise LoadError(message=f"Host {host!r} is not allowed: {url}", provider_name="url")
