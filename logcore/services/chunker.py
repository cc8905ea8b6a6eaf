"""Token-aware text chunking with overlapping windows.

Splits normalised text into an ordered sequence of :class:`Chunk` objects
of at most ``max_tokens`` tokens each, measured with a tiktoken encoding.
Consecutive chunks share ``overlap_tokens`` tokens so that a log record or
stack trace straddling a boundary appears whole in at least one chunk.

Unlike paragraph-preserving chunkers, windows are cut on token positions:
log files rarely have paragraph structure and a single stack trace can be
larger than any sensible paragraph size.
"""

from __future__ import annotations

import tiktoken

from logcore.models.document import Chunk
from logcore.utils.errors import ConfigurationError
from logcore.utils.logging import get_logger


class TokenChunker:
    """Splits text into overlapping token windows.

    Parameters
    ----------
    max_tokens:
        Maximum token count per chunk.
    overlap_tokens:
        Tokens shared between consecutive chunks.  Must be smaller than
        *max_tokens* so every window advances.
    encoding_name:
        tiktoken encoding, e.g. ``"o200k_base"`` or ``"cl100k_base"``.
    encoding:
        A ready tiktoken ``Encoding``; takes precedence over *encoding_name*.
    """

    def __init__(
        self,
        max_tokens: int,
        overlap_tokens: int = 0,
        encoding_name: str = "o200k_base",
        encoding: tiktoken.Encoding | None = None,
    ) -> None:
        if max_tokens <= 0:
            raise ConfigurationError(message="max_tokens must be positive")
        if overlap_tokens < 0 or overlap_tokens >= max_tokens:
            raise ConfigurationError(
                message=f"overlap_tokens must be in [0, {max_tokens}), got {overlap_tokens}"
            )
        if encoding is not None:
            self._encoding = encoding
        else:
            try:
                self._encoding = tiktoken.get_encoding(encoding_name)
            except ValueError as exc:
                raise ConfigurationError(message=f"Unknown tokenizer {encoding_name!r}") from exc
        self._max_tokens = max_tokens
        self._overlap = overlap_tokens
        self._logger = get_logger(__name__)

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    @property
    def overlap_tokens(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str) -> list[Chunk]:
        """Split *text* into overlapping chunks in document order.

        Returns an empty list for empty or whitespace-only input and at
        least one chunk for anything else.  Window edges are moved back to
        the nearest character boundary, so a multi-byte character split
        across tokens is never cut in half.
        """
        if not text or not text.strip():
            return []

        tokens = self._encoding.encode(text, disallowed_special=())
        if len(tokens) <= self._max_tokens:
            chunks = [Chunk(text=text)]
        else:
            chunks = [Chunk(text=window) for window in self._windows(tokens)]

        self._logger.debug(
            "chunking_complete",
            chunk_count=len(chunks),
            total_tokens=len(tokens),
            max_tokens=self._max_tokens,
            overlap_tokens=self._overlap,
        )
        return chunks

    def count_tokens(self, text: str) -> int:
        """Return the token count of *text* under this chunker's encoding."""
        return len(self._encoding.encode(text, disallowed_special=()))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _windows(self, tokens: list[int]) -> list[str]:
        pieces = self._encoding.decode_tokens_bytes(tokens)
        data = b"".join(pieces)
        offsets = [0]
        for piece in pieces:
            offsets.append(offsets[-1] + len(piece))
        count = len(tokens)

        def on_boundary(index: int) -> bool:
            # Token *index* starts a character unless its first byte is a
            # UTF-8 continuation byte (0b10xxxxxx).
            return index >= count or data[offsets[index]] & 0xC0 != 0x80

        windows: list[str] = []
        start = 0
        while True:
            end = min(start + self._max_tokens, count)
            cut = end
            while cut > start and not on_boundary(cut):
                cut -= 1
            if cut == start:
                # A single character wider than max_tokens stays whole.
                cut = end
                while not on_boundary(cut):
                    cut += 1
            windows.append(data[offsets[start] : offsets[cut]].decode("utf-8", errors="replace"))
            if cut >= count:
                return windows
            start = max(cut - self._overlap, start + 1)
            while not on_boundary(start):
                start += 1
