"""Small text helpers shared by the loader and the pipeline."""

from __future__ import annotations

import math
import re

# \r\n first so a Windows line ending collapses to one \n, then lone \r
# (classic Mac / progress-bar output) becomes \n as well.
_LINE_ENDING_RE = re.compile(r"\r\n?")

# Rough characters-per-token ratio for English-ish text and log lines.
CHARS_PER_TOKEN = 4


def normalize_line_endings(text: str) -> str:
    """Return *text* with every ``\\r\\n`` and lone ``\\r`` replaced by ``\\n``."""
    return _LINE_ENDING_RE.sub("\n", text)


def estimate_tokens(text: str) -> int:
    """Cheap token estimate used for load metadata, not for chunking."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def preview(text: str, limit: int = 100) -> str:
    """First *limit* characters of *text*, for debug log lines."""
    return text[:limit]
