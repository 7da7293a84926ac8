"""Line indexing and overlapping fixed-size chunking for citable model input."""

import re

from cra.config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from cra.errors import ConfigError
from cra.schemas.models import NOT_FOUND

LINE_MARKER = "[LINE {n}] "
_MARKER_RE = re.compile(r"\[LINE (\d+)\] ")


def index_lines(text: str) -> str:
    """Prefix every line with a stable 1-based ``[LINE n]`` marker."""
    lines = (text or "").split("\n")
    return "\n".join(f"{LINE_MARKER.format(n=i)}{line}" for i, line in enumerate(lines, start=1))


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """
    Index ``text`` and split it into overlapping windows of ``chunk_size`` characters.

    The window advances by ``max(1, chunk_size - chunk_overlap)``. Never returns an
    empty list. Markers are not aligned to chunk boundaries; when ``chunk_overlap``
    is at least the longest indexed line, every marker survives whole in some chunk.
    """
    if chunk_size <= 0 or not 0 <= chunk_overlap < chunk_size:
        raise ConfigError(
            f"Invalid chunk bounds: chunk_size={chunk_size}, chunk_overlap={chunk_overlap}"
        )
    indexed = index_lines(text)
    step = max(1, chunk_size - chunk_overlap)
    chunks = [indexed[i : i + chunk_size] for i in range(0, len(indexed), step)]
    return chunks or [indexed]


def line_markers(chunk: str) -> list[int]:
    """Line numbers whose full marker appears in ``chunk``."""
    return [int(m) for m in _MARKER_RE.findall(chunk)]


def find_line_citation(text: str, patterns: tuple[str, ...], max_len: int = 160) -> str:
    """
    Return ``[LINE n] <line>`` for the first line matching any pattern, else ``not found``.

    Patterns are case-insensitive regexes, tested line by line in document order.
    """
    compiled = [re.compile(p, re.IGNORECASE) for p in patterns]
    for n, line in enumerate((text or "").split("\n"), start=1):
        if any(rx.search(line) for rx in compiled):
            snippet = line.strip()
            if len(snippet) > max_len:
                snippet = snippet[: max_len - 3].rstrip() + "..."
            return f"{LINE_MARKER.format(n=n)}{snippet}"
    return NOT_FOUND
