"""Tests for line indexing and chunking."""

import pytest

from cra.errors import ConfigError
from cra.ingest.chunker import chunk_text, find_line_citation, index_lines, line_markers


def test_index_lines_prefixes_every_line():
    indexed = index_lines("alpha\nbeta\n\ngamma")
    assert indexed.split("\n") == [
        "[LINE 1] alpha",
        "[LINE 2] beta",
        "[LINE 3] ",
        "[LINE 4] gamma",
    ]


def test_index_lines_empty_text_is_one_line():
    assert index_lines("") == "[LINE 1] "


def test_chunk_text_never_empty():
    assert chunk_text("", 10, 0) == ["[LINE 1] "]
    assert len(chunk_text("x", 5, 4)) >= 1


def test_chunk_text_single_window_when_text_fits():
    chunks = chunk_text("short policy", 6000, 800)
    assert chunks == ["[LINE 1] short policy"]


def test_chunk_text_window_and_step():
    text = "abcdefghij" * 3  # indexed length 39
    indexed = index_lines(text)
    chunks = chunk_text(text, 10, 4)
    assert all(len(c) <= 10 for c in chunks)
    assert chunks[0] == indexed[0:10]
    assert chunks[1] == indexed[6:16]
    # last window starts before the end of the indexed text
    assert len(chunks) == len(range(0, len(indexed), 6))


def test_chunk_text_zero_overlap_partitions_text():
    text = "\n".join(f"line {i}" for i in range(50))
    chunks = chunk_text(text, 37, 0)
    assert "".join(chunks) == index_lines(text)


@pytest.mark.parametrize("size,overlap", [(40, 30), (64, 32), (100, 60), (29, 28)])
def test_every_line_marker_survives_with_overlap_at_least_longest_line(size, overlap):
    lines = [f"clause {i} applies" for i in range(1, 40)]
    text = "\n".join(lines)
    longest = max(len(line) for line in index_lines(text).split("\n"))
    assert overlap >= longest
    chunks = chunk_text(text, size, overlap)
    seen = {n for c in chunks for n in line_markers(c)}
    assert seen == set(range(1, len(lines) + 1))


def test_chunk_text_rejects_bad_bounds():
    with pytest.raises(ConfigError):
        chunk_text("abc", 0, 0)
    with pytest.raises(ConfigError):
        chunk_text("abc", 10, 10)
    with pytest.raises(ConfigError):
        chunk_text("abc", 10, -1)


def test_find_line_citation_returns_first_matching_line():
    text = "Intro\nOur patient portal shows results\nMore patient text"
    assert find_line_citation(text, (r"patient",)) == "[LINE 2] Our patient portal shows results"


def test_find_line_citation_not_found():
    assert find_line_citation("nothing here", (r"patient",)) == "not found"
