"""Splitting source files into chunks suitable for embedding."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Sequence

DEFAULT_MAX_CHUNK_LINES = 30
DEFAULT_CHUNK_OVERLAP = 15
MIN_CHUNK_LINES = 5

RELEVANT_KINDS = frozenset(
    {"function", "struct", "class", "type", "interface", "method"}
)


@dataclass(frozen=True)
class Symbol:
    """A named definition found in a source file (1-based line)."""

    name: str
    kind: str
    line: int = 0


@dataclass(frozen=True)
class Chunk:
    """A range of lines from a file, 1-based and inclusive."""

    path: str
    start_line: int
    end_line: int
    content: str = ""
    kind: str = ""


@dataclass(frozen=True)
class ChunkerConfig:
    """Size and overlap of fixed-size chunks."""

    max_chunk_lines: int = DEFAULT_MAX_CHUNK_LINES
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP


def _read_text(path: str | PathLike[str]) -> str:
    with open(path, encoding="utf-8", errors="replace", newline="") as fh:
        return fh.read()


def chunk_file(
    path: str | PathLike[str],
    symbols: Sequence[Symbol] | None = None,
    config: ChunkerConfig | None = None,
) -> list[Chunk]:
    """Chunk a file, using symbol boundaries when symbols are given."""
    config = config or ChunkerConfig()
    path_str = str(path)
    lines = _read_text(path).split("\n")
    if symbols:
        return chunk_by_symbols(path_str, lines, symbols, config)
    return chunk_by_lines(path_str, lines, config)


def chunk_file_simple(
    path: str | PathLike[str], config: ChunkerConfig | None = None
) -> list[Chunk]:
    """Chunk a file into fixed-size windows without symbol information."""
    config = config or ChunkerConfig()
    text = _read_text(path)
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    lines = [line[:-1] if line.endswith("\r") else line for line in lines]
    return chunk_by_lines(str(path), lines, config)


def filter_relevant_symbols(symbols: Iterable[Symbol]) -> list[Symbol]:
    """Symbols whose kind makes a good chunk boundary."""
    return [sym for sym in symbols if sym.kind in RELEVANT_KINDS]


def chunk_by_symbols(
    path: str,
    lines: Sequence[str],
    symbols: Sequence[Symbol],
    config: ChunkerConfig,
) -> list[Chunk]:
    """Chunk along symbol boundaries, then cover the remaining lines."""
    chunks: list[Chunk] = []
    covered: set[int] = set()
    relevant = filter_relevant_symbols(symbols)
    total = len(lines)

    for sym, following in zip(relevant, [*relevant[1:], None]):
        start_line = max(sym.line, 1)
        end_line = following.line - 1 if following is not None else total
        end_line = min(end_line, total)
        if start_line > end_line:
            continue
        size = end_line - start_line + 1
        if size < MIN_CHUNK_LINES:
            continue
        if size > config.max_chunk_lines:
            chunks.extend(
                split_large_chunk(path, lines, start_line, end_line, sym.kind, config)
            )
        else:
            chunks.append(create_chunk(path, lines, start_line, end_line, sym.kind))
        covered.update(range(start_line, end_line + 1))

    chunks.extend(_chunk_uncovered_regions(path, lines, covered, config))
    return chunks


def split_large_chunk(
    path: str,
    lines: Sequence[str],
    start_line: int,
    end_line: int,
    kind: str,
    config: ChunkerConfig,
) -> list[Chunk]:
    """Split a line range longer than the maximum into overlapping pieces."""
    chunks: list[Chunk] = []
    current = start_line
    while current <= end_line:
        chunk_end = min(current + config.max_chunk_lines - 1, end_line)
        chunks.append(create_chunk(path, lines, current, chunk_end, kind))
        current = chunk_end - config.chunk_overlap + 1
        if current <= chunks[-1].start_line:
            current = chunk_end + 1
    return chunks


def _uncovered_regions(total: int, covered: set[int]) -> Iterable[tuple[int, int]]:
    """Yield (first, last) 1-based line ranges not in ``covered``."""
    region_start: int | None = None
    for line_no in range(1, total + 1):
        if line_no not in covered:
            if region_start is None:
                region_start = line_no
        elif region_start is not None:
            yield region_start, line_no - 1
            region_start = None
    if region_start is not None:
        yield region_start, total


def _chunk_uncovered_regions(
    path: str, lines: Sequence[str], covered: set[int], config: ChunkerConfig
) -> list[Chunk]:
    chunks: list[Chunk] = []
    for first, last in _uncovered_regions(len(lines), covered):
        offset = first - 1
        for chunk in chunk_by_lines(path, lines[first - 1 : last], config):
            chunks.append(
                dataclasses.replace(
                    chunk,
                    start_line=chunk.start_line + offset,
                    end_line=chunk.end_line + offset,
                )
            )
    return chunks


def chunk_by_lines(
    path: str, lines: Sequence[str], config: ChunkerConfig
) -> list[Chunk]:
    """Fixed-size overlapping chunks; one whole chunk if none reach the minimum."""
    total = len(lines)
    if total == 0:
        return []

    chunks: list[Chunk] = []
    current = 0
    while current < total:
        end = min(current + config.max_chunk_lines, total)
        if end - current >= MIN_CHUNK_LINES:
            chunks.append(
                Chunk(
                    path=path,
                    start_line=current + 1,
                    end_line=end,
                    content="\n".join(lines[current:end]),
                    kind="fixed",
                )
            )
        if end >= total:
            break
        following = end - config.chunk_overlap
        current = following if following > current else current + 1

    if not chunks:
        chunks.append(
            Chunk(
                path=path,
                start_line=1,
                end_line=total,
                content="\n".join(lines),
                kind="fixed",
            )
        )
    return chunks


def create_chunk(
    path: str, lines: Sequence[str], start_line: int, end_line: int, kind: str
) -> Chunk:
    """A chunk holding lines ``start_line`` to ``end_line`` (1-based, inclusive)."""
    start_idx = max(start_line - 1, 0)
    end_idx = min(end_line, len(lines))
    return Chunk(
        path=path,
        start_line=start_line,
        end_line=end_line,
        content="\n".join(lines[start_idx:end_idx]),
        kind=kind,
    )