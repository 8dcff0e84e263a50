"""Linear scanner for bracket-delimited section markers.

A marker line is a line that, once trimmed, is ``[label]`` with a non-empty
label containing no brackets. The whole document is walked once; content is
sliced between the recorded offsets of consecutive marker lines. No regex is
run over the document, so pathological model output cannot trigger
backtracking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional


@dataclass(frozen=True)
class MarkerLine:
    label: str      # trimmed text between the brackets
    line_no: int    # 0-based
    start: int      # offset of the first character of the line
    end: int        # offset just past the line terminator


@dataclass(frozen=True)
class Block:
    label: str
    content: str


def marker_label(line: str) -> Optional[str]:
    """Return the label if ``line`` is a marker line, else None."""
    stripped = line.strip()
    if len(stripped) < 3 or stripped[0] != "[" or stripped[-1] != "]":
        return None
    inner = stripped[1:-1]
    if "[" in inner or "]" in inner:
        return None
    label = inner.strip()
    return label or None


def normalize_label(label: str) -> str:
    """Case- and spacing-insensitive key: ``Action  steps`` -> ``ACTION STEPS``."""
    return " ".join(label.split()).upper()


def scan_markers(text: str) -> list[MarkerLine]:
    markers: list[MarkerLine] = []
    offset = 0
    for line_no, line in enumerate(text.splitlines(keepends=True)):
        label = marker_label(line)
        if label is not None:
            markers.append(MarkerLine(label, line_no, offset, offset + len(line)))
        offset += len(line)
    return markers


def slice_blocks(
    text: str,
    markers: Iterable[MarkerLine],
    accept: Callable[[MarkerLine], bool] | None = None,
) -> list[Block]:
    """Cut ``text`` into blocks at the given markers.

    Only markers passing ``accept`` act as boundaries; the rest stay part of
    the surrounding content.
    """
    boundaries = [m for m in markers if accept is None or accept(m)]
    blocks: list[Block] = []
    for index, marker in enumerate(boundaries):
        stop = boundaries[index + 1].start if index + 1 < len(boundaries) else len(text)
        blocks.append(Block(marker.label, text[marker.end:stop].strip()))
    return blocks
