"""Dynamic-structure parser: 3-8 sections with model-chosen titles.

Every marker line opens a section, numbered by appearance. An explicit
[TITLE] block, when present, supplies the response title and is not counted
as a section; without one the title falls back to DEFAULT_DYNAMIC_TITLE.
Text before the first marker is ignored.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field

from parentguidance.services.guidance.scanner import normalize_label, scan_markers, slice_blocks
from parentguidance.services.guidance.schemas import DynamicResponse, Section

DEFAULT_DYNAMIC_TITLE = "Parenting Guidance"
TITLE_MARKER = "TITLE"


@dataclass
class DynamicDraft:
    """Parser output before validation; may hold any number of sections."""
    title: str
    sections: list[Section] = field(default_factory=list)
    has_explicit_title: bool = False

    def to_response(self) -> DynamicResponse:
        return DynamicResponse(title=self.title, sections=self.sections)


def format_section_title(label: str) -> str:
    """All-caps labels become capitalised words; mixed case is kept."""
    cleaned = " ".join(label.split())
    if cleaned == cleaned.upper():
        return string.capwords(cleaned.lower())
    return cleaned


def parse_dynamic(text: str) -> DynamicDraft:
    title: str | None = None
    sections: list[Section] = []

    for block in slice_blocks(text, scan_markers(text)):
        if normalize_label(block.label) == TITLE_MARKER:
            if title is None:
                lines = [line.strip() for line in block.content.splitlines() if line.strip()]
                title = lines[0] if lines else ""
            continue
        sections.append(
            Section(
                title=format_section_title(block.label),
                content=block.content,
                order=len(sections) + 1,
            )
        )

    return DynamicDraft(
        title=title or DEFAULT_DYNAMIC_TITLE,
        sections=sections,
        has_explicit_title=bool(title),
    )
