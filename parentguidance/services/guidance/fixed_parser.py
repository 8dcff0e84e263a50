"""Fixed-structure parser: the canonical [TITLE] + six-section layout."""

from __future__ import annotations

from parentguidance.services.guidance.scanner import normalize_label, scan_markers, slice_blocks
from parentguidance.services.guidance.schemas import FixedResponse

DEFAULT_FIXED_TITLE = "Parenting Situation"

# canonical marker -> FixedResponse field
FIXED_MARKERS: dict[str, str] = {
    "TITLE": "title",
    "SITUATION": "situation",
    "ANALYSIS": "analysis",
    "ACTION STEPS": "action_steps",
    "PHRASES TO TRY": "phrases_to_try",
    "QUICK COMEBACKS": "quick_comebacks",
    "SUPPORT": "support",
}

# Optional sections get a placeholder; situation/analysis/action_steps do not,
# so their absence fails validation.
PLACEHOLDERS: dict[str, str] = {
    "phrases_to_try": "Suggested phrases",
    "quick_comebacks": "Quick response ideas",
    "support": "Additional support information",
}


def extract_fixed_sections(text: str) -> dict[str, str]:
    """Map each canonical field found in ``text`` to its trimmed content.

    Only canonical marker lines are boundaries. The first occurrence of a
    marker wins; input order is irrelevant.
    """
    blocks = slice_blocks(
        text,
        scan_markers(text),
        accept=lambda m: normalize_label(m.label) in FIXED_MARKERS,
    )
    found: dict[str, str] = {}
    for block in blocks:
        field = FIXED_MARKERS[normalize_label(block.label)]
        found.setdefault(field, block.content)
    return found


def parse_fixed(text: str) -> FixedResponse:
    found = extract_fixed_sections(text)
    values = {field: found.get(field, "") for field in FIXED_MARKERS.values()}

    title_lines = [line.strip() for line in values["title"].splitlines() if line.strip()]
    values["title"] = title_lines[0] if title_lines else DEFAULT_FIXED_TITLE

    for field, placeholder in PLACEHOLDERS.items():
        if not values[field]:
            values[field] = placeholder

    return FixedResponse(**values)
