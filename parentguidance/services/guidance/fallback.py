"""Degraded response used whenever parsed output fails validation.

build_fallback() only does line scanning and slicing, so it cannot fail and
never needs a fallback of its own.
"""

from __future__ import annotations

from parentguidance.services.guidance.scanner import marker_label
from parentguidance.services.guidance.schemas import FixedResponse

FALLBACK_TITLE = "Parenting Guidance"

TITLE_SCAN_LINES = 10
MIN_TITLE_LENGTH = 6
MAX_TITLE_LENGTH = 99
EXCERPT_MAX_CHARS = 600

# Lines carrying these are diagnostics from upstream, not titles.
DIAGNOSTIC_PHRASES = (
    "content received:",
    "raw response:",
    "failed to parse",
    "could not format",
    "no content",
)

FORMAT_PREAMBLE = "We received guidance but could not format it correctly."
EMPTY_PREAMBLE = "No guidance text was received."

RETRY_STEPS = (
    "Try sending the situation again, adding a little more detail about what happened.\n"
    "If this keeps happening, please contact support."
)
RETRY_PHRASES = "Phrases will appear here once the guidance is formatted."
RETRY_COMEBACKS = "Quick comebacks will appear here once the guidance is formatted."
RETRY_SUPPORT = "You are doing your best. Reach out to support if you need help with the app."


def fallback_title(raw: str) -> str:
    scanned = 0
    for line in raw.splitlines():
        candidate = line.strip()
        if not candidate:
            continue
        scanned += 1
        if scanned > TITLE_SCAN_LINES:
            break
        if marker_label(candidate) is not None:
            continue
        if not MIN_TITLE_LENGTH <= len(candidate) <= MAX_TITLE_LENGTH:
            continue
        lowered = candidate.lower()
        if any(phrase in lowered for phrase in DIAGNOSTIC_PHRASES):
            continue
        return candidate
    return FALLBACK_TITLE


def excerpt(raw: str, limit: int = EXCERPT_MAX_CHARS) -> str:
    """Raw text without marker lines, cut at a word boundary near ``limit``."""
    kept = [line.rstrip() for line in raw.splitlines() if marker_label(line) is None]
    text = "\n".join(kept).strip()
    if len(text) <= limit:
        return text
    cut = text[:limit]
    space = cut.rfind(" ")
    if space > limit // 2:
        cut = cut[:space]
    return cut.rstrip() + "..."


def build_fallback(raw: str) -> FixedResponse:
    """Build the single-section degraded response for ``raw``."""
    body = excerpt(raw)
    return FixedResponse(
        title=fallback_title(raw),
        situation=FORMAT_PREAMBLE if body else EMPTY_PREAMBLE,
        analysis=body,
        action_steps=RETRY_STEPS,
        phrases_to_try=RETRY_PHRASES,
        quick_comebacks=RETRY_COMEBACKS,
        support=RETRY_SUPPORT,
        is_fallback=True,
    )
