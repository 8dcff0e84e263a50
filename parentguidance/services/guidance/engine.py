"""Guidance response structuring engine.

    raw text + mode -> fixed | dynamic parser -> validator
                    -> valid response, or fallback response

parse() is total: every input, including None, empty or garbled text,
yields a response with a non-empty title and at least one section.
"""

from __future__ import annotations

from typing import Optional, Union

from parentguidance.logging_config import get_logger
from parentguidance.services.guidance.dynamic_parser import parse_dynamic
from parentguidance.services.guidance.fallback import build_fallback
from parentguidance.services.guidance.fixed_parser import parse_fixed
from parentguidance.services.guidance.preferences import PreferenceStore, select_mode
from parentguidance.services.guidance.schemas import (
    DynamicResponse,
    FixedResponse,
    StructuralMode,
)
from parentguidance.services.guidance.validator import validate

logger = get_logger(__name__)


def parse(raw: Optional[str], mode: StructuralMode) -> Union[FixedResponse, DynamicResponse]:
    mode = StructuralMode(mode)
    text = raw if isinstance(raw, str) else ""

    if not text.strip():
        logger.warning("guidance_fallback", mode=mode.value, reasons=["Empty input"])
        return build_fallback(text)

    if mode is StructuralMode.DYNAMIC:
        draft = parse_dynamic(text)
        is_valid, errors = validate(draft)
        if is_valid:
            response = draft.to_response()
            logger.debug(
                "guidance_parsed",
                mode=mode.value,
                sections=response.section_count(),
                explicit_title=draft.has_explicit_title,
            )
            return response
    else:
        fixed = parse_fixed(text)
        is_valid, errors = validate(fixed)
        if is_valid:
            logger.debug("guidance_parsed", mode=mode.value, sections=fixed.section_count())
            return fixed

    logger.warning(
        "guidance_fallback",
        mode=mode.value,
        reasons=errors,
        preview=text[:200],
    )
    return build_fallback(text)


def parse_with_preferences(
    raw: Optional[str], store: PreferenceStore
) -> Union[FixedResponse, DynamicResponse]:
    """Parse with the user's current structural mode, snapshotted once."""
    return parse(raw, select_mode(store))
