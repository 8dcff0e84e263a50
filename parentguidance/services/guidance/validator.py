"""Structural and content-length checks on parser output.

validate() never raises; it returns (is_valid, list_of_errors) and the
caller decides whether to fall back.
"""

from __future__ import annotations

from typing import Tuple, Union

from parentguidance.services.guidance.dynamic_parser import DynamicDraft
from parentguidance.services.guidance.schemas import (
    MAX_DYNAMIC_SECTIONS,
    MIN_DYNAMIC_SECTIONS,
    FixedResponse,
)

MIN_TITLE_LENGTH = 3
MIN_REQUIRED_SECTION_LENGTH = 10

REQUIRED_FIXED_FIELDS = ("situation", "analysis", "action_steps")


def validate_fixed(response: FixedResponse) -> Tuple[bool, list[str]]:
    errors: list[str] = []

    if len(response.title.strip()) < MIN_TITLE_LENGTH:
        errors.append(f"Title shorter than {MIN_TITLE_LENGTH} characters")

    for field in REQUIRED_FIXED_FIELDS:
        length = len(getattr(response, field).strip())
        if length == 0:
            errors.append(f"Missing required section: {field}")
        elif length < MIN_REQUIRED_SECTION_LENGTH:
            errors.append(
                f"Section {field} too short: {length} < {MIN_REQUIRED_SECTION_LENGTH}"
            )

    return len(errors) == 0, errors


def validate_dynamic(draft: DynamicDraft) -> Tuple[bool, list[str]]:
    errors: list[str] = []

    count = len(draft.sections)
    if not MIN_DYNAMIC_SECTIONS <= count <= MAX_DYNAMIC_SECTIONS:
        errors.append(
            f"Invalid section count: {count}. "
            f"Expected {MIN_DYNAMIC_SECTIONS}-{MAX_DYNAMIC_SECTIONS} sections."
        )

    for section in draft.sections:
        if not section.content.strip():
            errors.append(f"Section {section.order} ({section.title}) is empty")

    return len(errors) == 0, errors


def validate(candidate: Union[FixedResponse, DynamicDraft]) -> Tuple[bool, list[str]]:
    if isinstance(candidate, FixedResponse):
        return validate_fixed(candidate)
    if isinstance(candidate, DynamicDraft):
        return validate_dynamic(candidate)
    return False, [f"Unsupported parse result: {type(candidate).__name__}"]
