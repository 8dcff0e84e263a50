"""Pydantic models for structured guidance responses.

Two structural contracts share one read-only view:
  FixedResponse   - the canonical six sections, always in the same order
  DynamicResponse - 3-8 sections whose titles the model chooses

Both expose ``title``, ``ordered_sections()``, ``section_count()`` and
``is_fallback``; ``GuidanceResponse`` is the discriminated union of the two.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


MIN_DYNAMIC_SECTIONS = 3
MAX_DYNAMIC_SECTIONS = 8


# ═══════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════

class StructuralMode(str, Enum):
    """Which structural contract the model was asked to follow."""
    FIXED = "fixed"
    DYNAMIC = "dynamic"

    @property
    def display_name(self) -> str:
        return "Fixed Structure" if self is StructuralMode.FIXED else "Dynamic Structure"

    @property
    def section_range(self) -> str:
        return "6 sections" if self is StructuralMode.FIXED else "3-8 sections"


class GuidanceStyle(str, Enum):
    """Tone of the prompt template; does not change parsing."""
    WARM_PRACTICAL = "warm_practical"
    ANALYTICAL_SCIENTIFIC = "analytical_scientific"

    @property
    def display_name(self) -> str:
        if self is GuidanceStyle.WARM_PRACTICAL:
            return "Warm & Practical"
        return "Analytical & Scientific"


# ═══════════════════════════════════════════════════════════════════════════
# SECTIONS
# ═══════════════════════════════════════════════════════════════════════════

class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    content: str
    order: int = Field(ge=1)


FIXED_SECTION_TITLES: tuple[str, ...] = (
    "Situation",
    "Analysis",
    "Action Steps",
    "Phrases to Try",
    "Quick Comebacks",
    "Support",
)

FALLBACK_SECTION_TITLE = "Guidance"


# ═══════════════════════════════════════════════════════════════════════════
# RESPONSES
# ═══════════════════════════════════════════════════════════════════════════

class FixedResponse(BaseModel):
    """Six canonical sections.

    A fallback response keeps this shape but is displayed as a single
    "Guidance" section holding all of its non-empty fields.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    title: str
    situation: str = ""
    analysis: str = ""
    action_steps: str = ""
    phrases_to_try: str = ""
    quick_comebacks: str = ""
    support: str = ""
    is_fallback: bool = False

    def _fields_in_order(self) -> tuple[str, ...]:
        return (
            self.situation,
            self.analysis,
            self.action_steps,
            self.phrases_to_try,
            self.quick_comebacks,
            self.support,
        )

    def ordered_sections(self) -> list[Section]:
        if self.is_fallback:
            body = "\n\n".join(part for part in self._fields_in_order() if part.strip())
            return [Section(title=FALLBACK_SECTION_TITLE, content=body, order=1)]
        return [
            Section(title=title, content=content, order=index)
            for index, (title, content) in enumerate(
                zip(FIXED_SECTION_TITLES, self._fields_in_order()), start=1
            )
        ]

    def section_count(self) -> int:
        return 1 if self.is_fallback else len(FIXED_SECTION_TITLES)


class DynamicResponse(BaseModel):
    """3-8 model-titled sections, sorted and renumbered 1..n on construction."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["dynamic"] = "dynamic"
    title: str
    sections: list[Section] = Field(
        min_length=MIN_DYNAMIC_SECTIONS, max_length=MAX_DYNAMIC_SECTIONS
    )

    @field_validator("sections")
    @classmethod
    def _renumber(cls, sections: list[Section]) -> list[Section]:
        ranked = sorted(sections, key=lambda s: s.order)
        return [
            s if s.order == index else s.model_copy(update={"order": index})
            for index, s in enumerate(ranked, start=1)
        ]

    @property
    def is_fallback(self) -> bool:
        return False

    def ordered_sections(self) -> list[Section]:
        return list(self.sections)

    def section_count(self) -> int:
        return len(self.sections)


GuidanceResponse = Annotated[
    Union[FixedResponse, DynamicResponse],
    Field(discriminator="kind"),
]


class ResponseView(BaseModel):
    """Flattened, display-ready form of any GuidanceResponse."""
    kind: Literal["fixed", "dynamic"]
    title: str
    is_fallback: bool
    section_count: int
    sections: list[Section]

    @classmethod
    def of(cls, response: FixedResponse | DynamicResponse) -> "ResponseView":
        return cls(
            kind=response.kind,
            title=response.title,
            is_fallback=response.is_fallback,
            section_count=response.section_count(),
            sections=response.ordered_sections(),
        )
