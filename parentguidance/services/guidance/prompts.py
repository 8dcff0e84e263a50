"""Guidance prompt templates.

The structure instructions must stay in step with the parsers:
  FIXED_STRUCTURE_INSTRUCTIONS   - the seven canonical bracket markers
  DYNAMIC_STRUCTURE_INSTRUCTIONS - [TITLE] plus 3-8 model-chosen markers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from parentguidance.services.guidance.schemas import GuidanceStyle, StructuralMode


BASE_SYSTEM_PROMPT = (
    "You are a supportive parenting guide providing evidence-based guidance for "
    "challenging parenting situations. Your responses should be empathetic, "
    "practical, and actionable."
)

STYLE_INSTRUCTIONS = {
    GuidanceStyle.WARM_PRACTICAL: (
        "Use a warm, encouraging tone. Favour concrete, everyday advice the parent "
        "can use straight away."
    ),
    GuidanceStyle.ANALYTICAL_SCIENTIFIC: (
        "Use a calm, analytical tone. Ground your advice in child development "
        "research and explain the reasoning behind each strategy."
    ),
}

FIXED_STRUCTURE_INSTRUCTIONS = """Provide your response in EXACTLY this format with these bracketed sections:

[TITLE]
A brief, descriptive title for the situation

[SITUATION]
Summarize the key aspects of what's happening

[ANALYSIS]
Analyze what might be going on from the child's perspective and underlying needs

[ACTION STEPS]
Provide 3-5 concrete steps the parent can take right now

[PHRASES TO TRY]
Suggest 3-5 specific phrases the parent can use with their child

[QUICK COMEBACKS]
Provide 2-3 quick responses for in-the-moment situations

[SUPPORT]
Offer encouragement and remind the parent they're doing their best"""

DYNAMIC_STRUCTURE_INSTRUCTIONS = """Organize your response into sections that fit this specific situation.

Start with:
[TITLE]
A brief, descriptive title for the situation

Then write between 3 and 8 sections. Begin each section with its own title
in square brackets, alone on its line, for example:

[Why Bedtime Feels Hard]
...

Rules:
- Choose section titles that match the situation; do not reuse a fixed template
- Never put square brackets inside a section title or inside section text
- Every section must contain guidance text"""

USER_PROMPT_TEMPLATE = "Please provide guidance for this parenting situation:\n\n{situation}"


@dataclass(frozen=True)
class GuidancePrompt:
    system: str
    user: str


def format_framework(
    name: str,
    description: Optional[str] = None,
    principles: Sequence[str] = (),
    tools: Sequence[str] = (),
) -> str:
    formatted = f"Framework: {name}"
    if description:
        formatted += f"\nDescription: {description}"
    if principles:
        formatted += "\nKey Principles:\n" + "\n".join(f"- {p}" for p in principles)
    if tools:
        formatted += "\nTools to Apply:\n" + "\n".join(f"- {t}" for t in tools)
    return formatted


def build_guidance_prompt(
    situation: str,
    mode: StructuralMode,
    style: GuidanceStyle = GuidanceStyle.WARM_PRACTICAL,
    framework: Optional[str] = None,
    family_context: Optional[str] = None,
) -> GuidancePrompt:
    """Assemble system and user prompts for one guidance request.

    Args:
        situation:      The parent's free-text description.
        mode:           Structural contract the reply must follow.
        style:          Tone of the guidance.
        framework:      Pre-formatted framework block (see format_framework).
        family_context: Free-text family details to take into account.
    """
    parts = [BASE_SYSTEM_PROMPT, STYLE_INSTRUCTIONS[style]]

    if framework:
        parts.append(
            "The parent is using a specific parenting framework. Incorporate these "
            f"tools and principles into your guidance:\n{framework}"
        )

    if mode is StructuralMode.DYNAMIC:
        parts.append(DYNAMIC_STRUCTURE_INSTRUCTIONS)
    else:
        parts.append(FIXED_STRUCTURE_INSTRUCTIONS)

    if family_context:
        parts.append(f"Family Context to consider:\n{family_context}")

    return GuidancePrompt(
        system="\n\n".join(parts),
        user=USER_PROMPT_TEMPLATE.format(situation=situation.strip()),
    )
