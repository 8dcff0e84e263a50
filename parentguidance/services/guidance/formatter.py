"""Render structured guidance for clients without section widgets."""

from typing import Union

from parentguidance.services.guidance.schemas import DynamicResponse, FixedResponse


def format_as_text(response: Union[FixedResponse, DynamicResponse]) -> str:
    lines: list[str] = [response.title.upper(), ""]
    for section in response.ordered_sections():
        lines.append(f"{section.order}. {section.title}")
        lines.append(section.content)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def format_as_markdown(response: Union[FixedResponse, DynamicResponse]) -> str:
    lines: list[str] = [f"# {response.title}", ""]
    for section in response.ordered_sections():
        lines.append(f"## {section.title}")
        lines.append("")
        lines.append(section.content)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
