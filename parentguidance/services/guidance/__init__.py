from parentguidance.services.guidance.engine import parse, parse_with_preferences
from parentguidance.services.guidance.preferences import (
    GuidancePreferences,
    PreferenceStore,
    select_mode,
)
from parentguidance.services.guidance.schemas import (
    DynamicResponse,
    FixedResponse,
    GuidanceResponse,
    GuidanceStyle,
    ResponseView,
    Section,
    StructuralMode,
)

__all__ = [
    "parse",
    "parse_with_preferences",
    "GuidancePreferences",
    "PreferenceStore",
    "select_mode",
    "DynamicResponse",
    "FixedResponse",
    "GuidanceResponse",
    "GuidanceStyle",
    "ResponseView",
    "Section",
    "StructuralMode",
]
