"""User guidance preferences and the structural-mode selector.

The store is the only shared mutable state around the engine. Readers get a
frozen snapshot, so one parse always sees a single consistent mode even if
the preference is toggled concurrently.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from parentguidance.exceptions import PreferenceStoreError
from parentguidance.logging_config import get_logger
from parentguidance.services.guidance.schemas import GuidanceStyle, StructuralMode

logger = get_logger(__name__)

# (has_framework, style, mode) -> prompt template version
_PROMPT_VERSIONS: dict[tuple[bool, GuidanceStyle, StructuralMode], str] = {
    (True, GuidanceStyle.WARM_PRACTICAL, StructuralMode.FIXED): "3",
    (True, GuidanceStyle.WARM_PRACTICAL, StructuralMode.DYNAMIC): "6",
    (True, GuidanceStyle.ANALYTICAL_SCIENTIFIC, StructuralMode.FIXED): "7",
    (True, GuidanceStyle.ANALYTICAL_SCIENTIFIC, StructuralMode.DYNAMIC): "8",
    (False, GuidanceStyle.WARM_PRACTICAL, StructuralMode.FIXED): "12",
    (False, GuidanceStyle.WARM_PRACTICAL, StructuralMode.DYNAMIC): "16",
    (False, GuidanceStyle.ANALYTICAL_SCIENTIFIC, StructuralMode.FIXED): "19",
    (False, GuidanceStyle.ANALYTICAL_SCIENTIFIC, StructuralMode.DYNAMIC): "18",
}


class GuidancePreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    structure_mode: StructuralMode = StructuralMode.FIXED
    style: GuidanceStyle = GuidanceStyle.WARM_PRACTICAL
    enable_child_context: bool = False
    enable_key_insights: bool = False

    @property
    def is_using_dynamic_structure(self) -> bool:
        return self.structure_mode is StructuralMode.DYNAMIC

    @property
    def has_enabled_psychologist_notes(self) -> bool:
        return self.enable_child_context or self.enable_key_insights

    def prompt_version(self, has_framework: bool) -> str:
        return _PROMPT_VERSIONS[(has_framework, self.style, self.structure_mode)]


class PreferenceStore:
    """Thread-safe holder for GuidancePreferences, optionally backed by a JSON file."""

    def __init__(
        self,
        path: Optional[str | Path] = None,
        defaults: Optional[GuidancePreferences] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._path = Path(path) if path else None
        self._prefs = self._load(defaults or GuidancePreferences())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self, defaults: GuidancePreferences) -> GuidancePreferences:
        if self._path is None or not self._path.exists():
            return defaults
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return GuidancePreferences.model_validate({**defaults.model_dump(), **data})
        except (OSError, TypeError, ValueError, ValidationError) as e:
            logger.warning("preferences_load_failed", path=str(self._path), error=str(e))
            return defaults

    def _save(self, prefs: GuidancePreferences) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(prefs.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise PreferenceStoreError(str(self._path), str(e)) from e

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def snapshot(self) -> GuidancePreferences:
        with self._lock:
            return self._prefs

    def update(self, **changes) -> GuidancePreferences:
        with self._lock:
            updated = GuidancePreferences.model_validate(
                {**self._prefs.model_dump(), **changes}
            )
            self._save(updated)
            self._prefs = updated
        logger.info(
            "preferences_updated", **{k: getattr(v, "value", v) for k, v in changes.items()}
        )
        return updated

    def toggle_mode(self) -> GuidancePreferences:
        with self._lock:
            if self._prefs.structure_mode is StructuralMode.FIXED:
                return self.update(structure_mode=StructuralMode.DYNAMIC)
            return self.update(structure_mode=StructuralMode.FIXED)

    def toggle_style(self) -> GuidancePreferences:
        with self._lock:
            if self._prefs.style is GuidanceStyle.WARM_PRACTICAL:
                return self.update(style=GuidanceStyle.ANALYTICAL_SCIENTIFIC)
            return self.update(style=GuidanceStyle.WARM_PRACTICAL)

    def toggle_child_context(self) -> GuidancePreferences:
        with self._lock:
            return self.update(enable_child_context=not self._prefs.enable_child_context)

    def toggle_key_insights(self) -> GuidancePreferences:
        with self._lock:
            return self.update(enable_key_insights=not self._prefs.enable_key_insights)


def select_mode(store: PreferenceStore) -> StructuralMode:
    """Snapshot the structural mode for a single parse."""
    return store.snapshot().structure_mode
