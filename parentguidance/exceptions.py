"""
Custom exceptions for the ParentGuidance application.

The structuring engine itself never raises; these cover the collaborators
around it (model call, preference storage).
"""

from typing import Any


class ParentGuidanceError(Exception):
    """Base exception for ParentGuidance application."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# === Generation Exceptions ===

class GuidanceGenerationError(ParentGuidanceError):
    """Raised when the model request fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(
            message=message,
            details={"original_error": str(original_error) if original_error else None}
        )
        self.original_error = original_error


class EmptyCompletionError(ParentGuidanceError):
    """Raised when the model returns no usable text."""

    def __init__(self, model: str, stop_reason: str | None = None):
        super().__init__(
            message=f"No content received from guidance generation ({model})",
            details={"model": model, "stop_reason": stop_reason}
        )


# === Preference Exceptions ===

class PreferenceStoreError(ParentGuidanceError):
    """Raised when guidance preferences cannot be persisted."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Failed to save preferences to {path}: {reason}",
            details={"path": path, "reason": reason}
        )
