from __future__ import annotations

__all__ = ["CalculatorError", "CapabilityDisabledError", "ExportError", "InvalidSelectionError"]


class CalculatorError(Exception):
    """Base class for calculator failures."""


class InvalidSelectionError(CalculatorError, ValueError):
    """Raised when a question or option is not part of the catalog."""

    def __init__(self, question_id: str, option_id: str | None = None) -> None:
        if option_id is None:
            message = f"unknown question '{question_id}'"
        else:
            message = f"option '{option_id}' is not defined for question '{question_id}'"
        super().__init__(message)
        self.question_id = question_id
        self.option_id = option_id


class ExportError(CalculatorError, RuntimeError):
    """Raised when the image exporter fails to render the current view."""


class CapabilityDisabledError(CalculatorError):
    """Raised when an optional capability is switched off for the session."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"capability '{capability}' is disabled")
        self.capability = capability
