# core/errors.py
from __future__ import annotations

from typing import Any, Optional


class ConversionError(Exception):
    """Base class for every conversion failure."""


class InvalidInputError(ConversionError, TypeError):
    """The value handed to the converter is not a real number."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Expected a real number, got {type(value).__name__}: {value!r}")


class UnsupportedUnitError(ConversionError, ValueError):
    """
    The unit is not present in the conversion table.

    `unit` is the exact string the caller passed (no normalization), so a UI
    can show it back to the user as typed.
    """

    def __init__(self, unit: str, category: Optional[str] = None):
        self.unit = unit
        self.category = category
        super().__init__(f"Unsupported unit: {unit}")


class UnknownCategoryError(ConversionError, KeyError):
    def __init__(self, category: str, options: Optional[list[str]] = None):
        self.category = category
        self.options = list(options or [])
        super().__init__(category)

    def __str__(self) -> str:
        if self.options:
            return f"Unknown category '{self.category}'. Options: {self.options}"
        return f"Unknown category '{self.category}'"
