"""Custom exception hierarchy for struktogramm."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class StruktogrammError(Exception):
    """Base exception type for all struktogramm errors."""

    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class ConfigurationError(StruktogrammError):
    """Raised when configuration is missing or invalid."""


class FlowParseError(StruktogrammError):
    """Raised when a graph document cannot be interpreted at all."""


class StructuringError(StruktogrammError):
    """Raised when a flow graph cannot be turned into a structured tree."""


class TreeValidationError(StruktogrammError):
    """Raised when a structured tree document fails validation."""


class NothingToStructureError(StruktogrammError):
    """Raised by front ends when an input has no start node."""
