from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional


class VisionTabError(Exception):
    """Base exception for all extractor errors."""


@dataclass(frozen=True)
class ConfigFailure:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ConfigurationError(VisionTabError, ValueError):
    """Raised at configuration time. Carries every failure that was collected."""

    def __init__(self, failures: Iterable[ConfigFailure] = (), message: Optional[str] = None) -> None:
        self.failures: List[ConfigFailure] = list(failures)
        if message is None:
            message = "Invalid configuration:\n- " + "\n- ".join(str(f) for f in self.failures)
        super().__init__(message)


class TransformationError(VisionTabError, ValueError):
    """Raised when a response does not have the shape the selected feature expects."""


class ExternalCallError(VisionTabError):
    """Raised when the annotation API cannot be reached or reports a failure."""
