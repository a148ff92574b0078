"""Diagnostic types, metrics and the fail-fast error reporter.

Parsing never accumulates diagnostics: the first problem found is recorded
by an ``ErrorReporter`` and raised immediately, so a parse yields either a
complete tree or exactly one diagnostic.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, NoReturn, Optional

from .errors import ParseError
from .logging import get_logger


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    INFO = auto()       # Informational messages
    WARNING = auto()    # Accepted input with something worth noting
    ERROR = auto()      # Input rejected


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    kind: Optional[str] = None
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @classmethod
    def from_error(
        cls,
        error: ParseError,
        component: str,
        correlation_id: Optional[str] = None,
    ) -> "DiagnosticEntry":
        """Build an ERROR diagnostic describing a parse error."""
        as_dict = error.to_dict()
        return cls(
            severity=DiagnosticSeverity.ERROR,
            message=error.message,
            component=component,
            kind=error.kind.value,
            position=as_dict.get("position"),
            details=as_dict["details"],
            correlation_id=correlation_id,
        )


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single parse."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_generated: int = 0
    elements_built: int = 0
    tags_validated: int = 0
    max_depth: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms


class ErrorReporter:
    """Fail-fast diagnostic sink.

    The first call to ``fail`` records the error as the single diagnostic of
    the parse and raises it. A reporter belongs to exactly one parse; reusing
    it after a failure is a programming error.
    """

    def __init__(self, component: str, correlation_id: Optional[str] = None) -> None:
        self.component = component
        self.correlation_id = correlation_id
        self.diagnostic: Optional[DiagnosticEntry] = None
        self.logger = get_logger(__name__, correlation_id, component)

    @property
    def has_failed(self) -> bool:
        """Whether an error has already been reported."""
        return self.diagnostic is not None

    def fail(self, error: ParseError) -> NoReturn:
        """Record ``error`` and abort the current parse by raising it."""
        if self.diagnostic is not None:
            raise RuntimeError(
                f"{self.component} already reported: {self.diagnostic.message}"
            )

        self.diagnostic = DiagnosticEntry.from_error(
            error, self.component, self.correlation_id
        )
        self.logger.debug(
            "Parse aborted",
            extra={
                "error_kind": error.kind.value,
                "error_category": error.category.value,
                "position": self.diagnostic.position,
            },
        )
        raise error
