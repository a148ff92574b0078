"""Shared utilities for SBBCode parsing.

This module provides the error taxonomy, diagnostic and result types,
configuration objects, and logging helpers used across all processing layers.
"""

from .errors import (
    AttributeKindNotAllowedError,
    AttributeMissingNameError,
    AttributeMissingValueError,
    ErrorCategory,
    ExtraAttributeNotAllowedError,
    InvalidLiteralError,
    InvalidNumberLiteralError,
    InvalidTagNameError,
    LexicalError,
    NestingTooDeepError,
    ParseError,
    ParseErrorKind,
    RequiredAttributeMissingError,
    SchemaError,
    StructuralError,
    TagNameMismatchError,
    TagNotAllowedError,
    UnclosedTagError,
    UnexpectedCharacterError,
    UnexpectedCloseTagError,
    UnexpectedOpenBracketError,
    UnmatchedCloseBracketError,
    UnterminatedTagError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
    new_correlation_id,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ErrorReporter,
    PerformanceMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TokenizationConfig,
    TreeConfig,
    ValidationConfig,
)

__all__ = [
    "AttributeKindNotAllowedError",
    "AttributeMissingNameError",
    "AttributeMissingValueError",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ErrorCategory",
    "ErrorReporter",
    "ExtraAttributeNotAllowedError",
    "InvalidLiteralError",
    "InvalidNumberLiteralError",
    "InvalidTagNameError",
    "LexicalError",
    "NestingTooDeepError",
    "ParseError",
    "ParseErrorKind",
    "ParserConfig",
    "PerformanceMetrics",
    "RequiredAttributeMissingError",
    "SchemaError",
    "StructuralError",
    "TagNameMismatchError",
    "TagNotAllowedError",
    "TokenizationConfig",
    "TreeConfig",
    "UnclosedTagError",
    "UnexpectedCharacterError",
    "UnexpectedCloseTagError",
    "UnexpectedOpenBracketError",
    "UnmatchedCloseBracketError",
    "UnterminatedTagError",
    "ValidationConfig",
    "get_logger",
    "new_correlation_id",
]
