"""Core parser API for SBBCode parsing.

This module provides the public entry points: ``parse`` returns the element
tree or raises the first ``ParseError``, ``try_parse`` returns a
``ParseResult`` instead of raising, and ``SBBCodeParser`` bundles a
configuration and an optional schema for reuse.
"""

import threading
import time
from typing import Any, Dict, List, Optional

from sbbcode_parser.shared import (
    DiagnosticEntry,
    ParseError,
    ParserConfig,
    get_logger,
    new_correlation_id,
)
from sbbcode_parser.tokenization import SBBCodeTokenizer
from sbbcode_parser.tree import (
    Element,
    ParseResult,
    SBBCodeTreeBuilder,
    Schema,
    SchemaValidator,
)

# Max length of the input preview included in log records
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000


def _check_input(text: Any) -> None:
    """Reject caller errors before any parsing starts."""
    if text is None:
        raise ValueError("SBBCode input cannot be None")
    if not isinstance(text, str):
        raise TypeError(f"SBBCode input must be str, not {type(text).__name__}")
    if not text:
        raise ValueError("SBBCode input cannot be empty")


def _preview(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def _run_parse(
    text: str,
    schema: Optional[Schema],
    config: ParserConfig,
    correlation_id: Optional[str],
) -> ParseResult:
    """Run tokenizer and tree builder once, converting failures into a result."""
    _check_input(text)
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse")

    tokenizer = SBBCodeTokenizer(config.tokenization, correlation_id)
    validator = None
    if schema is not None:
        validator = SchemaValidator(schema, config.validation, correlation_id)
    builder = SBBCodeTreeBuilder(config.tree, validator, correlation_id)

    result = ParseResult(correlation_id=correlation_id)
    result.performance.characters_processed = len(text)

    try:
        tokenization_result = tokenizer.tokenize(text)
        result.performance.tokens_generated = tokenization_result.token_count
        result.elements = builder.build(tokenization_result)
    except ParseError as e:
        diagnostic = tokenizer.reporter.diagnostic or builder.reporter.diagnostic
        if diagnostic is None:
            diagnostic = DiagnosticEntry.from_error(e, "parse", correlation_id)
        failed = ParseResult.failed(e, diagnostic, correlation_id)
        failed.performance = result.performance
        result = failed
        logger.warning(
            "SBBCode input rejected",
            extra={
                "error_kind": e.kind.value,
                "error_message": str(e),
                "preview": _preview(text)
            }
        )

    result.performance.elements_built = builder.elements_built
    result.performance.tags_validated = builder.tags_validated
    result.performance.max_depth = builder.max_depth_reached
    result.performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND

    if result.success:
        logger.info(
            "SBBCode parse completed",
            extra={
                "element_count": result.element_count,
                "content_length": len(text),
                "processing_time_ms": result.performance.processing_time_ms
            }
        )

    return result


def try_parse(
    text: str,
    schema: Optional[Schema] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse SBBCode without raising on rejected input.

    Args:
        text: Non-empty SBBCode markup
        schema: Optional mapping of allowed tags
        config: Parser configuration (defaults apply when omitted)
        correlation_id: Optional correlation ID (generated when omitted)

    Returns:
        ParseResult holding either the full tree or a single error

    Raises:
        ValueError: If ``text`` is empty or None
        TypeError: If ``text`` is not a string

    Examples:
        >>> result = try_parse('[b]bold[/i]')
        >>> result.success
        False
        >>> result.error.kind.value
        'tag_name_mismatch'
    """
    return _run_parse(
        text,
        schema,
        config or ParserConfig(),
        correlation_id or new_correlation_id(),
    )


def parse(
    text: str,
    schema: Optional[Schema] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> List[Element]:
    """Parse SBBCode into a list of top-level elements.

    Args:
        text: Non-empty SBBCode markup
        schema: Optional mapping of allowed tags; when given every tag and
            attribute is validated against it
        config: Parser configuration (defaults apply when omitted)
        correlation_id: Optional correlation ID (generated when omitted)

    Returns:
        Ordered list of ``Content`` and ``Tag`` elements

    Raises:
        ParseError: The first lexical, structural or schema problem found
        ValueError: If ``text`` is empty or None
        TypeError: If ``text`` is not a string

    Examples:
        >>> parse('[b]bold[/b]')
        [Tag(name='b', attributes=[], children=[Content(text='bold')])]
    """
    result = try_parse(text, schema, config, correlation_id)
    if result.error is not None:
        raise result.error
    return result.elements


class SBBCodeParser:
    """Reusable parser bundling a configuration and an optional schema.

    Each call builds fresh tokenizer and builder instances, so one parser
    may be used from several threads as long as the schema is not mutated
    meanwhile. The usage statistics are shared and updated under a lock.

    Examples:
        >>> from sbbcode_parser import AllowedTag, schema_from_tags
        >>> parser = SBBCodeParser(schema=schema_from_tags([AllowedTag("b")]))
        >>> parser.parse('[b]bold[/b]')[0].name
        'b'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        schema: Optional[Schema] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize parser.

        Args:
            config: Parser configuration (defaults apply when omitted)
            schema: Default schema for calls that do not pass one
            correlation_id: Correlation ID used for every call
        """
        self.config = config or ParserConfig()
        self.schema = schema
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "sbbcode_parser")

        self._lock = threading.RLock()
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def try_parse(self, text: str, schema: Optional[Schema] = None) -> ParseResult:
        """Parse without raising on rejected input.

        Args:
            text: Non-empty SBBCode markup
            schema: Schema override for this call

        Returns:
            ParseResult holding either the full tree or a single error
        """
        result = _run_parse(
            text,
            schema if schema is not None else self.schema,
            self.config,
            self.correlation_id or new_correlation_id(),
        )

        with self._lock:
            self._parse_count += 1
            self._total_processing_time += result.processing_time_ms
            if result.success:
                self._successful_parses += 1

        return result

    def parse(self, text: str, schema: Optional[Schema] = None) -> List[Element]:
        """Parse into a list of elements, raising the first error.

        Args:
            text: Non-empty SBBCode markup
            schema: Schema override for this call

        Raises:
            ParseError: The first problem found in ``text``
        """
        result = self.try_parse(text, schema)
        if result.error is not None:
            raise result.error
        return result.elements

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        with self._lock:
            return {
                "total_parses": self._parse_count,
                "successful_parses": self._successful_parses,
                "success_rate": (
                    self._successful_parses / self._parse_count
                    if self._parse_count > 0 else 0.0
                ),
                "total_processing_time_ms": self._total_processing_time,
                "average_processing_time_ms": (
                    self._total_processing_time / self._parse_count
                    if self._parse_count > 0 else 0.0
                ),
                "correlation_id": self.correlation_id,
            }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        with self._lock:
            self._parse_count = 0
            self._successful_parses = 0
            self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")
