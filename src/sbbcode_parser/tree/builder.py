"""Core tree building implementation for SBBCode parsing.

This module defines the document tree (``Content`` and ``Tag`` elements with
typed attribute values) and the recursive-descent builder that turns a token
stream into that tree, enforcing tag matching and closing rules.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Dict,
    Iterator,
    List,
    NoReturn,
    Optional,
    Union,
)

from sbbcode_parser.shared import (
    DiagnosticEntry,
    ErrorReporter,
    InvalidNumberLiteralError,
    NestingTooDeepError,
    ParseError,
    PerformanceMetrics,
    TagNameMismatchError,
    TreeConfig,
    UnclosedTagError,
    UnexpectedCloseTagError,
    get_logger,
)
from sbbcode_parser.tokenization import (
    Token,
    TokenizationResult,
    TokenPosition,
    TokenType,
)
from sbbcode_parser.tokenization.tokenizer import (
    FLOAT_LITERAL_PATTERN,
    INT_LITERAL_PATTERN,
)

if TYPE_CHECKING:
    from .validation import SchemaValidator

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT32_MAX_DIGITS = len(str(INT32_MAX))


class AttributeKind(Enum):
    """Semantic type of an attribute value."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


@dataclass(frozen=True)
class StringValue:
    """Quoted string attribute value, quotes stripped."""

    value: str
    kind: ClassVar[AttributeKind] = AttributeKind.STRING


@dataclass(frozen=True)
class IntValue:
    """Signed 32-bit integer attribute value."""

    value: int
    kind: ClassVar[AttributeKind] = AttributeKind.INT

    def __post_init__(self) -> None:
        """Validate integer range."""
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("IntValue requires an int")
        if not (INT32_MIN <= self.value <= INT32_MAX):
            raise ValueError("IntValue must fit in a signed 32-bit integer")


@dataclass(frozen=True)
class FloatValue:
    """Double precision float attribute value."""

    value: float
    kind: ClassVar[AttributeKind] = AttributeKind.FLOAT


@dataclass(frozen=True)
class BoolValue:
    """Boolean attribute value (``true`` / ``false``)."""

    value: bool
    kind: ClassVar[AttributeKind] = AttributeKind.BOOL


AttributeValue = Union[StringValue, IntValue, FloatValue, BoolValue]


@dataclass(frozen=True)
class Attribute:
    """Named, typed attribute of a tag."""

    name: str
    value: AttributeValue

    @property
    def kind(self) -> AttributeKind:
        """Kind of the attribute's value."""
        return self.value.kind


@dataclass(frozen=True)
class Content:
    """Opaque literal text between tags."""

    text: str


@dataclass
class Tag:
    """A named bracket tag with ordered attributes and child elements.

    Equality is structural: name, attributes and children, all in order.
    The source position is informational and excluded from comparison.
    """

    name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Element"] = field(default_factory=list)
    position: Optional[TokenPosition] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate tag values."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")

    def get_attribute(self, name: str) -> Optional[AttributeValue]:
        """Get the value of the first attribute called ``name``."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute.value
        return None

    def has_attribute(self, name: str) -> bool:
        """Check if the tag carries an attribute called ``name``."""
        return any(attribute.name == name for attribute in self.attributes)

    def iter_tags(self) -> Iterator["Tag"]:
        """Iterate over all descendant tags in document order."""
        for child in self.children:
            if isinstance(child, Tag):
                yield child
                yield from child.iter_tags()

    def find_all(self, name: str) -> List["Tag"]:
        """Find all descendant tags with matching name."""
        return [tag for tag in self.iter_tags() if tag.name == name]

    @property
    def full_text(self) -> str:
        """Concatenated content of all descendants, markup removed."""
        parts = []
        for child in self.children:
            if isinstance(child, Content):
                parts.append(child.text)
            else:
                parts.append(child.full_text)
        return "".join(parts)


Element = Union[Content, Tag]


@dataclass
class ParseResult:
    """Outcome of a parse: a complete tree or exactly one error.

    Never holds a partial tree: on failure ``elements`` is empty and
    ``diagnostics`` holds the single diagnostic describing ``error``.
    """

    elements: List[Element] = field(default_factory=list)
    success: bool = True
    error: Optional[ParseError] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @classmethod
    def failed(
        cls,
        error: ParseError,
        diagnostic: DiagnosticEntry,
        correlation_id: Optional[str] = None,
    ) -> "ParseResult":
        """Create a failed result carrying a single diagnostic."""
        return cls(
            success=False,
            error=error,
            diagnostics=[diagnostic],
            correlation_id=correlation_id,
        )

    @property
    def element_count(self) -> int:
        """Number of top-level elements."""
        return len(self.elements)

    @property
    def tag_count(self) -> int:
        """Number of tags anywhere in the tree."""
        count = 0
        for element in self.elements:
            if isinstance(element, Tag):
                count += 1 + sum(1 for _ in element.iter_tags())
        return count

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def has_errors(self) -> bool:
        """Check if the parse was rejected."""
        return self.error is not None

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        summary: Dict[str, Any] = {
            "success": self.success,
            "element_count": self.element_count,
            "tag_count": self.tag_count,
            "processing_time_ms": self.performance.processing_time_ms,
            "characters_processed": self.performance.characters_processed,
            "tokens_generated": self.performance.tokens_generated,
            "max_depth": self.performance.max_depth,
            "correlation_id": self.correlation_id,
        }
        if self.error is not None:
            summary["error"] = self.error.to_dict()
        return summary


class SBBCodeTreeBuilder:
    """Recursive-descent builder turning tokens into a document tree.

    Nesting is expressed purely through call recursion; the depth limit in
    ``TreeConfig`` bounds it. When a validator is attached, every tag is
    validated as soon as it closes, before it joins its parent, so the
    innermost schema violation is the one reported.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        validator: Optional["SchemaValidator"] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (defaults apply when omitted)
            validator: Optional schema validator applied to each closed tag
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.validator = validator
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "sbbcode_tree_builder")
        self._reset_state([])

    def _reset_state(self, tokens: List[Token]) -> None:
        self._tokens = tokens
        self._index = 0
        self.elements_built = 0
        self.tags_validated = 0
        self.max_depth_reached = 0
        self.reporter = ErrorReporter("sbbcode_tree_builder", self.correlation_id)

    def build(self, tokens: Union[TokenizationResult, List[Token]]) -> List[Element]:
        """Build the document tree from a token stream.

        Args:
            tokens: Either a TokenizationResult or a list of tokens

        Returns:
            Ordered list of top-level elements

        Raises:
            ParseError: On the first structural or schema violation
            ValueError: If the token stream could not have come from the tokenizer
        """
        start_time = time.time()
        token_list = tokens.tokens if isinstance(tokens, TokenizationResult) else tokens
        self._reset_state(list(token_list))

        self.logger.debug(
            "Starting tree building",
            extra={
                "token_count": len(self._tokens),
                "schema_validation": self.validator is not None
            }
        )

        elements = self._parse_document()

        self.logger.debug(
            "Tree building completed",
            extra={
                "element_count": self.elements_built,
                "max_depth": self.max_depth_reached,
                "processing_time_ms": (time.time() - start_time) * 1000
            }
        )

        return elements

    # Token cursor

    def _at_end(self) -> bool:
        return self._index >= len(self._tokens)

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        if self._at_end():
            raise ValueError(f"Token stream ended, expected {token_type.name}")
        token = self._advance()
        if token.type != token_type:
            raise ValueError(
                f"Malformed token stream: expected {token_type.name}, "
                f"got {token.type.name} at offset {token.position.offset}"
            )
        return token

    # Grammar

    def _parse_document(self) -> List[Element]:
        elements: List[Element] = []
        while not self._at_end():
            token = self._peek()
            if token.type == TokenType.CLOSE_TAG_START:
                name = self._tokens[self._index + 1].value
                self.reporter.fail(UnexpectedCloseTagError(name, token.position))
            elements.append(self._parse_element(depth=1))
        return elements

    def _parse_element(self, depth: int) -> Element:
        token = self._advance()
        if token.type == TokenType.TEXT:
            self.elements_built += 1
            return Content(token.value)
        if token.type == TokenType.TAG_START:
            return self._parse_tag(token, depth)
        raise ValueError(
            f"Malformed token stream: unexpected {token.type.name} "
            f"at offset {token.position.offset}"
        )

    def _parse_tag(self, start_token: Token, depth: int) -> Tag:
        name = self._expect(TokenType.TAG_NAME).value
        if depth > self.config.max_nesting_depth:
            self.reporter.fail(NestingTooDeepError(
                name, self.config.max_nesting_depth, start_token.position
            ))
        self.max_depth_reached = max(self.max_depth_reached, depth)

        attributes: List[Attribute] = []
        while not self._at_end() and self._peek().type == TokenType.ATTR_NAME:
            attr_name = self._advance().value
            if self._at_end() or not self._peek().is_literal:
                raise ValueError(f"Malformed token stream: attribute {attr_name} has no literal")
            attributes.append(Attribute(attr_name, self._convert_literal(self._advance())))
        self._expect(TokenType.TAG_END)

        children: List[Element] = []
        while True:
            if self._at_end():
                self.reporter.fail(UnclosedTagError(name, start_token.position))
            if self._peek().type == TokenType.CLOSE_TAG_START:
                break
            children.append(self._parse_element(depth + 1))

        self._advance()
        close_token = self._expect(TokenType.TAG_NAME)
        self._expect(TokenType.TAG_END)
        if close_token.value != name:
            self.reporter.fail(TagNameMismatchError(
                name, close_token.value, close_token.position
            ))

        tag = Tag(name, attributes, children, position=start_token.position)
        if self.validator is not None:
            self.validator.validate_tag(tag, reporter=self.reporter)
            self.tags_validated += 1

        self.elements_built += 1
        return tag

    def _convert_literal(self, token: Token) -> AttributeValue:
        """Convert a literal token into its typed attribute value."""
        if token.type in (TokenType.DQ_STRING, TokenType.SQ_STRING):
            return StringValue(token.value)
        if token.type == TokenType.INT_NUMBER:
            return self._convert_int(token)
        if token.type == TokenType.FLOAT_NUMBER:
            if not FLOAT_LITERAL_PATTERN.fullmatch(token.value):
                self.reporter.fail(InvalidNumberLiteralError(token.value, token.position))
            return FloatValue(float(token.value))
        if token.type == TokenType.TRUE:
            return BoolValue(True)
        if token.type == TokenType.FALSE:
            return BoolValue(False)
        raise ValueError(f"Token {token.type.name} is not a literal")

    def _convert_int(self, token: Token) -> IntValue:
        # int() alone would also accept underscores and surrounding whitespace
        if not INT_LITERAL_PATTERN.fullmatch(token.value):
            self.reporter.fail(InvalidNumberLiteralError(token.value, token.position))
        # int() rejects strings past the interpreter's digit limit with ValueError
        significant_digits = token.value.lstrip("+-").lstrip("0")
        if len(significant_digits) > INT32_MAX_DIGITS:
            self._fail_int_range(token)
        number = int(token.value, 10)
        if not (INT32_MIN <= number <= INT32_MAX):
            self._fail_int_range(token)
        return IntValue(number)

    def _fail_int_range(self, token: Token) -> NoReturn:
        self.reporter.fail(InvalidNumberLiteralError(
            token.value,
            token.position,
            reason="outside signed 32-bit integer range",
        ))
