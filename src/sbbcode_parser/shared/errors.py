"""Error taxonomy for SBBCode parsing.

Every problem found while tokenizing, building or validating a document is
reported as a single ``ParseError`` subclass. Errors are grouped by the stage
that detects them: lexical, structural and schema.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from sbbcode_parser.tokenization.tokenizer import TokenPosition


class ErrorCategory(Enum):
    """Processing stage that detected an error."""

    LEXICAL = "lexical"
    STRUCTURAL = "structural"
    SCHEMA = "schema"


class ParseErrorKind(Enum):
    """Every distinct reason a parse can be rejected."""

    # Lexical
    UNTERMINATED_TAG = "unterminated_tag"
    UNEXPECTED_OPEN_BRACKET = "unexpected_open_bracket"
    UNMATCHED_CLOSE_BRACKET = "unmatched_close_bracket"
    ATTRIBUTE_MISSING_NAME = "attribute_missing_name"
    ATTRIBUTE_MISSING_VALUE = "attribute_missing_value"
    INVALID_NUMBER_LITERAL = "invalid_number_literal"
    INVALID_LITERAL = "invalid_literal"
    INVALID_TAG_NAME = "invalid_tag_name"
    UNEXPECTED_CHARACTER = "unexpected_character"

    # Structural
    TAG_NAME_MISMATCH = "tag_name_mismatch"
    UNCLOSED_TAG = "unclosed_tag"
    UNEXPECTED_CLOSE_TAG = "unexpected_close_tag"
    NESTING_TOO_DEEP = "nesting_too_deep"

    # Schema
    TAG_NOT_ALLOWED = "tag_not_allowed"
    ATTRIBUTE_KIND_NOT_ALLOWED = "attribute_kind_not_allowed"
    EXTRA_ATTRIBUTE_NOT_ALLOWED = "extra_attribute_not_allowed"
    REQUIRED_ATTRIBUTE_MISSING = "required_attribute_missing"


class ParseError(Exception):
    """Base class for all SBBCode parse failures.

    Attributes:
        kind: Specific reason for the failure
        message: Human readable description
        position: Source position of the offending token, when known
        details: Structured context (tag names, attribute names, kinds)
    """

    category: ErrorCategory

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        position: Optional["TokenPosition"] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.position = position
        self.details = details or {}

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return (
            f"{self.message} (line {self.position.line}, "
            f"column {self.position.column})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error into a plain dictionary."""
        result: Dict[str, Any] = {
            "kind": self.kind.value,
            "category": self.category.value,
            "message": self.message,
            "details": dict(self.details),
        }
        if self.position is not None:
            result["position"] = {
                "line": self.position.line,
                "column": self.position.column,
                "offset": self.position.offset,
            }
        return result


class LexicalError(ParseError):
    """Raised by the tokenizer."""

    category = ErrorCategory.LEXICAL


class StructuralError(ParseError):
    """Raised by the tree builder for nesting violations."""

    category = ErrorCategory.STRUCTURAL


class SchemaError(ParseError):
    """Raised by the schema validator."""

    category = ErrorCategory.SCHEMA


# Lexical errors

class UnterminatedTagError(LexicalError):
    """Input ended while a tag was still open."""

    def __init__(self, fragment: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.UNTERMINATED_TAG,
            f"input ended inside tag [{fragment}",
            position,
            {"fragment": fragment},
        )
        self.fragment = fragment


class UnexpectedOpenBracketError(LexicalError):
    """A '[' appeared inside a tag."""

    def __init__(self, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.UNEXPECTED_OPEN_BRACKET,
            "unexpected '[' inside tag",
            position,
        )


class UnmatchedCloseBracketError(LexicalError):
    """A ']' appeared in content."""

    def __init__(self, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.UNMATCHED_CLOSE_BRACKET,
            "unmatched ']' in content",
            position,
        )


class AttributeMissingNameError(LexicalError):
    """An '=' with no attribute name before it."""

    def __init__(self, tag: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.ATTRIBUTE_MISSING_NAME,
            f"attribute in tag [{tag}] has no name",
            position,
            {"tag": tag},
        )
        self.tag = tag


class AttributeMissingValueError(LexicalError):
    """An attribute name with no '=literal' after it."""

    def __init__(
        self, tag: str, attribute: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.ATTRIBUTE_MISSING_VALUE,
            f"attribute {attribute} in tag [{tag}] has no value",
            position,
            {"tag": tag, "attribute": attribute},
        )
        self.tag = tag
        self.attribute = attribute


class InvalidNumberLiteralError(LexicalError):
    """A numeric attribute value is malformed or out of range."""

    def __init__(
        self,
        literal: str,
        position: Optional["TokenPosition"] = None,
        reason: str = "malformed number",
    ) -> None:
        super().__init__(
            ParseErrorKind.INVALID_NUMBER_LITERAL,
            f"invalid number literal {literal!r}: {reason}",
            position,
            {"literal": literal, "reason": reason},
        )
        self.literal = literal


class InvalidLiteralError(LexicalError):
    """A bare attribute value that is neither a number nor a keyword."""

    def __init__(self, literal: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.INVALID_LITERAL,
            f"invalid attribute value {literal!r}",
            position,
            {"literal": literal},
        )
        self.literal = literal


class InvalidTagNameError(LexicalError):
    """A tag name is missing or does not follow the identifier grammar."""

    def __init__(self, found: str, position: Optional["TokenPosition"] = None) -> None:
        shown = repr(found) if found else "end of tag"
        super().__init__(
            ParseErrorKind.INVALID_TAG_NAME,
            f"expected tag name, found {shown}",
            position,
            {"found": found},
        )
        self.found = found


class UnexpectedCharacterError(LexicalError):
    """Any other character that does not fit the tag grammar."""

    def __init__(
        self, char: str, expected: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.UNEXPECTED_CHARACTER,
            f"unexpected character {char!r}, expected {expected}",
            position,
            {"char": char, "expected": expected},
        )
        self.char = char
        self.expected = expected


# Structural errors

class TagNameMismatchError(StructuralError):
    """A tag was closed with a different name than it was opened with."""

    def __init__(
        self, opened: str, closed_with: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.TAG_NAME_MISMATCH,
            f"opened tag [{opened}] cannot be closed with [/{closed_with}]",
            position,
            {"opened": opened, "closed_with": closed_with},
        )
        self.opened = opened
        self.closed_with = closed_with


class UnclosedTagError(StructuralError):
    """Input ended before a tag was closed."""

    def __init__(self, name: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.UNCLOSED_TAG,
            f"tag [{name}] is never closed",
            position,
            {"tag": name},
        )
        self.name = name


class UnexpectedCloseTagError(StructuralError):
    """A closing tag appeared with no open tag to close."""

    def __init__(self, name: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.UNEXPECTED_CLOSE_TAG,
            f"closing tag [/{name}] has no matching opening tag",
            position,
            {"tag": name},
        )
        self.name = name


class NestingTooDeepError(StructuralError):
    """Tag nesting exceeded the configured limit."""

    def __init__(
        self, name: str, limit: int, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.NESTING_TOO_DEEP,
            f"tag [{name}] exceeds maximum nesting depth of {limit}",
            position,
            {"tag": name, "limit": limit},
        )
        self.name = name
        self.limit = limit


# Schema errors

class TagNotAllowedError(SchemaError):
    """The tag name is not declared in the schema."""

    def __init__(self, tag: str, position: Optional["TokenPosition"] = None) -> None:
        super().__init__(
            ParseErrorKind.TAG_NOT_ALLOWED,
            f"tag [{tag}] not allowed",
            position,
            {"tag": tag},
        )
        self.tag = tag


class AttributeKindNotAllowedError(SchemaError):
    """A declared attribute carries a value of a kind the schema forbids."""

    def __init__(
        self,
        tag: str,
        attribute: str,
        actual_kind: Any,
        position: Optional["TokenPosition"] = None,
    ) -> None:
        kind_name = getattr(actual_kind, "value", str(actual_kind))
        super().__init__(
            ParseErrorKind.ATTRIBUTE_KIND_NOT_ALLOWED,
            f"tag [{tag}] contains attribute {attribute} with not allowed kind '{kind_name}'",
            position,
            {"tag": tag, "attribute": attribute, "actual_kind": kind_name},
        )
        self.tag = tag
        self.attribute = attribute
        self.actual_kind = actual_kind


class ExtraAttributeNotAllowedError(SchemaError):
    """An undeclared attribute on a tag that forbids extra attributes."""

    def __init__(
        self, tag: str, attribute: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.EXTRA_ATTRIBUTE_NOT_ALLOWED,
            f"tag [{tag}] contains not allowed extra attribute {attribute}",
            position,
            {"tag": tag, "attribute": attribute},
        )
        self.tag = tag
        self.attribute = attribute


class RequiredAttributeMissingError(SchemaError):
    """A required attribute is absent (only when enforcement is enabled)."""

    def __init__(
        self, tag: str, attribute: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(
            ParseErrorKind.REQUIRED_ATTRIBUTE_MISSING,
            f"tag [{tag}] is missing required attribute {attribute}",
            position,
            {"tag": tag, "attribute": attribute},
        )
        self.tag = tag
        self.attribute = attribute
