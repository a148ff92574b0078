"""Tests for the parse error taxonomy."""

import pytest

from sbbcode_parser.shared import (
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
from sbbcode_parser.tokenization import TokenPosition
from sbbcode_parser.tree import AttributeKind

ERRORS = [
    (UnterminatedTagError("b"), ParseErrorKind.UNTERMINATED_TAG, LexicalError),
    (UnexpectedOpenBracketError(), ParseErrorKind.UNEXPECTED_OPEN_BRACKET, LexicalError),
    (UnmatchedCloseBracketError(), ParseErrorKind.UNMATCHED_CLOSE_BRACKET, LexicalError),
    (AttributeMissingNameError("b"), ParseErrorKind.ATTRIBUTE_MISSING_NAME, LexicalError),
    (
        AttributeMissingValueError("b", "attr"),
        ParseErrorKind.ATTRIBUTE_MISSING_VALUE,
        LexicalError,
    ),
    (InvalidNumberLiteralError("1x"), ParseErrorKind.INVALID_NUMBER_LITERAL, LexicalError),
    (InvalidLiteralError("red"), ParseErrorKind.INVALID_LITERAL, LexicalError),
    (InvalidTagNameError("1"), ParseErrorKind.INVALID_TAG_NAME, LexicalError),
    (
        UnexpectedCharacterError("x", "']'"),
        ParseErrorKind.UNEXPECTED_CHARACTER,
        LexicalError,
    ),
    (TagNameMismatchError("b", "i"), ParseErrorKind.TAG_NAME_MISMATCH, StructuralError),
    (UnclosedTagError("b"), ParseErrorKind.UNCLOSED_TAG, StructuralError),
    (UnexpectedCloseTagError("b"), ParseErrorKind.UNEXPECTED_CLOSE_TAG, StructuralError),
    (NestingTooDeepError("b", 3), ParseErrorKind.NESTING_TOO_DEEP, StructuralError),
    (TagNotAllowedError("u"), ParseErrorKind.TAG_NOT_ALLOWED, SchemaError),
    (
        AttributeKindNotAllowedError("b", "size", AttributeKind.FLOAT),
        ParseErrorKind.ATTRIBUTE_KIND_NOT_ALLOWED,
        SchemaError,
    ),
    (
        ExtraAttributeNotAllowedError("b", "x"),
        ParseErrorKind.EXTRA_ATTRIBUTE_NOT_ALLOWED,
        SchemaError,
    ),
    (
        RequiredAttributeMissingError("b", "x"),
        ParseErrorKind.REQUIRED_ATTRIBUTE_MISSING,
        SchemaError,
    ),
]


class TestErrorTaxonomy:
    """Tests for error kinds and categories."""

    @pytest.mark.parametrize("error,kind,base", ERRORS)
    def test_kind_and_category(self, error, kind, base):
        """Test that every error carries its kind and stage."""
        assert isinstance(error, ParseError)
        assert isinstance(error, base)
        assert error.kind == kind
        assert error.category == base.category

    def test_every_kind_has_an_error_class(self):
        """Test that the taxonomy is complete."""
        assert {kind for _, kind, _ in ERRORS} == set(ParseErrorKind)

    def test_categories(self):
        """Test the category values."""
        assert LexicalError.category == ErrorCategory.LEXICAL
        assert StructuralError.category == ErrorCategory.STRUCTURAL
        assert SchemaError.category == ErrorCategory.SCHEMA


class TestParseError:
    """Tests for ParseError formatting."""

    def test_str_without_position(self):
        """Test the message when no position is known."""
        error = TagNotAllowedError("u")

        assert str(error) == "tag [u] not allowed"

    def test_str_with_position(self):
        """Test that the position is appended to the message."""
        error = UnmatchedCloseBracketError(TokenPosition(3, 14, 40))

        assert str(error) == "unmatched ']' in content (line 3, column 14)"

    def test_to_dict(self):
        """Test structured conversion."""
        error = TagNameMismatchError("b", "i", TokenPosition(1, 17, 16))

        assert error.to_dict() == {
            "kind": "tag_name_mismatch",
            "category": "structural",
            "message": "opened tag [b] cannot be closed with [/i]",
            "details": {"opened": "b", "closed_with": "i"},
            "position": {"line": 1, "column": 17, "offset": 16},
        }

    def test_to_dict_without_position(self):
        """Test that the position key is omitted when unknown."""
        assert "position" not in UnclosedTagError("b").to_dict()

    def test_kind_name_in_details(self):
        """Test that attribute kinds are reported by their value."""
        error = AttributeKindNotAllowedError("style", "size", AttributeKind.STRING)

        assert error.details["actual_kind"] == "string"
        assert "'string'" in error.message

    def test_empty_tag_name_message(self):
        """Test the message for a missing tag name."""
        assert InvalidTagNameError("").message == "expected tag name, found end of tag"

    def test_errors_are_raisable(self):
        """Test that errors behave like ordinary exceptions."""
        with pytest.raises(LexicalError, match="has no value"):
            raise AttributeMissingValueError("b", "attr")
