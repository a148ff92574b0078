"""Core SBBCode tokenization implementation.

This module implements a strict state machine tokenizer that converts markup
text into tokens, switching between content mode and tag mode on bracket
boundaries. The first lexical violation aborts tokenization.

Identifier grammar (tag and attribute names): an ASCII letter followed by
ASCII letters, digits or underscores. Names are case-sensitive.
"""

import re
import string
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from sbbcode_parser.shared import (
    AttributeMissingNameError,
    AttributeMissingValueError,
    ErrorReporter,
    InvalidLiteralError,
    InvalidNumberLiteralError,
    InvalidTagNameError,
    ParseError,
    TokenizationConfig,
    UnexpectedCharacterError,
    UnexpectedOpenBracketError,
    UnmatchedCloseBracketError,
    UnterminatedTagError,
    get_logger,
)

NAME_START_CHARS = frozenset(string.ascii_letters)
NAME_CHARS = NAME_START_CHARS | frozenset(string.digits) | frozenset("_")
NUMBER_START_CHARS = frozenset(string.digits) | frozenset("+-.")
QUOTE_CHARS = frozenset("\"'")

INT_LITERAL_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_LITERAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)")

TRUE_KEYWORD = "true"
FALSE_KEYWORD = "false"

# Max length of the tag fragment quoted in unterminated-tag errors
FRAGMENT_PREVIEW_LENGTH = 40


class TokenType(Enum):
    """SBBCode token types produced by the tokenizer."""

    TEXT = auto()               # Literal content between tags
    TAG_START = auto()          # Opening tag marker: [
    CLOSE_TAG_START = auto()    # Closing tag marker: [/
    TAG_NAME = auto()           # Tag name in opening or closing tag
    TAG_END = auto()            # Tag end marker: ]
    ATTR_NAME = auto()          # Attribute name (the '=' is implied)

    # Attribute value literals
    DQ_STRING = auto()          # "double quoted"
    SQ_STRING = auto()          # 'single quoted'
    INT_NUMBER = auto()         # 42, -7, +3
    FLOAT_NUMBER = auto()       # 1.5, -0.25, .5
    TRUE = auto()               # true
    FALSE = auto()              # false

    @property
    def is_literal(self) -> bool:
        """Check if this token type is an attribute value literal."""
        return self in _LITERAL_TOKEN_TYPES


_LITERAL_TOKEN_TYPES = frozenset({
    TokenType.DQ_STRING,
    TokenType.SQ_STRING,
    TokenType.INT_NUMBER,
    TokenType.FLOAT_NUMBER,
    TokenType.TRUE,
    TokenType.FALSE,
})


class TokenizerState(Enum):
    """State machine states for SBBCode tokenization."""

    TEXT_CONTENT = auto()       # Accumulating content
    TAG_OPENING = auto()        # Just read [
    CLOSE_TAG_OPENING = auto()  # Just read [/
    TAG_NAME = auto()           # Reading opening tag name
    CLOSE_TAG_NAME = auto()     # Reading closing tag name
    CLOSE_TAG_TRAILING = auto() # Whitespace after closing tag name
    ATTR_SEPARATOR = auto()     # Whitespace between attributes
    ATTR_NAME = auto()          # Reading attribute name
    ATTR_VALUE_START = auto()   # Just read =
    ATTR_VALUE_QUOTED = auto()  # Inside quoted string
    ATTR_VALUE_BARE = auto()    # Inside number or keyword
    ATTR_VALUE_END = auto()     # Just closed a quoted string


@dataclass(frozen=True)
class TokenPosition:
    """Position information for tokens and errors."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass
class Token:
    """Represents a single token with its source position."""

    type: TokenType
    value: str
    position: TokenPosition
    raw_content: Optional[str] = None

    @property
    def is_literal(self) -> bool:
        """Check if this token is an attribute value literal."""
        return self.type.is_literal


@dataclass
class TokenizationResult:
    """Result of a successful tokenization."""

    tokens: List[Token]
    character_count: int = 0
    processing_time_ms: float = 0.0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def token_type_distribution(self) -> Dict[str, int]:
        """Count tokens per token type name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            distribution[token.type.name] = distribution.get(token.type.name, 0) + 1
        return distribution


class SBBCodeTokenizer:
    """Converts SBBCode text into a token list.

    A tokenizer instance holds per-call state and must not be shared between
    threads; create one per concurrent parse.
    """

    def __init__(
        self,
        config: Optional[TokenizationConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenization configuration (defaults apply when omitted)
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TokenizationConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "sbbcode_tokenizer")

        self._handlers: Dict[TokenizerState, Callable[[str], None]] = {
            TokenizerState.TEXT_CONTENT: self._process_text_content,
            TokenizerState.TAG_OPENING: self._process_tag_opening,
            TokenizerState.CLOSE_TAG_OPENING: self._process_close_tag_opening,
            TokenizerState.TAG_NAME: self._process_tag_name,
            TokenizerState.CLOSE_TAG_NAME: self._process_close_tag_name,
            TokenizerState.CLOSE_TAG_TRAILING: self._process_close_tag_trailing,
            TokenizerState.ATTR_SEPARATOR: self._process_attr_separator,
            TokenizerState.ATTR_NAME: self._process_attr_name,
            TokenizerState.ATTR_VALUE_START: self._process_attr_value_start,
            TokenizerState.ATTR_VALUE_QUOTED: self._process_attr_value_quoted,
            TokenizerState.ATTR_VALUE_BARE: self._process_attr_value_bare,
            TokenizerState.ATTR_VALUE_END: self._process_attr_value_end,
        }
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset tokenizer state for new processing."""
        self.state = TokenizerState.TEXT_CONTENT
        self.current_position = TokenPosition(1, 1, 0)
        self.current_token_start = self.current_position
        self.tag_start = self.current_position
        self.token_buffer = ""
        self.tokens: List[Token] = []
        self.quote_char: Optional[str] = None
        self.tag_name = ""
        self.attr_name = ""
        self.text = ""
        self.reporter = ErrorReporter("sbbcode_tokenizer", self.correlation_id)

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize SBBCode text.

        Args:
            text: Markup to tokenize

        Returns:
            TokenizationResult with the full token list

        Raises:
            LexicalError: On the first lexical violation found
        """
        start_time = time.time()
        self._reset_state()
        self.text = text

        self.logger.debug(
            "Starting tokenization",
            extra={"char_count": len(text)}
        )

        for char in text:
            self._handlers[self.state](char)
            self._update_position(char)
        self._finalize()

        result = TokenizationResult(
            tokens=self.tokens,
            character_count=len(text),
            processing_time_ms=(time.time() - start_time) * 1000,
        )

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "processing_time_ms": result.processing_time_ms
            }
        )

        return result

    def _update_position(self, char: str) -> None:
        """Advance position tracking past ``char``."""
        line, column, offset = (
            self.current_position.line,
            self.current_position.column,
            self.current_position.offset + 1,
        )
        if char == "\n":
            line, column = line + 1, 1
        elif char == "\t":
            tab_size = self.config.tab_size
            column = ((column - 1) // tab_size + 1) * tab_size + 1
        else:
            column += 1
        self.current_position = TokenPosition(line, column, offset)

    def _fail(self, error: ParseError) -> None:
        self.reporter.fail(error)

    def _start_new_token(self, initial: str = "") -> None:
        self.current_token_start = self.current_position
        self.token_buffer = initial

    def _emit_token(
        self,
        token_type: TokenType,
        value: str,
        position: Optional[TokenPosition] = None,
        raw_content: Optional[str] = None
    ) -> None:
        self.tokens.append(Token(
            type=token_type,
            value=value,
            position=position or self.current_token_start,
            raw_content=raw_content,
        ))
        self.token_buffer = ""

    def _emit_tag_end(self) -> None:
        self._emit_token(TokenType.TAG_END, "]", self.current_position)
        self.state = TokenizerState.TEXT_CONTENT

    def _unexpected_open_bracket(self) -> None:
        self._fail(UnexpectedOpenBracketError(self.current_position))

    # Content mode

    def _process_text_content(self, char: str) -> None:
        if char == "[":
            if self.token_buffer:
                self._emit_token(TokenType.TEXT, self.token_buffer)
            self.tag_start = self.current_position
            self.tag_name = ""
            self.state = TokenizerState.TAG_OPENING
        elif char == "]":
            self._fail(UnmatchedCloseBracketError(self.current_position))
        else:
            if not self.token_buffer:
                self._start_new_token()
            self.token_buffer += char

    # Tag mode

    def _process_tag_opening(self, char: str) -> None:
        if char == "[":
            self._unexpected_open_bracket()
        elif char == "/":
            self.state = TokenizerState.CLOSE_TAG_OPENING
        elif char in NAME_START_CHARS:
            self._emit_token(TokenType.TAG_START, "[", self.tag_start)
            self._start_new_token(char)
            self.state = TokenizerState.TAG_NAME
        else:
            self._fail(InvalidTagNameError(
                "" if char == "]" else char, self.current_position
            ))

    def _process_close_tag_opening(self, char: str) -> None:
        if char == "[":
            self._unexpected_open_bracket()
        elif char in NAME_START_CHARS:
            self._emit_token(TokenType.CLOSE_TAG_START, "[/", self.tag_start)
            self._start_new_token(char)
            self.state = TokenizerState.CLOSE_TAG_NAME
        else:
            self._fail(InvalidTagNameError(
                "" if char == "]" else char, self.current_position
            ))

    def _emit_tag_name(self) -> None:
        self.tag_name = self.token_buffer
        self._emit_token(TokenType.TAG_NAME, self.token_buffer)

    def _process_tag_name(self, char: str) -> None:
        if char in NAME_CHARS:
            self.token_buffer += char
        elif char == "]":
            self._emit_tag_name()
            self._emit_tag_end()
        elif char.isspace():
            self._emit_tag_name()
            self.state = TokenizerState.ATTR_SEPARATOR
        elif char == "[":
            self._unexpected_open_bracket()
        elif char == "=":
            # "[b=1]": the identifier before '=' is the tag name
            self._fail(AttributeMissingNameError(self.token_buffer, self.current_position))
        else:
            self._fail(InvalidTagNameError(
                self.token_buffer + char, self.current_token_start
            ))

    def _process_close_tag_name(self, char: str) -> None:
        if char in NAME_CHARS:
            self.token_buffer += char
        elif char == "]":
            self._emit_tag_name()
            self._emit_tag_end()
        elif char.isspace():
            self._emit_tag_name()
            self.state = TokenizerState.CLOSE_TAG_TRAILING
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self._fail(UnexpectedCharacterError(
                char, "']' after closing tag name", self.current_position
            ))

    def _process_close_tag_trailing(self, char: str) -> None:
        if char == "]":
            self._emit_tag_end()
        elif char == "[":
            self._unexpected_open_bracket()
        elif not char.isspace():
            self._fail(UnexpectedCharacterError(
                char, "']' after closing tag name", self.current_position
            ))

    def _process_attr_separator(self, char: str) -> None:
        if char.isspace():
            return
        if char == "]":
            self._emit_tag_end()
        elif char in NAME_START_CHARS:
            self._start_new_token(char)
            self.state = TokenizerState.ATTR_NAME
        elif char == "=":
            self._fail(AttributeMissingNameError(self.tag_name, self.current_position))
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self._fail(UnexpectedCharacterError(
                char, "attribute name or ']'", self.current_position
            ))

    def _process_attr_name(self, char: str) -> None:
        if char in NAME_CHARS:
            self.token_buffer += char
        elif char == "=":
            self.attr_name = self.token_buffer
            self._emit_token(TokenType.ATTR_NAME, self.token_buffer)
            self.state = TokenizerState.ATTR_VALUE_START
        elif char == "]" or char.isspace():
            self._fail(AttributeMissingValueError(
                self.tag_name, self.token_buffer, self.current_token_start
            ))
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self._fail(UnexpectedCharacterError(
                char, "'=' after attribute name", self.current_position
            ))

    def _process_attr_value_start(self, char: str) -> None:
        if char in QUOTE_CHARS:
            self._start_new_token()
            self.quote_char = char
            self.state = TokenizerState.ATTR_VALUE_QUOTED
        elif char == "]" or char.isspace():
            self._fail(AttributeMissingValueError(
                self.tag_name, self.attr_name, self.current_position
            ))
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self._start_new_token(char)
            self.state = TokenizerState.ATTR_VALUE_BARE

    def _process_attr_value_quoted(self, char: str) -> None:
        if char != self.quote_char:
            self.token_buffer += char
            return

        token_type = TokenType.DQ_STRING if char == '"' else TokenType.SQ_STRING
        self._emit_token(
            token_type,
            self.token_buffer,
            raw_content=f"{char}{self.token_buffer}{char}",
        )
        self.quote_char = None
        self.state = TokenizerState.ATTR_VALUE_END

    def _process_attr_value_bare(self, char: str) -> None:
        if char == "]":
            self._emit_bare_value()
            self._emit_tag_end()
        elif char.isspace():
            self._emit_bare_value()
            self.state = TokenizerState.ATTR_SEPARATOR
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self.token_buffer += char

    def _emit_bare_value(self) -> None:
        """Classify an unquoted literal as a number or keyword."""
        literal = self.token_buffer
        if INT_LITERAL_PATTERN.fullmatch(literal):
            self._emit_token(TokenType.INT_NUMBER, literal)
        elif FLOAT_LITERAL_PATTERN.fullmatch(literal):
            self._emit_token(TokenType.FLOAT_NUMBER, literal)
        elif literal == TRUE_KEYWORD:
            self._emit_token(TokenType.TRUE, literal)
        elif literal == FALSE_KEYWORD:
            self._emit_token(TokenType.FALSE, literal)
        elif literal[0] in NUMBER_START_CHARS:
            self._fail(InvalidNumberLiteralError(literal, self.current_token_start))
        else:
            self._fail(InvalidLiteralError(literal, self.current_token_start))

    def _process_attr_value_end(self, char: str) -> None:
        if char == "]":
            self._emit_tag_end()
        elif char.isspace():
            self.state = TokenizerState.ATTR_SEPARATOR
        elif char == "[":
            self._unexpected_open_bracket()
        else:
            self._fail(UnexpectedCharacterError(
                char, "whitespace or ']' after attribute value", self.current_position
            ))

    def _finalize(self) -> None:
        """Flush trailing content or reject input that ends inside a tag."""
        if self.state == TokenizerState.TEXT_CONTENT:
            if self.token_buffer:
                self._emit_token(TokenType.TEXT, self.token_buffer)
            return

        fragment = self.text[self.tag_start.offset + 1:]
        if len(fragment) > FRAGMENT_PREVIEW_LENGTH:
            fragment = fragment[:FRAGMENT_PREVIEW_LENGTH] + "..."
        self._fail(UnterminatedTagError(fragment, self.tag_start))
