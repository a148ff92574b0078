"""SBBCode parser.

Parses bracket-tag markup (``text [tag attr=value] ... [/tag]``) into a typed
document tree and optionally validates it against a schema of allowed tags
and attribute kinds. Parsing is fail-fast: a call returns a complete tree or
raises the first error found.

API levels:
- Level 1: Simple functions - parse(), try_parse()
- Level 2: Configured parser - SBBCodeParser class
"""

__version__ = "0.1.0"
__author__ = "SBBCode Parser Team"

from .api import SBBCodeParser, parse, try_parse
from .shared.config import ParserConfig
from .shared.errors import ParseError, ParseErrorKind
from .tree import (
    AllowedAttribute,
    AllowedTag,
    Attribute,
    AttributeKind,
    BoolValue,
    Content,
    FloatValue,
    IntValue,
    ParseResult,
    StringValue,
    Tag,
    schema_from_tags,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "try_parse",

    # Level 2: Configured parser
    "SBBCodeParser",
    "ParserConfig",

    # Document tree
    "Attribute",
    "AttributeKind",
    "BoolValue",
    "Content",
    "FloatValue",
    "IntValue",
    "StringValue",
    "Tag",

    # Schema
    "AllowedAttribute",
    "AllowedTag",
    "schema_from_tags",

    # Results and errors
    "ParseError",
    "ParseErrorKind",
    "ParseResult",
]
