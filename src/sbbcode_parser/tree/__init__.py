"""Tree building and schema validation for SBBCode parsing.

Key Components:
    SBBCodeTreeBuilder: Recursive-descent builder turning tokens into a tree
    Content, Tag: The two element kinds of the document tree
    Attribute: Named, typed attribute value of a tag
    SchemaValidator: Checks tags against a caller-supplied schema
    ParseResult: Complete tree or single error of one parse
"""

from .builder import (
    Attribute,
    AttributeKind,
    AttributeValue,
    BoolValue,
    Content,
    Element,
    FloatValue,
    IntValue,
    ParseResult,
    SBBCodeTreeBuilder,
    StringValue,
    Tag,
)
from .validation import (
    AllowedAttribute,
    AllowedTag,
    Schema,
    SchemaValidator,
    schema_from_tags,
)

__all__ = [
    "AllowedAttribute",
    "AllowedTag",
    "Attribute",
    "AttributeKind",
    "AttributeValue",
    "BoolValue",
    "Content",
    "Element",
    "FloatValue",
    "IntValue",
    "ParseResult",
    "SBBCodeTreeBuilder",
    "Schema",
    "SchemaValidator",
    "StringValue",
    "Tag",
    "schema_from_tags",
]
