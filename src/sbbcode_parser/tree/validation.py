"""Schema validation for SBBCode document trees.

A schema is a read-only mapping from tag name to ``AllowedTag``. The
validator checks tag names, the kinds of declared attributes, and whether
undeclared attributes are tolerated. It never mutates the schema, so one
schema (and one validator) can be shared by concurrent parses.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, NoReturn, Optional, Union

from sbbcode_parser.shared import (
    AttributeKindNotAllowedError,
    ErrorReporter,
    ExtraAttributeNotAllowedError,
    ParseError,
    RequiredAttributeMissingError,
    TagNotAllowedError,
    ValidationConfig,
    get_logger,
)
from sbbcode_parser.tree.builder import AttributeKind, Element, Tag

ALL_KINDS: FrozenSet[AttributeKind] = frozenset(AttributeKind)


@dataclass(frozen=True)
class AllowedAttribute:
    """Declaration of an attribute permitted on a tag."""

    name: str
    required: bool = False
    permitted_kinds: FrozenSet[AttributeKind] = ALL_KINDS

    def __post_init__(self) -> None:
        """Normalize permitted kinds and validate the declaration."""
        if not self.name:
            raise ValueError("Attribute name cannot be empty")
        kinds = frozenset(self.permitted_kinds)
        if not kinds:
            raise ValueError(f"Attribute {self.name} must permit at least one kind")
        if not all(isinstance(kind, AttributeKind) for kind in kinds):
            raise TypeError("permitted_kinds must contain AttributeKind members")
        object.__setattr__(self, "permitted_kinds", kinds)

    def permits(self, kind: AttributeKind) -> bool:
        """Check if values of ``kind`` are allowed for this attribute."""
        return kind in self.permitted_kinds


@dataclass(frozen=True)
class AllowedTag:
    """Declaration of a permitted tag and its attributes.

    ``attributes`` may be given as a mapping keyed by attribute name or as
    an iterable of ``AllowedAttribute``; it is stored as a read-only mapping.
    """

    name: str
    attributes: Mapping[str, AllowedAttribute] = field(default_factory=dict)
    extra_attributes_permitted: bool = False

    def __post_init__(self) -> None:
        """Normalize attributes into a read-only mapping."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")

        declared: Union[Mapping[str, AllowedAttribute], Iterable[AllowedAttribute]]
        declared = self.attributes
        lookup: Dict[str, AllowedAttribute] = {}
        if isinstance(declared, Mapping):
            for key, attribute in declared.items():
                if key != attribute.name:
                    raise ValueError(
                        f"Attribute key {key!r} does not match declaration {attribute.name!r}"
                    )
                lookup[key] = attribute
        else:
            for attribute in declared:
                if attribute.name in lookup:
                    raise ValueError(
                        f"Attribute {attribute.name} declared twice on tag {self.name}"
                    )
                lookup[attribute.name] = attribute

        object.__setattr__(self, "attributes", MappingProxyType(lookup))

    @property
    def required_attributes(self) -> List[str]:
        """Names of the attributes declared as required."""
        return [name for name, attribute in self.attributes.items() if attribute.required]


Schema = Mapping[str, AllowedTag]


def schema_from_tags(tags: Iterable[AllowedTag]) -> Schema:
    """Build a read-only schema lookup from a list of tag declarations.

    Raises:
        ValueError: If two declarations share a tag name
    """
    lookup: Dict[str, AllowedTag] = {}
    for tag in tags:
        if tag.name in lookup:
            raise ValueError(f"Tag {tag.name} declared twice")
        lookup[tag.name] = tag
    return MappingProxyType(lookup)


class SchemaValidator:
    """Checks tags against a caller-supplied schema.

    The validator holds no per-parse state; errors are routed through the
    caller's ``ErrorReporter`` when one is given so that a parse still ends
    with a single diagnostic.
    """

    def __init__(
        self,
        schema: Schema,
        config: Optional[ValidationConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize schema validator.

        Args:
            schema: Mapping from tag name to its declaration
            config: Validation configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.schema = schema
        self.config = config or ValidationConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "schema_validator")

    def _fail(self, error: ParseError, reporter: Optional[ErrorReporter]) -> NoReturn:
        if reporter is not None:
            reporter.fail(error)
        self.logger.debug(
            "Schema violation",
            extra={"error_kind": error.kind.value, "details": error.details}
        )
        raise error

    def validate_tag(self, tag: Tag, reporter: Optional[ErrorReporter] = None) -> None:
        """Validate a single tag (children are not visited).

        Args:
            tag: Tag to check
            reporter: Optional fail-fast reporter of the running parse

        Raises:
            SchemaError: On the first violation found
        """
        allowed = self.schema.get(tag.name)
        if allowed is None:
            self._fail(TagNotAllowedError(tag.name, tag.position), reporter)

        for attribute in tag.attributes:
            declared = allowed.attributes.get(attribute.name)
            if declared is not None:
                if not declared.permits(attribute.kind):
                    self._fail(AttributeKindNotAllowedError(
                        tag.name, attribute.name, attribute.kind, tag.position
                    ), reporter)
            elif not allowed.extra_attributes_permitted:
                self._fail(ExtraAttributeNotAllowedError(
                    tag.name, attribute.name, tag.position
                ), reporter)

        if self.config.enforce_required_attributes:
            for name in allowed.required_attributes:
                if not tag.has_attribute(name):
                    self._fail(RequiredAttributeMissingError(
                        tag.name, name, tag.position
                    ), reporter)

    def validate_elements(
        self,
        elements: Iterable[Element],
        reporter: Optional[ErrorReporter] = None
    ) -> int:
        """Validate an already built tree depth-first, innermost tags first.

        Args:
            elements: Top-level elements of the tree
            reporter: Optional fail-fast reporter

        Returns:
            Number of tags validated

        Raises:
            SchemaError: On the first violation found
        """
        validated = 0
        for element in elements:
            if isinstance(element, Tag):
                validated += self.validate_elements(element.children, reporter)
                self.validate_tag(element, reporter)
                validated += 1
        return validated
