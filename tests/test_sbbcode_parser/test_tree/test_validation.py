"""Tests for schema declarations and schema validation."""

from typing import List

import pytest

from sbbcode_parser.shared import (
    AttributeKindNotAllowedError,
    ErrorReporter,
    ExtraAttributeNotAllowedError,
    RequiredAttributeMissingError,
    SchemaError,
    TagNotAllowedError,
    ValidationConfig,
)
from sbbcode_parser.tokenization import SBBCodeTokenizer
from sbbcode_parser.tree import (
    AllowedAttribute,
    AllowedTag,
    Attribute,
    AttributeKind,
    Content,
    Element,
    IntValue,
    SBBCodeTreeBuilder,
    Schema,
    SchemaValidator,
    StringValue,
    Tag,
    schema_from_tags,
)


@pytest.fixture
def schema() -> Schema:
    """Schema with formatting tags and typed style attributes."""
    return schema_from_tags([
        AllowedTag("b"),
        AllowedTag("i"),
        AllowedTag("style", [
            AllowedAttribute("color", required=True, permitted_kinds={AttributeKind.STRING}),
            AllowedAttribute("size", permitted_kinds={AttributeKind.INT}),
        ]),
        AllowedTag("font", [
            AllowedAttribute("size", permitted_kinds={AttributeKind.STRING}),
        ]),
        AllowedTag(
            "span",
            [AllowedAttribute("color", required=True, permitted_kinds={AttributeKind.STRING})],
            extra_attributes_permitted=True,
        ),
    ])


def build(text: str, validator: SchemaValidator) -> List[Element]:
    tokens = SBBCodeTokenizer().tokenize(text)
    return SBBCodeTreeBuilder(validator=validator).build(tokens)


class TestAllowedAttribute:
    """Tests for attribute declarations."""

    def test_defaults_permit_every_kind(self):
        """Test the default declaration."""
        attribute = AllowedAttribute("color")

        assert not attribute.required
        assert all(attribute.permits(kind) for kind in AttributeKind)

    def test_kinds_are_normalized(self):
        """Test that kinds given as a set or list become a frozenset."""
        attribute = AllowedAttribute("size", permitted_kinds=[AttributeKind.INT])

        assert attribute.permitted_kinds == frozenset({AttributeKind.INT})
        assert attribute.permits(AttributeKind.INT)
        assert not attribute.permits(AttributeKind.FLOAT)

    def test_empty_kinds_rejected(self):
        """Test that an attribute must permit something."""
        with pytest.raises(ValueError, match="at least one kind"):
            AllowedAttribute("size", permitted_kinds=set())

    def test_kinds_must_be_attribute_kinds(self):
        """Test that type objects are not accepted as kinds."""
        with pytest.raises(TypeError):
            AllowedAttribute("size", permitted_kinds={int})


class TestAllowedTag:
    """Tests for tag declarations and schema construction."""

    def test_attribute_list_becomes_mapping(self):
        """Test that attributes are looked up by name."""
        tag = AllowedTag("style", [AllowedAttribute("color", required=True)])

        assert set(tag.attributes) == {"color"}
        assert tag.attributes["color"].required
        assert tag.required_attributes == ["color"]

    def test_attribute_mapping_is_read_only(self):
        """Test that declarations cannot be modified after creation."""
        tag = AllowedTag("style", {"color": AllowedAttribute("color")})

        with pytest.raises(TypeError):
            tag.attributes["size"] = AllowedAttribute("size")

    def test_mapping_key_must_match_name(self):
        """Test mismatched keys in an attribute mapping."""
        with pytest.raises(ValueError, match="does not match"):
            AllowedTag("style", {"colour": AllowedAttribute("color")})

    def test_duplicate_attribute_declaration(self):
        """Test duplicate attribute names in a declaration list."""
        with pytest.raises(ValueError, match="declared twice"):
            AllowedTag("style", [AllowedAttribute("color"), AllowedAttribute("color")])

    def test_schema_from_tags(self):
        """Test building a schema lookup."""
        schema = schema_from_tags([AllowedTag("b"), AllowedTag("i")])

        assert set(schema) == {"b", "i"}
        with pytest.raises(TypeError):
            schema["u"] = AllowedTag("u")

    def test_duplicate_tag_declaration(self):
        """Test duplicate tag names in a schema."""
        with pytest.raises(ValueError, match="declared twice"):
            schema_from_tags([AllowedTag("b"), AllowedTag("b")])


class TestSchemaValidator:
    """Tests for SchemaValidator wired into the tree builder."""

    def test_allowed_tags(self, schema):
        """Test a document using only declared tags."""
        validator = SchemaValidator(schema)

        assert build("[i][b]italic bold[/b][/i]", validator) == [
            Tag("i", [], [Tag("b", [], [Content("italic bold")])])
        ]

    def test_declared_attributes(self, schema):
        """Test declared attributes with permitted kinds."""
        elements = build(
            "[style color='red' size=24]this text is red with size 24[/style]",
            SchemaValidator(schema),
        )

        assert elements[0].attributes == [
            Attribute("color", StringValue("red")),
            Attribute("size", IntValue(24)),
        ]

    def test_optional_attribute_may_be_absent(self, schema):
        """Test that an optional attribute can be omitted."""
        elements = build("[style color='red']x[/style]", SchemaValidator(schema))

        assert elements[0].get_attribute("size") is None

    def test_extra_attributes_carried_through(self, schema):
        """Test tags that permit undeclared attributes."""
        elements = build(
            "[span color='red' extraAttribute=42]text[/span]", SchemaValidator(schema)
        )

        assert elements[0].get_attribute("extraAttribute") == IntValue(42)

    def test_tag_not_allowed(self, schema):
        """Test an undeclared tag."""
        with pytest.raises(TagNotAllowedError) as exc_info:
            build("[u]underline[/u]", SchemaValidator(schema))

        assert exc_info.value.tag == "u"
        assert str(exc_info.value).startswith("tag [u] not allowed")

    def test_attribute_kind_not_allowed(self, schema):
        """Test a declared attribute with a forbidden kind."""
        with pytest.raises(AttributeKindNotAllowedError) as exc_info:
            build("[style color='red' size='big']x[/style]", SchemaValidator(schema))

        assert exc_info.value.attribute == "size"
        assert exc_info.value.actual_kind == AttributeKind.STRING
        assert exc_info.value.details["actual_kind"] == "string"

    def test_kind_checked_per_tag(self, schema):
        """Test that an attribute valid on one tag is still checked on another."""
        validator = SchemaValidator(schema)
        build("[style color='red' size=3]x[/style]", validator)

        with pytest.raises(AttributeKindNotAllowedError) as exc_info:
            build("[font size=3]x[/font]", validator)

        assert exc_info.value.tag == "font"

    def test_extra_attribute_not_allowed(self, schema):
        """Test an undeclared attribute on a closed tag."""
        with pytest.raises(ExtraAttributeNotAllowedError) as exc_info:
            build("[style color='red' weight=700]x[/style]", SchemaValidator(schema))

        assert exc_info.value.attribute == "weight"

    def test_attributes_checked_in_order(self, schema):
        """Test that the first offending attribute is reported."""
        with pytest.raises(ExtraAttributeNotAllowedError) as exc_info:
            build("[style weight=1 size='big']x[/style]", SchemaValidator(schema))

        assert exc_info.value.attribute == "weight"

    def test_innermost_violation_reported_first(self, schema):
        """Test that tags are validated as they close."""
        with pytest.raises(TagNotAllowedError) as exc_info:
            build("[outer][inner]x[/inner][/outer]", SchemaValidator(schema))

        assert exc_info.value.tag == "inner"

    def test_required_not_enforced_by_default(self, schema):
        """Test that required attributes are informational by default."""
        elements = build("[style size=3]x[/style]", SchemaValidator(schema))

        assert elements[0].get_attribute("color") is None

    def test_required_enforced_on_request(self, schema):
        """Test enforcement of required attributes."""
        validator = SchemaValidator(
            schema, ValidationConfig(enforce_required_attributes=True)
        )

        with pytest.raises(RequiredAttributeMissingError) as exc_info:
            build("[style size=3]x[/style]", validator)

        assert exc_info.value.attribute == "color"

    def test_empty_schema(self):
        """Test that an empty schema accepts content but no tags."""
        validator = SchemaValidator({})

        assert build("just text", validator) == [Content("just text")]
        with pytest.raises(TagNotAllowedError):
            build("[b]x[/b]", validator)

    def test_schema_is_not_mutated(self, schema):
        """Test that validation leaves the schema untouched."""
        before = {name: dict(tag.attributes) for name, tag in schema.items()}

        build("[style color='red' size=24]x[/style]", SchemaValidator(schema))
        with pytest.raises(SchemaError):
            build("[u]x[/u]", SchemaValidator(schema))

        assert {name: dict(tag.attributes) for name, tag in schema.items()} == before

    def test_builder_counts_validated_tags(self, schema):
        """Test the tags_validated counter."""
        builder = SBBCodeTreeBuilder(validator=SchemaValidator(schema))
        builder.build(SBBCodeTokenizer().tokenize("[i][b]x[/b][/i][b]y[/b]"))

        assert builder.tags_validated == 3


class TestValidateElements:
    """Tests for validating prebuilt trees."""

    def test_counts_tags(self, schema):
        """Test the number of validated tags."""
        elements = [
            Content("a"),
            Tag("i", [], [Tag("b", [], [Content("x")])]),
            Tag("b"),
        ]

        assert SchemaValidator(schema).validate_elements(elements) == 3

    def test_post_order(self, schema):
        """Test that children are validated before their parent."""
        elements = [Tag("outer", [], [Tag("inner")])]

        with pytest.raises(TagNotAllowedError) as exc_info:
            SchemaValidator(schema).validate_elements(elements)

        assert exc_info.value.tag == "inner"

    def test_reporter_records_diagnostic(self, schema):
        """Test that violations are routed through the reporter."""
        reporter = ErrorReporter("schema_check", correlation_id="r1")

        with pytest.raises(TagNotAllowedError):
            SchemaValidator(schema).validate_tag(Tag("u"), reporter=reporter)

        assert reporter.has_failed
        assert reporter.diagnostic.kind == "tag_not_allowed"
        assert reporter.diagnostic.details == {"tag": "u"}
        assert reporter.diagnostic.correlation_id == "r1"

    def test_violations_raise_without_reporter(self, schema):
        """Test that each violation stops validation when no reporter is given."""
        validator = SchemaValidator(schema)

        with pytest.raises(TagNotAllowedError):
            validator.validate_tag(Tag("u"))

        with pytest.raises(ExtraAttributeNotAllowedError):
            validator.validate_tag(
                Tag("b", [Attribute("weight", IntValue(700))])
            )

        validator.validate_tag(Tag("b"))
