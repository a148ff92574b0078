"""Configuration classes for SBBCode parsing.

This module provides configuration objects for the tokenizer, the tree
builder and the schema validator, plus a frozen ``ParserConfig`` that
composes them and can be serialized to and from JSON.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

DEFAULT_TAB_SIZE = 8
DEFAULT_MAX_NESTING_DEPTH = 256
STRICT_MAX_NESTING_DEPTH = 64

# Each nesting level costs two Python frames (element + tag), so the depth
# limit must stay well below the interpreter recursion limit.
MAX_SUPPORTED_NESTING_DEPTH = 300

_COMPONENT_FIELDS = ("tokenization", "tree", "validation")


@dataclass(frozen=True)
class TokenizationConfig:
    """Configuration for the tokenizer."""

    tab_size: int = DEFAULT_TAB_SIZE

    def __post_init__(self) -> None:
        """Validate tokenization configuration."""
        if self.tab_size <= 0:
            raise ValueError("tab_size must be > 0")


@dataclass(frozen=True)
class TreeConfig:
    """Configuration for tree building."""

    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_nesting_depth <= 0:
            raise ValueError("max_nesting_depth must be > 0")
        if self.max_nesting_depth > MAX_SUPPORTED_NESTING_DEPTH:
            raise ValueError(
                f"max_nesting_depth must be <= {MAX_SUPPORTED_NESTING_DEPTH}"
            )


@dataclass(frozen=True)
class ValidationConfig:
    """Configuration for schema validation."""

    # Required attributes are declared in schemas but only checked on request
    enforce_required_attributes: bool = False


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for all parser components.

    Immutable down to its component configs, so a single instance can be
    shared by parsers running on different threads.
    """

    tokenization: TokenizationConfig = field(default_factory=TokenizationConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        expected_types = {
            "tokenization": TokenizationConfig,
            "tree": TreeConfig,
            "validation": ValidationConfig,
        }
        for component, expected in expected_types.items():
            if not isinstance(getattr(self, component), expected):
                raise ConfigValidationError(
                    f"{component} must be a {expected.__name__}",
                    field_name=component,
                )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use the
                ``component__field`` notation

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> strict = config.override(
            ...     tree__max_nesting_depth=32,
            ...     validation__enforce_required_attributes=True
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENT_FIELDS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except TypeError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently ignored.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            unknown = set(data_dict) - set(target_class.__dataclass_fields__)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown {target_class.__name__} fields: {sorted(unknown)}"
                )

            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                if hasattr(field_info.type, "__dataclass_fields__"):
                    value = _dict_to_dataclass(value, field_info.type)
                field_values[field_name] = value

            try:
                return target_class(**field_values)
            except ValueError as e:
                raise ConfigValidationError(str(e)) from e

        return _dict_to_dataclass(data, cls)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Create a configuration that enforces required attributes and shallow nesting."""
        return cls(
            tree=TreeConfig(max_nesting_depth=STRICT_MAX_NESTING_DEPTH),
            validation=ValidationConfig(enforce_required_attributes=True),
            name="strict",
            description=(
                "Rejects tags missing required attributes and limits nesting depth"
            ),
        )
