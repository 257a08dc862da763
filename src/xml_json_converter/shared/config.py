"""Configuration for XML to JSON conversion.

This module provides the immutable configuration object shared by reference
across a single parse, together with the presets that mirror the behaviors
callers most often ask for.
"""

import json
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

# Default attribute names from the XML Schema instance namespace
NIL_ATTRIBUTE = "xsi:nil"
TYPE_ATTRIBUTE = "xsi:type"

DEFAULT_CDATA_TAG_NAME = "content"
DEFAULT_ARRAY_TAG_NAME = "array"
DEFAULT_BUFFER_SIZE = 8192
DEFAULT_MAX_NESTING_DEPTH = 512

TypeConverter = Callable[[str], Any]


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for parsing and serialization.

    Thread-safe due to frozen dataclass implementation; the converter mapping
    is exposed through a read-only view so a config can be shared between
    concurrent parses.

    Attributes:
        keep_strings: Leave attribute and text values as strings instead of
            coercing them to booleans, nulls and numbers
        cdata_tag_name: Key under which element text content is stored
        convert_nil_attribute_to_null: Honor ``nil_attribute_name="true"``
            by producing ``None`` for the element
        nil_attribute_name: Attribute marking an element as nil
        type_attribute_name: Attribute selecting an ``xsi_type_converters``
            entry for the element's text
        xsi_type_converters: Declared type name to converter function
        array_tag_name: Wrapper tag used when serializing nested arrays
        buffer_size: Number of characters or bytes pulled per source read
        max_nesting_depth: Deepest element nesting accepted before failing
    """

    keep_strings: bool = False
    cdata_tag_name: str = DEFAULT_CDATA_TAG_NAME
    convert_nil_attribute_to_null: bool = False
    nil_attribute_name: str = NIL_ATTRIBUTE
    type_attribute_name: str = TYPE_ATTRIBUTE
    xsi_type_converters: Mapping[str, TypeConverter] = field(default_factory=dict)
    array_tag_name: str = DEFAULT_ARRAY_TAG_NAME
    buffer_size: int = DEFAULT_BUFFER_SIZE
    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH

    def __post_init__(self) -> None:
        """Validate configuration values and freeze the converter mapping."""
        if not self.cdata_tag_name:
            raise ConfigValidationError(
                "cdata_tag_name cannot be empty", field_name="cdata_tag_name"
            )
        if not self.array_tag_name:
            raise ConfigValidationError(
                "array_tag_name cannot be empty", field_name="array_tag_name"
            )
        if not self.nil_attribute_name:
            raise ConfigValidationError(
                "nil_attribute_name cannot be empty", field_name="nil_attribute_name"
            )
        if not self.type_attribute_name:
            raise ConfigValidationError(
                "type_attribute_name cannot be empty", field_name="type_attribute_name"
            )
        if self.buffer_size <= 0:
            raise ConfigValidationError(
                "buffer_size must be > 0", field_name="buffer_size"
            )
        if self.max_nesting_depth <= 0:
            raise ConfigValidationError(
                "max_nesting_depth must be > 0", field_name="max_nesting_depth"
            )

        converters = dict(self.xsi_type_converters or {})
        for type_name, converter in converters.items():
            if not callable(converter):
                raise ConfigValidationError(
                    f"Converter for xsi:type '{type_name}' is not callable",
                    field_name="xsi_type_converters"
                )
        object.__setattr__(self, "xsi_type_converters", MappingProxyType(converters))

    def converter_for(self, type_name: str) -> Optional[TypeConverter]:
        """Look up the converter registered for a declared type name."""
        return self.xsi_type_converters.get(type_name)

    def override(self, **changes: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig.original()
            >>> config.override(keep_strings=True).keep_strings
            True
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0]
            )
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Converter functions are represented by their qualified names.
        """
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if config_field.name == "xsi_type_converters":
                value = {
                    name: getattr(func, "__qualname__", repr(func))
                    for name, func in value.items()
                }
            result[config_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    # Preset factory methods
    @classmethod
    def original(cls) -> "ParserConfig":
        """Create the default configuration: coerce values, ``content`` text key."""
        return cls()

    @classmethod
    def string_preserving(cls) -> "ParserConfig":
        """Create configuration that keeps every value as it appears in the XML."""
        return cls(keep_strings=True)
