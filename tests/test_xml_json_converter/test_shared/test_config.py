"""Tests for the parser configuration."""

import json

import pytest

from xml_json_converter.shared.config import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_MAX_NESTING_DEPTH,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)


class TestParserConfigDefaults:
    """Test suite for default ParserConfig values."""

    def test_default_configuration(self):
        """Test default configuration values."""
        config = ParserConfig()

        assert config.keep_strings is False
        assert config.cdata_tag_name == "content"
        assert config.convert_nil_attribute_to_null is False
        assert config.nil_attribute_name == "xsi:nil"
        assert config.type_attribute_name == "xsi:type"
        assert dict(config.xsi_type_converters) == {}
        assert config.array_tag_name == "array"
        assert config.buffer_size == DEFAULT_BUFFER_SIZE
        assert config.max_nesting_depth == DEFAULT_MAX_NESTING_DEPTH

    def test_presets(self):
        """Test preset factory methods."""
        assert ParserConfig.original() == ParserConfig()
        assert ParserConfig.string_preserving().keep_strings is True

    def test_config_is_frozen(self):
        """Test that configuration cannot be mutated."""
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.keep_strings = True

    def test_converters_are_read_only(self):
        """Test that the converter mapping cannot be mutated after construction."""
        converters = {"integer": int}
        config = ParserConfig(xsi_type_converters=converters)

        with pytest.raises(TypeError):
            config.xsi_type_converters["string"] = str

        converters["string"] = str
        assert "string" not in config.xsi_type_converters
        assert config.converter_for("integer") is int
        assert config.converter_for("missing") is None


class TestParserConfigValidation:
    """Test suite for ParserConfig validation."""

    @pytest.mark.parametrize("field_name", [
        "cdata_tag_name",
        "array_tag_name",
        "nil_attribute_name",
        "type_attribute_name",
    ])
    def test_empty_names_rejected(self, field_name):
        """Test that name fields cannot be empty."""
        with pytest.raises(ConfigValidationError, match=f"{field_name} cannot be empty") as info:
            ParserConfig(**{field_name: ""})
        assert info.value.field_name == field_name

    def test_buffer_size_must_be_positive(self):
        """Test buffer size validation."""
        with pytest.raises(ConfigValidationError, match="buffer_size must be > 0"):
            ParserConfig(buffer_size=0)

    def test_max_nesting_depth_must_be_positive(self):
        """Test nesting depth validation."""
        with pytest.raises(ConfigValidationError, match="max_nesting_depth must be > 0"):
            ParserConfig(max_nesting_depth=-1)

    def test_converters_must_be_callable(self):
        """Test converter validation."""
        with pytest.raises(ConfigValidationError, match="is not callable"):
            ParserConfig(xsi_type_converters={"integer": "int"})

    def test_validation_error_is_config_error(self):
        """Test the exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)


class TestParserConfigOverride:
    """Test suite for configuration overrides and serialization."""

    def test_override_creates_new_config(self):
        """Test that override leaves the original untouched."""
        config = ParserConfig()
        changed = config.override(keep_strings=True, cdata_tag_name="text")

        assert changed.keep_strings is True
        assert changed.cdata_tag_name == "text"
        assert config.keep_strings is False
        assert config.cdata_tag_name == "content"

    def test_override_validates(self):
        """Test that overrides go through validation."""
        with pytest.raises(ConfigValidationError, match="buffer_size must be > 0"):
            ParserConfig().override(buffer_size=0)

    def test_override_unknown_field(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration field"):
            ParserConfig().override(keep_string=True)

    def test_to_dict_and_json(self):
        """Test dictionary and JSON export."""
        config = ParserConfig(xsi_type_converters={"integer": int})
        data = config.to_dict()

        assert data["keep_strings"] is False
        assert data["xsi_type_converters"] == {"integer": "int"}
        assert json.loads(config.to_json())["cdata_tag_name"] == "content"
