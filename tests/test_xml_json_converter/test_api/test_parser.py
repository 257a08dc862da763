"""Tests for the conversion API."""

import io
import logging

import pytest

from xml_json_converter.api.parser import (
    XMLToJSONConverter,
    extract,
    replace,
    to_json,
    to_json_stream,
    to_json_with_key_transform,
    to_xml,
)
from xml_json_converter.shared.config import ParserConfig
from xml_json_converter.shared.errors import NonUniqueKeysError, XMLSyntaxError


class TestLevelOneFunctions:
    """Test suite for the module-level functions."""

    def test_to_json(self):
        """Test a simple document."""
        assert to_json("<foo><bar>1234</bar><baar>2</baar></foo>") == {
            "foo": {"bar": 1234, "baar": 2}
        }

    def test_to_json_array(self):
        """Test repeated elements."""
        assert to_json("<a><b>1</b><b>2</b><b>3</b></a>") == {"a": {"b": [1, 2, 3]}}

    def test_to_json_with_config(self):
        """Test passing a configuration."""
        assert to_json("<a>00</a>") == {"a": "00"}
        assert to_json("<a>12</a>", ParserConfig.string_preserving()) == {"a": "12"}

    def test_to_json_bytes_and_files(self, tmp_path):
        """Test the supported input types."""
        path = tmp_path / "doc.xml"
        path.write_text("<a>1</a>", encoding="utf-8")

        assert to_json(b"<a>1</a>") == {"a": 1}
        assert to_json(io.StringIO("<a>1</a>")) == {"a": 1}
        assert to_json(io.BytesIO(b"<a>1</a>")) == {"a": 1}
        assert to_json(path) == {"a": 1}

    def test_to_json_malformed(self):
        """Test that malformed input raises a positioned error."""
        with pytest.raises(XMLSyntaxError, match="Misshaped element at 24"):
            to_json("<this is not a valid XML")

    def test_key_transform(self):
        """Test renaming keys."""
        assert to_json_with_key_transform('<a b="1"/>', lambda k: "x_" + k) == {
            "x_a": {"x_b": 1}
        }

    def test_key_transform_collision(self):
        """Test a transformer that cannot produce unique keys."""
        with pytest.raises(NonUniqueKeysError):
            to_json_with_key_transform("<a/>", lambda k: "x")

    def test_extract_and_replace(self):
        """Test path operations."""
        assert extract("<a><b>1</b><b>2</b></a>", "/a/b/1") == {"b": 2}
        assert replace("<a><b>1</b><c>2</c></a>", "/a/b", {"new": True}) == {
            "a": {"b": {"new": True}, "c": 2}
        }

    def test_extract_invalid_path(self):
        """Test that an invalid path is rejected."""
        with pytest.raises(ValueError):
            extract("<a/>", "//")

    def test_stream_and_to_xml(self):
        """Test streaming and serialization."""
        assert to_json_stream("<a>1</a><b>2</b>").to_list() == [{"a": 1}, {"b": 2}]
        assert to_xml({"a": {"b": 1}}) == "<a><b>1</b></a>"


class TestXMLToJSONConverter:
    """Test suite for the reusable converter."""

    def test_defaults(self):
        """Test default construction."""
        converter = XMLToJSONConverter()

        assert converter.config == ParserConfig.original()
        assert converter.last_statistics is None

    def test_last_statistics(self):
        """Test that counters are recorded per operation."""
        converter = XMLToJSONConverter()
        text = "<a><b>1</b></a>"

        converter.to_json(text)

        stats = converter.last_statistics
        assert stats.characters_processed == len(text)
        assert stats.elements_parsed == 2
        assert stats.tokens_generated > 0
        assert stats.processing_time_ms >= 0

    def test_extract_skips_subtrees(self):
        """Test that extraction reports skipped subtrees."""
        converter = XMLToJSONConverter()
        text = "<r>" + "<big><x>1</x><y>2</y></big>" * 10 + "<want>ok</want></r>"

        assert converter.extract(text, "/r/want") == {"want": "ok"}
        assert converter.last_statistics.subtrees_skipped == 10
        assert converter.last_statistics.elements_parsed == 2

    def test_extract_malformed_returns_empty(self, caplog):
        """Test that extraction on malformed input gives an empty object."""
        converter = XMLToJSONConverter()

        with caplog.at_level(logging.INFO, logger="xml_json_converter"):
            assert converter.extract("<a><b>1</c></a>", "/a/b") == {}

        assert any("Extraction abandoned" in r.getMessage() for r in caplog.records)
        assert converter.statistics["failed_operations"] == 1

    def test_replace_missing_path(self):
        """Test that an unresolved path leaves the document unchanged."""
        assert XMLToJSONConverter().replace("<a>1</a>", "/b", 2) == {"a": 1}

    def test_failure_logged(self, caplog):
        """Test that syntax errors are logged before being raised."""
        converter = XMLToJSONConverter(correlation_id="req-9")

        with caplog.at_level(logging.WARNING, logger="xml_json_converter"):
            with pytest.raises(XMLSyntaxError):
                converter.to_json("<a>")

        record = caplog.records[-1]
        assert record.getMessage() == "to_json failed: Unclosed tag a"
        assert record.correlation_id == "req-9"

    def test_usage_statistics(self):
        """Test aggregate statistics and reset."""
        converter = XMLToJSONConverter(correlation_id="abc")
        converter.to_json("<a/>")
        converter.to_json("<b/>")

        stats = converter.statistics
        assert stats["total_operations"] == 2
        assert stats["failed_operations"] == 0
        assert stats["correlation_id"] == "abc"
        assert stats["average_processing_time_ms"] >= 0

        converter.reset_statistics()
        assert converter.statistics["total_operations"] == 0
        assert converter.last_statistics is None

    def test_converter_stream_uses_config(self):
        """Test that streams inherit the converter configuration."""
        converter = XMLToJSONConverter(ParserConfig.string_preserving())

        assert converter.to_json_stream("<a>1</a>").to_list() == [{"a": "1"}]

    def test_converter_to_xml_uses_config(self):
        """Test that serialization uses the converter configuration."""
        converter = XMLToJSONConverter(ParserConfig(array_tag_name="item"))

        assert converter.to_xml([1]) == "<item>1</item>"

    def test_path_file_closed_after_error(self, tmp_path):
        """Test that owned files are released on failure."""
        path = tmp_path / "bad.xml"
        path.write_text("<a>", encoding="utf-8")

        with pytest.raises(XMLSyntaxError):
            to_json(path)
        # Re-opening for writing succeeds on every platform once the handle is released
        path.write_text("<a/>", encoding="utf-8")
        assert to_json(path) == {"a": ""}
