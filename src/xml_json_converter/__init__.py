"""XML/JSON Converter.

A single-pass converter between XML documents and JSON-like trees built from
plain Python values, with lazy streaming over top-level elements, key
renaming, and path-scoped extraction and replacement that skips the parts of
a document it does not need.

Progressive API Disclosure:
- Level 1: Simple functions - to_json(), extract(), replace(), to_xml()
- Level 2: Configured converter - XMLToJSONConverter class
- Level 3: Streaming - to_json_stream() and XMLToJSONStream
- Level 4: Asynchronous submission - submit_parse()
"""

__version__ = "0.1.0"
__author__ = "XML JSON Converter Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured converter
from .api import (
    DataFrameAdapter,
    XMLToJSONConverter,
    XMLToJSONStream,
    extract,
    replace,
    submit_parse,
    to_json,
    to_json_stream,
    to_json_with_key_transform,
    to_xml,
)

# Configuration classes for advanced usage
from .shared.config import ConfigError, ConfigValidationError, ParserConfig

# Errors and statistics shared by all API levels
from .shared.errors import (
    AdapterUnavailableError,
    ConversionError,
    NonUniqueKeysError,
    StreamConsumedError,
    XMLSyntaxError,
)
from .shared.result import ParseStatistics
from .tokenization.entities import escape, unescape
from .tree.values import NumberKind, number_kind, to_json_string

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "extract",
    "replace",
    "to_json",
    "to_json_stream",
    "to_json_with_key_transform",
    "to_xml",

    # Level 2-4: Converter, stream and asynchronous submission
    "DataFrameAdapter",
    "XMLToJSONConverter",
    "XMLToJSONStream",
    "submit_parse",

    # Values and text helpers
    "NumberKind",
    "escape",
    "number_kind",
    "to_json_string",
    "unescape",

    # Configuration classes for advanced usage
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",

    # Errors and statistics
    "AdapterUnavailableError",
    "ConversionError",
    "NonUniqueKeysError",
    "ParseStatistics",
    "StreamConsumedError",
    "XMLSyntaxError",
]
