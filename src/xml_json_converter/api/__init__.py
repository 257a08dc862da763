"""Public API for XML/JSON conversion.

Level 1: module functions such as :func:`to_json` and :func:`extract`.
Level 2: :class:`XMLToJSONConverter` for reuse with fixed configuration.
"""

from .adapters import DataFrameAdapter
from .asynchronous import submit_parse
from .parser import (
    XMLToJSONConverter,
    extract,
    replace,
    to_json,
    to_json_stream,
    to_json_with_key_transform,
    to_xml,
)
from .stream import XMLToJSONStream

__all__ = [
    "DataFrameAdapter",
    "XMLToJSONConverter",
    "XMLToJSONStream",
    "extract",
    "replace",
    "submit_parse",
    "to_json",
    "to_json_stream",
    "to_json_with_key_transform",
    "to_xml",
]
