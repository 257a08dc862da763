"""Tree building layer.

This module provides value coercion, the recursive-descent tree builder with
its traversal strategies, and serialization of trees back to XML.

Key Components:
    TreeBuilder: Builds JSON-like trees from a tokenizer
    TraversalStrategy: Hooks selecting plain, renaming or path-scoped parsing
    to_xml: Serializes a tree value to XML text
    to_json_string: Renders a tree value as compact JSON text
"""

from .builder import TreeBuilder
from .serializer import scalar_text, to_xml
from .strategies import (
    KeyTransformStrategy,
    LeafAction,
    Navigation,
    PathExtractStrategy,
    PathReplaceStrategy,
    PathSegment,
    PlainStrategy,
    TraversalStrategy,
    parse_path,
)
from .values import (
    NumberKind,
    accumulate,
    number_kind,
    string_to_number,
    string_to_value,
    to_json_string,
)

__all__ = [
    "KeyTransformStrategy",
    "LeafAction",
    "Navigation",
    "NumberKind",
    "PathExtractStrategy",
    "PathReplaceStrategy",
    "PathSegment",
    "PlainStrategy",
    "TraversalStrategy",
    "TreeBuilder",
    "accumulate",
    "number_kind",
    "parse_path",
    "scalar_text",
    "string_to_number",
    "string_to_value",
    "to_json_string",
    "to_xml",
]
