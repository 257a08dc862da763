"""Conversion API with progressive disclosure.

This module provides the main conversion API, from simple module-level
functions to a reusable converter class holding configuration, correlation ID
and statistics.
"""

import time
from typing import Any, Callable, Dict, Optional

from ..character.stream import CharacterSource, InputType
from ..shared.config import ParserConfig
from ..shared.errors import XMLSyntaxError
from ..shared.logging import get_logger
from ..shared.result import ParseStatistics
from ..tokenization.tokenizer import XMLTokenizer
from ..tree.builder import TreeBuilder
from ..tree.serializer import to_xml as serialize_xml
from ..tree.strategies import (
    KeyTransformStrategy,
    PathExtractStrategy,
    PathReplaceStrategy,
    PlainStrategy,
    TraversalStrategy,
)
from .stream import XMLToJSONStream

MS_PER_SECOND = 1000


class XMLToJSONConverter:
    """Reusable converter with configuration and statistics.

    Attributes:
        config: Parser configuration used for every operation
        correlation_id: Correlation ID attached to log records
        last_statistics: Counters from the most recent operation

    Examples:
        Basic usage with default configuration:
        >>> converter = XMLToJSONConverter()
        >>> converter.to_json("<foo><bar>1234</bar><baar>2</baar></foo>")
        {'foo': {'bar': 1234, 'baar': 2}}

        Keeping values as strings:
        >>> converter = XMLToJSONConverter(ParserConfig.string_preserving())
        >>> converter.to_json("<a>007</a>")
        {'a': '007'}
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize converter.

        Args:
            config: Parser configuration (defaults to ``ParserConfig.original()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig.original()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "converter")
        self.last_statistics: Optional[ParseStatistics] = None

        self._operation_count = 0
        self._failed_operations = 0
        self._total_processing_time = 0.0

    def to_json(self, source: InputType) -> Dict[str, Any]:
        """Convert a whole XML document to a tree.

        Raises:
            XMLSyntaxError: If the document is malformed
        """
        return self._run(source, PlainStrategy(), "to_json")

    def to_json_with_key_transform(
        self,
        source: InputType,
        key_transformer: Callable[[str], str]
    ) -> Dict[str, Any]:
        """Convert a document, renaming every tag and attribute name.

        Raises:
            NonUniqueKeysError: If ``key_transformer`` maps distinct names to
                the same key; raised before any input is read
            XMLSyntaxError: If the document is malformed
        """
        strategy = KeyTransformStrategy(key_transformer)
        return self._run(source, strategy, "to_json_with_key_transform")

    def extract(self, source: InputType, path: str) -> Dict[str, Any]:
        """Build only the first node at ``path``.

        Siblings that are not on the path are skipped without being built.

        Returns:
            ``{name: value}`` for the located element or attribute, or ``{}``
            if the path cannot be resolved or the document is malformed

        Raises:
            ValueError: If ``path`` is not a valid path
        """
        strategy = PathExtractStrategy(path)
        try:
            return self._run(source, strategy, "extract")
        except XMLSyntaxError as e:
            self.logger.info(
                "Extraction abandoned on malformed input",
                extra={"path": path, "error": str(e)}
            )
            return {}

    def replace(self, source: InputType, path: str, replacement: Any) -> Dict[str, Any]:
        """Convert a document with the first node at ``path`` replaced.

        The located element is skipped without being built and
        ``replacement`` is merged under its name. A path that cannot be
        resolved leaves the document unchanged.

        Raises:
            ValueError: If ``path`` is not a valid path
            XMLSyntaxError: If the document is malformed
        """
        strategy = PathReplaceStrategy(path, replacement)
        result = self._run(source, strategy, "replace")
        if not strategy.replaced:
            self.logger.debug("Replacement path not found", extra={"path": path})
        return result

    def to_json_stream(self, source: InputType) -> XMLToJSONStream:
        """Open a lazy stream yielding one object per top-level element."""
        return XMLToJSONStream.from_source(source, self.config, self.correlation_id)

    def to_xml(self, value: Any, tag_name: Optional[str] = None) -> str:
        """Serialize a tree value to XML text."""
        return serialize_xml(value, tag_name, self.config)

    def _run(
        self,
        source: InputType,
        strategy: TraversalStrategy,
        operation: str
    ) -> Dict[str, Any]:
        statistics = ParseStatistics()
        self.last_statistics = statistics
        self._operation_count += 1
        start_time = time.perf_counter()

        with self.logger.timed(operation, extra={"input_type": type(source).__name__}) as details:
            with CharacterSource.open(source, self.config.buffer_size) as characters:
                tokenizer = XMLTokenizer(characters)
                builder = TreeBuilder(
                    tokenizer, self.config, strategy, statistics, self.correlation_id
                )
                try:
                    return builder.build()
                except XMLSyntaxError as e:
                    self._failed_operations += 1
                    self.logger.warning(
                        f"{operation} failed: {e.message}",
                        extra={"error_position": e.position}
                    )
                    raise
                finally:
                    statistics.characters_processed = characters.characters_read
                    statistics.tokens_generated = tokenizer.tokens_generated
                    statistics.processing_time_ms = (
                        (time.perf_counter() - start_time) * MS_PER_SECOND
                    )
                    self._total_processing_time += statistics.processing_time_ms
                    details.update(statistics.to_dict())

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get converter usage statistics."""
        return {
            "total_operations": self._operation_count,
            "failed_operations": self._failed_operations,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._operation_count
                if self._operation_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset converter usage statistics."""
        self._operation_count = 0
        self._failed_operations = 0
        self._total_processing_time = 0.0
        self.last_statistics = None


def to_json(
    source: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Convert an XML document to a JSON-like tree.

    Args:
        source: XML content as string, bytes, file-like object, or Path
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The document as an object keyed by its top-level element names

    Raises:
        XMLSyntaxError: If the document is malformed

    Examples:
        >>> to_json("<a><b>1</b><b>2</b><b>3</b></a>")
        {'a': {'b': [1, 2, 3]}}

        >>> to_json('<item id="7"><x/></item>')
        {'item': {'id': 7, 'x': ''}}
    """
    return XMLToJSONConverter(config, correlation_id).to_json(source)


def to_json_with_key_transform(
    source: InputType,
    key_transformer: Callable[[str], str],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Convert an XML document, renaming every tag and attribute name.

    Example:
        >>> to_json_with_key_transform("<a><b>1</b></a>", str.upper)
        {'A': {'B': 1}}
    """
    converter = XMLToJSONConverter(config, correlation_id)
    return converter.to_json_with_key_transform(source, key_transformer)


def extract(
    source: InputType,
    path: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Extract the first node at ``path`` from an XML document.

    Example:
        >>> extract("<a><b>1</b><b>2</b></a>", "/a/b/1")
        {'b': 2}
    """
    return XMLToJSONConverter(config, correlation_id).extract(source, path)


def replace(
    source: InputType,
    path: str,
    replacement: Any,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Convert an XML document with the first node at ``path`` replaced.

    Example:
        >>> replace("<a><b>1</b><c>2</c></a>", "/a/b", {"new": True})
        {'a': {'b': {'new': True}, 'c': 2}}
    """
    return XMLToJSONConverter(config, correlation_id).replace(source, path, replacement)


def to_json_stream(
    source: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> XMLToJSONStream:
    """Open a lazy stream over the top-level elements of an XML document."""
    return XMLToJSONConverter(config, correlation_id).to_json_stream(source)


def to_xml(
    value: Any,
    tag_name: Optional[str] = None,
    config: Optional[ParserConfig] = None
) -> str:
    """Serialize a tree value to XML text.

    Example:
        >>> to_xml({"a": {"b": [1, 2]}})
        '<a><b>1</b><b>2</b></a>'
    """
    return serialize_xml(value, tag_name, config)
