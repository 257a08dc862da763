"""Lazy streaming over the top-level elements of a document.

A stream yields one parsed object per top-level element and reads only as
much input as the items pulled so far require. Streams are single-pass:
every combinator hands the remaining items to a new stream and retires the
old one, and every terminal operation drains and closes the stream.
"""

import itertools
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    TextIO,
)

from ..character.stream import CharacterSource, InputType
from ..shared.config import ParserConfig
from ..shared.errors import StreamConsumedError
from ..shared.logging import get_logger
from ..shared.result import ParseStatistics
from ..tokenization.tokenizer import XMLTokenizer
from ..tree.builder import TreeBuilder
from ..tree.values import accumulate, to_json_string

if TYPE_CHECKING:
    import pandas as pd


def canonical_key(item: Any) -> str:
    """Order-independent text form of an item, used for equality and sorting.

    This is the compact JSON text of the item with object members sorted by
    key, so numbers inside it compare as text: ``{"a": 10}`` sorts before
    ``{"a": 9}``.
    """
    return to_json_string(_sorted_members(item))


def _sorted_members(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _sorted_members(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_sorted_members(item) for item in value]
    return value


def _parse_top_level(
    source: InputType,
    config: ParserConfig,
    statistics: ParseStatistics,
    correlation_id: Optional[str]
) -> Iterator[Dict[str, Any]]:
    logger = get_logger(__name__, correlation_id, "stream")
    with CharacterSource.open(source, config.buffer_size) as characters:
        tokenizer = XMLTokenizer(characters)
        builder = TreeBuilder(tokenizer, config, statistics=statistics, correlation_id=correlation_id)
        items = 0
        while True:
            item = builder.build_next()
            statistics.characters_processed = characters.characters_read
            statistics.tokens_generated = tokenizer.tokens_generated
            if item is None:
                break
            items += 1
            yield item
        logger.debug("Stream exhausted", extra={"items": items, **statistics.to_dict()})


class XMLToJSONStream:
    """Single-pass stream of parsed top-level elements.

    Examples:
        >>> stream = XMLToJSONStream.from_source("<a>1</a><b>2</b><a>3</a>")
        >>> stream.filter(lambda item: "a" in item).to_list()
        [{'a': 1}, {'a': 3}]

        Folding the items reproduces a whole-document parse:
        >>> XMLToJSONStream.from_source("<a>1</a><b>2</b><a>3</a>").collect()
        {'a': [1, 3], 'b': 2}
    """

    def __init__(
        self,
        items: Iterable[Any],
        close_hook: Optional[Callable[[], None]] = None,
        statistics: Optional[ParseStatistics] = None
    ) -> None:
        """Initialize stream.

        Args:
            items: Items to stream
            close_hook: Called on :meth:`close` to release the underlying source
            statistics: Parse counters shared by all streams derived from this one
        """
        self._items = iter(items)
        self._close_hook = close_hook
        self._retired = False
        self.statistics = statistics or ParseStatistics()

    @classmethod
    def from_source(
        cls,
        source: InputType,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> "XMLToJSONStream":
        """Open a stream over the top-level elements of ``source``.

        Nothing is read until the first item is pulled. Markup that produces
        no value, such as the XML declaration or comments, yields no item.
        """
        statistics = ParseStatistics()
        items = _parse_top_level(
            source, config or ParserConfig.original(), statistics, correlation_id
        )
        return cls(items, items.close, statistics)

    def _take(self) -> Iterator[Any]:
        if self._retired:
            raise StreamConsumedError(
                "Stream has already been operated upon or closed"
            )
        self._retired = True
        return self._items

    def _derive(self, items: Iterable[Any]) -> "XMLToJSONStream":
        return XMLToJSONStream(items, self._close_hook, self.statistics)

    # Intermediate operations

    def filter(self, predicate: Callable[[Any], bool]) -> "XMLToJSONStream":
        """Keep only items for which ``predicate`` is true."""
        return self._derive(item for item in self._take() if predicate(item))

    def map(self, function: Callable[[Any], Any]) -> "XMLToJSONStream":
        """Transform every item with ``function``."""
        return self._derive(map(function, self._take()))

    def flat_map(self, function: Callable[[Any], Iterable[Any]]) -> "XMLToJSONStream":
        """Replace every item with the items of the iterable ``function`` returns."""
        return self._derive(itertools.chain.from_iterable(map(function, self._take())))

    def limit(self, max_size: int) -> "XMLToJSONStream":
        """Truncate the stream to at most ``max_size`` items."""
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        return self._derive(itertools.islice(self._take(), max_size))

    def skip(self, count: int) -> "XMLToJSONStream":
        """Discard the first ``count`` items."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        return self._derive(itertools.islice(self._take(), count, None))

    def distinct(self) -> "XMLToJSONStream":
        """Drop items equal to one already seen, keeping the first."""
        return self._derive(_distinct(self._take()))

    def sorted(
        self,
        key: Optional[Callable[[Any], Any]] = None,
        reverse: bool = False
    ) -> "XMLToJSONStream":
        """Sort the items; this reads all remaining input on first pull.

        Without a key, items are ordered by their canonical JSON text (see
        :func:`canonical_key`), which compares numbers as text; pass ``key``
        for numeric order.
        """
        return self._derive(_sorted(self._take(), key or canonical_key, reverse))

    def peek(self, action: Callable[[Any], None]) -> "XMLToJSONStream":
        """Call ``action`` on every item as it passes through."""
        return self._derive(_peek(self._take(), action))

    # Terminal operations

    def __iter__(self) -> Iterator[Any]:
        return self._drain(self._take())

    def _drain(self, items: Iterator[Any]) -> Iterator[Any]:
        try:
            yield from items
        finally:
            self.close()

    def for_each(self, action: Callable[[Any], None]) -> None:
        """Call ``action`` on every item."""
        for item in self:
            action(item)

    def all_match(self, predicate: Callable[[Any], bool]) -> bool:
        """Check that every item satisfies ``predicate``; true for no items."""
        with self:
            return all(predicate(item) for item in self)

    def any_match(self, predicate: Callable[[Any], bool]) -> bool:
        """Check that some item satisfies ``predicate``."""
        with self:
            return any(predicate(item) for item in self)

    def none_match(self, predicate: Callable[[Any], bool]) -> bool:
        """Check that no item satisfies ``predicate``."""
        return not self.any_match(predicate)

    def count(self) -> int:
        """Count the remaining items."""
        return sum(1 for _ in self)

    def to_list(self) -> List[Any]:
        """Collect the remaining items into a list."""
        return list(self)

    def collect(self) -> Dict[str, Any]:
        """Fold the items into one object in encounter order.

        Keys are merged with the same rule the parser uses for sibling
        elements, so folding a document's items gives the same result as
        converting the whole document.

        Raises:
            TypeError: If an item is not an object
        """
        result: Dict[str, Any] = {}
        for item in self:
            if not isinstance(item, dict):
                raise TypeError(f"Cannot collect {type(item).__name__} items into an object")
            for key, value in item.items():
                accumulate(result, key, value)
        return result

    def write(self, fp: TextIO) -> None:
        """Write the folded items to ``fp`` as JSON text."""
        fp.write(to_json_string(self.collect()))

    def to_dataframe(self) -> "pd.DataFrame":
        """Collect the items into a pandas DataFrame, one row per item.

        Raises:
            AdapterUnavailableError: If pandas is not installed
        """
        from .adapters import DataFrameAdapter
        return DataFrameAdapter().to_dataframe(self.to_list())

    # Resource management

    def close(self) -> None:
        """Release the underlying source; pending items are discarded."""
        if self._close_hook is not None:
            self._close_hook()

    def __enter__(self) -> "XMLToJSONStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _distinct(items: Iterator[Any]) -> Iterator[Any]:
    seen = set()
    for item in items:
        key = canonical_key(item)
        if key not in seen:
            seen.add(key)
            yield item


def _sorted(items: Iterator[Any], key: Callable[[Any], Any], reverse: bool) -> Iterator[Any]:
    yield from sorted(items, key=key, reverse=reverse)


def _peek(items: Iterator[Any], action: Callable[[Any], None]) -> Iterator[Any]:
    for item in items:
        action(item)
        yield item
