"""Traversal strategies for the tree builder.

The builder runs one parse loop for every operation; a strategy decides how
names are stored and, for path-scoped operations, which elements are
descended into, skipped unparsed, or treated as the target.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Tuple

from ..shared.errors import NonUniqueKeysError

INDEX_PATTERN = re.compile(r"[0-9]+")

KEY_SAMPLES = ("a", "b")


class Navigation(Enum):
    """What the builder does with an element or attribute on the path."""
    SKIP = auto()       # Discard it without building a value
    DESCEND = auto()    # Build it normally, continuing with the returned cursor
    TERMINATE = auto()  # It is the target; ask the strategy for a LeafAction


@dataclass(frozen=True)
class LeafAction:
    """How the builder handles the target of a path.

    Use :meth:`store` to build the target normally (optionally into a
    separate result object and then stop the whole parse) or :meth:`replace`
    to skip the target and store ``value`` in its place.
    """

    into: Optional[Dict[str, Any]] = None
    stop: bool = False
    replaces: bool = False
    value: Any = None

    @classmethod
    def store(cls, into: Optional[Dict[str, Any]] = None, stop: bool = False) -> "LeafAction":
        return cls(into=into, stop=stop)

    @classmethod
    def replace(cls, value: Any) -> "LeafAction":
        return cls(replaces=True, value=value)


@dataclass(frozen=True)
class PathSegment:
    """One tag or attribute name with the 0-based occurrence to select."""

    name: str
    index: Optional[int] = None

    @property
    def occurrence(self) -> int:
        return self.index or 0


def _decode_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def parse_path(path: str) -> Tuple[PathSegment, ...]:
    """Parse a slash-delimited element path.

    The leading ``/`` is optional and ``~1``/``~0`` decode to ``/``/``~``.
    A numeric segment selects the 0-based occurrence of the name before it.

    Example:
        >>> parse_path("/book/1")
        (PathSegment(name='book', index=1),)

    Raises:
        ValueError: If the path is empty, starts with an index, contains an
            empty segment, or has two consecutive indexes
    """
    body = path[1:] if path.startswith("/") else path
    if not body:
        raise ValueError("Path must name at least one element")

    segments = []
    for raw in body.split("/"):
        if not raw:
            raise ValueError(f"Empty segment in path {path!r}")
        if INDEX_PATTERN.fullmatch(raw):
            if not segments:
                raise ValueError(f"Path {path!r} cannot start with an index")
            if segments[-1].index is not None:
                raise ValueError(f"Path {path!r} has consecutive indexes")
            segments[-1] = PathSegment(segments[-1].name, int(raw))
        else:
            segments.append(PathSegment(_decode_segment(raw)))
    return tuple(segments)


class TraversalStrategy:
    """Default traversal: keep names and build the whole document.

    A cursor of ``None`` means the builder is not tracking a path below the
    current element, so :meth:`on_path_step` is not consulted there.
    """

    def initial_cursor(self) -> Optional[int]:
        return None

    def rename(self, name: str) -> str:
        return name

    def on_path_step(
        self,
        name: str,
        cursor: int,
        occurrence: int,
        is_attribute: bool
    ) -> Tuple[Navigation, Optional[int]]:
        return Navigation.DESCEND, None

    def on_leaf(self, name: str) -> LeafAction:
        return LeafAction.store()

    def result(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return document


class PlainStrategy(TraversalStrategy):
    """Plain conversion of the whole document."""


class KeyTransformStrategy(TraversalStrategy):
    """Rename every tag and attribute name with ``key_transformer``.

    The transformer is tried on two distinct names before any parsing;
    if they collide it cannot produce unique keys and is rejected.
    """

    def __init__(self, key_transformer: Callable[[str], str]) -> None:
        samples = tuple(key_transformer(sample) for sample in KEY_SAMPLES)
        if samples[0] == samples[1]:
            raise NonUniqueKeysError(samples=samples)
        self.key_transformer = key_transformer

    def rename(self, name: str) -> str:
        return self.key_transformer(name)


class _PathStrategy(TraversalStrategy):

    def __init__(self, path: str) -> None:
        self.path = path
        self.segments = parse_path(path)

    def initial_cursor(self) -> Optional[int]:
        return 0

    def _locate(
        self,
        name: str,
        cursor: int,
        occurrence: int,
        is_attribute: bool
    ) -> Tuple[bool, bool]:
        """Return (matches, is_last) for a name at ``cursor``."""
        segment = self.segments[cursor]
        is_last = cursor == len(self.segments) - 1
        if is_attribute:
            return is_last and segment.index is None and name == segment.name, is_last
        return name == segment.name and occurrence == segment.occurrence, is_last


class PathExtractStrategy(_PathStrategy):
    """Build only the first node at ``path``, skipping everything else.

    The located node is stored as ``{name: value}`` in :attr:`extracted`;
    the document built around it is discarded.
    """

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.extracted: Dict[str, Any] = {}

    def on_path_step(self, name, cursor, occurrence, is_attribute):
        matches, is_last = self._locate(name, cursor, occurrence, is_attribute)
        if not matches:
            return Navigation.SKIP, None
        if is_last or is_attribute:
            return Navigation.TERMINATE, None
        return Navigation.DESCEND, cursor + 1

    def on_leaf(self, name: str) -> LeafAction:
        return LeafAction.store(into=self.extracted, stop=True)

    def result(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return self.extracted


class PathReplaceStrategy(_PathStrategy):
    """Build the whole document, substituting the first node at ``path``."""

    def __init__(self, path: str, replacement: Any) -> None:
        super().__init__(path)
        self.replacement = replacement
        self.replaced = False

    def on_path_step(self, name, cursor, occurrence, is_attribute):
        if self.replaced:
            return Navigation.DESCEND, None
        matches, is_last = self._locate(name, cursor, occurrence, is_attribute)
        if not matches:
            return Navigation.DESCEND, None
        if is_last or is_attribute:
            return Navigation.TERMINATE, None
        return Navigation.DESCEND, cursor + 1

    def on_leaf(self, name: str) -> LeafAction:
        self.replaced = True
        return LeafAction.replace(self.replacement)
