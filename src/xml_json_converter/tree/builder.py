"""Recursive-descent tree building.

This module implements the single-pass engine that reads tokens and builds
the JSON-like tree at the same time. One recursion level handles one markup
construct following ``<``: a declaration, a processing instruction, a close
tag, or an element with its attributes and content. Elements collapse on
close: no content becomes ``""``, text-only content becomes the text value,
anything else stays an object. Every value is merged into its parent with
:func:`accumulate`, so repeated siblings become arrays.

Path-scoped operations reuse the same loop through a
:class:`TraversalStrategy`; subtrees the strategy does not need are consumed
by :meth:`TreeBuilder.skip_element` without building any value.
"""

from typing import Any, Dict, Optional

from ..shared.config import ParserConfig
from ..shared.logging import get_logger
from ..shared.result import ParseStatistics
from ..tokenization.tokenizer import TokenType, XMLTokenizer
from .strategies import LeafAction, Navigation, PlainStrategy, TraversalStrategy
from .values import accumulate, string_to_value


class _TraversalComplete(Exception):
    """Raised internally once a strategy has everything it needs."""


class TreeBuilder:
    """Build tree values from a tokenizer.

    Example:
        >>> from xml_json_converter.character import CharacterSource
        >>> tokenizer = XMLTokenizer(CharacterSource.open("<a><b>1</b></a>"))
        >>> TreeBuilder(tokenizer).build()
        {'a': {'b': 1}}
    """

    def __init__(
        self,
        tokenizer: XMLTokenizer,
        config: Optional[ParserConfig] = None,
        strategy: Optional[TraversalStrategy] = None,
        statistics: Optional[ParseStatistics] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            tokenizer: Token source positioned at the start of the document
            config: Parser configuration, defaults to ``ParserConfig.original()``
            strategy: Traversal strategy, defaults to a plain parse
            statistics: Counters to update while building
            correlation_id: Optional correlation ID for request tracking
        """
        self.tokenizer = tokenizer
        self.config = config or ParserConfig.original()
        self.strategy = strategy or PlainStrategy()
        self.statistics = statistics or ParseStatistics()
        self.logger = get_logger(__name__, correlation_id, "tree_builder")
        self._top_level_occurrences: Dict[str, int] = {}

    def build(self) -> Dict[str, Any]:
        """Parse the whole document and return the strategy's result."""
        document: Dict[str, Any] = {}
        cursor = self.strategy.initial_cursor()
        try:
            while self._advance_to_markup():
                self._parse(document, None, cursor, self._top_level_occurrences, 0)
        except _TraversalComplete:
            self.logger.debug("Traversal stopped early", extra=self.statistics.to_dict())
        return self.strategy.result(document)

    def build_next(self) -> Optional[Dict[str, Any]]:
        """Parse the next top-level element.

        Markup that produces no value, such as the XML declaration, comments
        or a DOCTYPE, is passed over.

        Returns:
            A single-key object for the element, or None at end of input
        """
        cursor = self.strategy.initial_cursor()
        while self._advance_to_markup():
            item: Dict[str, Any] = {}
            self._parse(item, None, cursor, self._top_level_occurrences, 0)
            if item:
                return item
        return None

    def _advance_to_markup(self) -> bool:
        if not self.tokenizer.more():
            return False
        self.tokenizer.skip_past("<")
        return self.tokenizer.more()

    def _parse(
        self,
        context: Dict[str, Any],
        parent_name: Optional[str],
        cursor: Optional[int],
        occurrences: Dict[str, int],
        depth: int
    ) -> bool:
        """Parse one construct after ``<`` and merge its value into ``context``.

        Returns:
            True if the construct was the close tag of ``parent_name``
        """
        tokenizer = self.tokenizer
        config = self.config
        strategy = self.strategy

        token = tokenizer.next_token()

        if token.type is TokenType.BANG:
            self._parse_declaration(context)
            return False

        if token.type is TokenType.QUEST:
            tokenizer.skip_past("?>")
            return False

        if token.type is TokenType.SLASH:
            token = tokenizer.next_token()
            closing = strategy.rename(token.value) if token.type is TokenType.NAME else token.value
            if parent_name is None:
                raise tokenizer.syntax_error(f"Mismatched close tag {closing}")
            if closing != parent_name:
                raise tokenizer.syntax_error(f"Mismatched {parent_name} and {closing}")
            if tokenizer.next_token().type is not TokenType.GT:
                raise tokenizer.syntax_error("Misshaped close tag")
            return True

        if token.type is not TokenType.NAME:
            raise tokenizer.syntax_error("Misshaped tag")

        # Open tag
        raw_name = token.value
        tag_name = strategy.rename(raw_name)
        target = context
        child_cursor: Optional[int] = None
        stop_after = False

        if cursor is not None:
            occurrence = occurrences.get(tag_name, 0)
            occurrences[tag_name] = occurrence + 1
            navigation, child_cursor = strategy.on_path_step(tag_name, cursor, occurrence, False)
            if navigation is Navigation.SKIP:
                self.skip_element(raw_name)
                return False
            if navigation is Navigation.TERMINATE:
                action = strategy.on_leaf(tag_name)
                if action.replaces:
                    self.skip_element(raw_name)
                    accumulate(context, tag_name, action.value)
                    return False
                if action.into is not None:
                    target = action.into
                stop_after = action.stop
                child_cursor = None

        self.statistics.elements_parsed += 1
        element: Dict[str, Any] = {}
        nil_found = False
        converter = None
        token = None

        while True:
            if token is None:
                token = tokenizer.next_token()

            if token.type is TokenType.NAME:
                # attribute = value
                raw_attribute = token.value
                attribute = strategy.rename(raw_attribute)
                token = tokenizer.next_token()
                if token.type is TokenType.EQ:
                    token = tokenizer.next_token()
                    if token.type is not TokenType.NAME:
                        raise tokenizer.syntax_error("Missing value")
                    text = token.value
                    token = None
                    if (config.convert_nil_attribute_to_null
                            and raw_attribute == config.nil_attribute_name
                            and text.lower() == "true"):
                        nil_found = True
                    elif config.xsi_type_converters and raw_attribute == config.type_attribute_name:
                        converter = config.converter_for(text)
                    elif not nil_found:
                        value = text if config.keep_strings else string_to_value(text)
                        self._store_attribute(element, attribute, value, child_cursor)
                else:
                    self._store_attribute(element, attribute, "", child_cursor)

            elif token.type is TokenType.SLASH:
                # Empty tag <.../>
                if tokenizer.next_token().type is not TokenType.GT:
                    raise tokenizer.syntax_error("Misshaped tag")
                if nil_found:
                    accumulate(target, tag_name, None)
                elif element:
                    accumulate(target, tag_name, element)
                else:
                    accumulate(target, tag_name, "")
                break

            elif token.type is TokenType.GT:
                # Content, between <...> and </...>
                child_occurrences: Dict[str, int] = {}
                while True:
                    token = tokenizer.next_content()
                    if token.type is TokenType.END:
                        raise tokenizer.syntax_error(f"Unclosed tag {tag_name}")
                    if token.type is TokenType.TEXT:
                        if token.value and not nil_found:
                            if converter is not None:
                                value = string_to_value(token.value, converter)
                            elif config.keep_strings:
                                value = token.value
                            else:
                                value = string_to_value(token.value)
                            accumulate(element, config.cdata_tag_name, value)
                    elif token.type is TokenType.LT:
                        # Nested element
                        if depth == config.max_nesting_depth:
                            raise tokenizer.syntax_error(
                                f"Maximum nesting depth of {config.max_nesting_depth} reached"
                            )
                        if self._parse(element, tag_name, child_cursor, child_occurrences, depth + 1):
                            accumulate(target, tag_name, self._collapse(element, nil_found))
                            break
                break

            else:
                raise tokenizer.syntax_error("Misshaped tag")

        if stop_after:
            raise _TraversalComplete()
        return False

    def _collapse(self, element: Dict[str, Any], nil_found: bool) -> Any:
        if nil_found:
            return None
        if not element:
            return ""
        if len(element) == 1 and self.config.cdata_tag_name in element:
            return element[self.config.cdata_tag_name]
        return element

    def _store_attribute(
        self,
        element: Dict[str, Any],
        attribute: str,
        value: Any,
        cursor: Optional[int]
    ) -> None:
        if cursor is not None:
            navigation, _ = self.strategy.on_path_step(attribute, cursor, 0, True)
            if navigation is Navigation.SKIP:
                return
            if navigation is Navigation.TERMINATE:
                action: LeafAction = self.strategy.on_leaf(attribute)
                if action.replaces:
                    value = action.value
                elif action.into is not None:
                    accumulate(action.into, attribute, value)
                    if action.stop:
                        raise _TraversalComplete()
                    return
        accumulate(element, attribute, value)

    def _parse_declaration(self, context: Optional[Dict[str, Any]]) -> None:
        """Handle ``<!``: comments, CDATA sections and other declarations.

        CDATA text is merged into ``context`` under the content key unless
        ``context`` is None.
        """
        tokenizer = self.tokenizer
        char = tokenizer.next()
        if char == "-":
            if tokenizer.next() == "-":
                tokenizer.skip_past("-->")
                return
            tokenizer.back()
        elif char == "[":
            token = tokenizer.next_token()
            if token.type is TokenType.NAME and token.value == "CDATA" and tokenizer.next() == "[":
                text = tokenizer.next_cdata().value
                if text and context is not None:
                    accumulate(context, self.config.cdata_tag_name, text)
                return
            raise tokenizer.syntax_error("Expected 'CDATA['")

        depth = 1
        while depth > 0:
            token = tokenizer.next_meta()
            if token.type is TokenType.END:
                raise tokenizer.syntax_error("Missing '>' after '<!'.")
            if token.type is TokenType.LT:
                depth += 1
            elif token.type is TokenType.GT:
                depth -= 1

    def skip_element(self, name: str) -> None:
        """Consume the rest of element ``name`` without building a value.

        The open tag's ``<name`` must already have been read. Nested tags are
        balanced with a stack of names so a mismatched close tag is still
        reported as a syntax error.
        """
        tokenizer = self.tokenizer
        self.statistics.subtrees_skipped += 1

        if self._skip_open_tag():
            return
        open_names = [name]
        while open_names:
            token = tokenizer.next_content()
            if token.type is TokenType.END:
                raise tokenizer.syntax_error(f"Unclosed tag {open_names[-1]}")
            if token.type is not TokenType.LT:
                continue

            token = tokenizer.next_token()
            if token.type is TokenType.BANG:
                self._parse_declaration(None)
            elif token.type is TokenType.QUEST:
                tokenizer.skip_past("?>")
            elif token.type is TokenType.SLASH:
                closing = tokenizer.next_token().value
                if closing != open_names[-1]:
                    raise tokenizer.syntax_error(f"Mismatched {open_names[-1]} and {closing}")
                if tokenizer.next_token().type is not TokenType.GT:
                    raise tokenizer.syntax_error("Misshaped close tag")
                open_names.pop()
            elif token.type is TokenType.NAME:
                if not self._skip_open_tag():
                    open_names.append(token.value)
            else:
                raise tokenizer.syntax_error("Misshaped tag")

    def _skip_open_tag(self) -> bool:
        """Consume attributes up to the end of an open tag.

        Returns:
            True if the tag was self-closing
        """
        tokenizer = self.tokenizer
        while True:
            token = tokenizer.next_token()
            if token.type is TokenType.GT:
                return False
            if token.type is TokenType.SLASH:
                if tokenizer.next_token().type is not TokenType.GT:
                    raise tokenizer.syntax_error("Misshaped tag")
                return True
            if token.type not in (TokenType.NAME, TokenType.EQ):
                raise tokenizer.syntax_error("Misshaped tag")
